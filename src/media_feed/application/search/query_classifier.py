"""
CategoryClassifier - Query routing for the feed aggregator.

This module inspects the free-text query to decide:
1. Which provider groups to dispatch (generic, animal, space, explicit)
2. Which safety level upstream searches run with
3. Whether the feed should be ranked video-first

Architecture Decision:
    CategoryClassifier is stateless and purely local (substring/regex
    heuristics, no API calls). It never calls providers itself; it returns a
    ProviderQueryPlan that the FeedAggregator executes.

    Theme detection is substring based, so "dogs", "kittens" and
    "starry night" all route to their themed feeds.

Example:
    >>> classifier = CategoryClassifier(registry)
    >>> plan = classifier.classify("cat")
    >>> sorted(g.value for g in plan.groups)
    ['animal', 'generic']
    >>> plan.safety_level
    <SafetyLevel.STRICT: 'strict'>
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from media_feed.domain.entities.media import ProviderGroup, SafetyLevel
from media_feed.infrastructure.sources.base_provider import is_hentai_query, normalize_query

if TYPE_CHECKING:
    from media_feed.infrastructure.sources.registry import ProviderEntry, ProviderRegistry
    from media_feed.shared.settings import FeedSettings

logger = logging.getLogger(__name__)

ANIMAL_PATTERN = re.compile(r"dog|puppy|cat|kitten|pet|animal")
DOG_PATTERN = re.compile(r"dog|puppy")
CAT_PATTERN = re.compile(r"cat|kitten")
SPACE_PATTERN = re.compile(r"space|nasa|galaxy|planet|star|universe")

# Whole-query explicit markers
EXPLICIT_EXACT = frozenset({"18+", "porn", "hentai", "nsfw", "sex", "x", "adult"})
# Substring explicit markers
EXPLICIT_CONTAINS = ("porn", "hentai", "18+", "nsfw", "adult")

# Query handed to the explicit group when the caller gave none
EXPLICIT_DEFAULT_QUERY = "18+"


def has_explicit_marker(query: str) -> bool:
    q = normalize_query(query).lower()
    return q in EXPLICIT_EXACT or any(marker in q for marker in EXPLICIT_CONTAINS)


def is_video_focused(query: str) -> bool:
    q = normalize_query(query).lower()
    return q == "videos" or "video" in q


@dataclass(frozen=True)
class ClassifierPolicy:
    """
    Tunable routing policy.

    Attributes:
        broad_net_min_length: Queries longer than this also dispatch the
            explicit group even without an explicit marker (None disables)
        explicit_enabled: Master switch for the explicit group
    """

    broad_net_min_length: int | None = 3
    explicit_enabled: bool = True

    @classmethod
    def from_settings(cls, settings: FeedSettings) -> ClassifierPolicy:
        return cls(
            broad_net_min_length=settings.broad_net_min_length,
            explicit_enabled=settings.explicit_enabled,
        )


@dataclass(frozen=True)
class ProviderQueryPlan:
    """
    Ephemeral routing decision for one request.

    ``query`` keeps the caller's casing (providers search with it);
    detection flags are computed on the lower-cased form.
    """

    query: str
    safety_level: SafetyLevel
    entries: tuple[ProviderEntry, ...] = ()
    is_animal: bool = False
    is_dog: bool = False
    is_cat: bool = False
    is_space: bool = False
    is_explicit_query: bool = False
    explicit_dispatched: bool = False
    video_focused: bool = False
    groups: frozenset[ProviderGroup] = field(default_factory=frozenset)

    @property
    def explicit_query(self) -> str:
        return self.query or EXPLICIT_DEFAULT_QUERY

    @property
    def is_hentai(self) -> bool:
        return is_hentai_query(self.query)

    def query_for(self, entry: ProviderEntry) -> str | None:
        """Query string one plan entry is called with."""
        if not entry.forward_query:
            return None
        if entry.group is ProviderGroup.EXPLICIT:
            return self.explicit_query
        return self.query or None

    def safety_for(self, entry: ProviderEntry) -> SafetyLevel:
        return entry.safety or self.safety_level

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary (for logging)."""
        return {
            "query": self.query,
            "safety_level": self.safety_level.value,
            "groups": sorted(g.value for g in self.groups),
            "is_animal": self.is_animal,
            "is_dog": self.is_dog,
            "is_cat": self.is_cat,
            "is_space": self.is_space,
            "is_explicit_query": self.is_explicit_query,
            "explicit_dispatched": self.explicit_dispatched,
            "video_focused": self.video_focused,
            "entries": [e.name for e in self.entries],
        }


class CategoryClassifier:
    """
    Maps a query to a ProviderQueryPlan.

    Routing:
    - generic providers: always
    - animal feeds: query mentions dog/puppy/cat/kitten/pet/animal; the dog
      feed needs dog|puppy and the cat feed cat|kitten
    - space feed: space/nasa/galaxy/planet/star/universe
    - explicit group: explicit marker, or a query longer than
      ``broad_net_min_length`` (subject to ``explicit_enabled``)

    Safety is RELAXED for explicit-marker queries, STRICT otherwise, unless
    the caller passes ``safety_level``.

    Usage:
        classifier = CategoryClassifier(registry, ClassifierPolicy(broad_net_min_length=None))
        plan = classifier.classify("golden retriever")
    """

    def __init__(self, registry: ProviderRegistry, policy: ClassifierPolicy | None = None):
        self._registry = registry
        self._policy = policy or ClassifierPolicy()

    def classify(self, query: str | None, safety_level: SafetyLevel | None = None) -> ProviderQueryPlan:
        """
        Analyze a query and select provider calls.

        Args:
            query: Raw free-text query (None/empty = trending feed)
            safety_level: Caller override for the derived safety level

        Returns:
            ProviderQueryPlan with the ordered entries to dispatch
        """
        q = normalize_query(query)
        lowered = q.lower()

        is_animal = bool(ANIMAL_PATTERN.search(lowered))
        is_dog = is_animal and bool(DOG_PATTERN.search(lowered))
        is_cat = is_animal and bool(CAT_PATTERN.search(lowered))
        is_space = bool(SPACE_PATTERN.search(lowered))
        is_explicit_query = has_explicit_marker(lowered)
        explicit_dispatched = self._policy.explicit_enabled and (
            is_explicit_query or self._is_broad_net(lowered)
        )

        groups = {ProviderGroup.GENERIC}
        if is_animal:
            groups.add(ProviderGroup.ANIMAL)
        if is_space:
            groups.add(ProviderGroup.SPACE)
        if explicit_dispatched:
            groups.add(ProviderGroup.EXPLICIT)

        triggers = {name for name, hit in (("dog", is_dog), ("cat", is_cat)) if hit}
        entries = tuple(
            entry
            for entry in self._registry.entries
            if entry.group in groups and (entry.trigger is None or entry.trigger in triggers)
        )

        derived = SafetyLevel.RELAXED if is_explicit_query else SafetyLevel.STRICT
        plan = ProviderQueryPlan(
            query=q,
            safety_level=safety_level or derived,
            entries=entries,
            is_animal=is_animal,
            is_dog=is_dog,
            is_cat=is_cat,
            is_space=is_space,
            is_explicit_query=is_explicit_query,
            explicit_dispatched=explicit_dispatched,
            video_focused=is_video_focused(lowered),
            groups=frozenset(groups),
        )
        logger.debug(f"Classified {q!r}: {plan.to_dict()}")
        return plan

    def _is_broad_net(self, lowered: str) -> bool:
        threshold = self._policy.broad_net_min_length
        return threshold is not None and len(lowered) > threshold
