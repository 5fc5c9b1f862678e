"""
Base Media Provider - Common adapter pattern for every upstream source.

Eliminates duplicated boilerplate across ~25 provider adapters by providing
a reusable base class with:
- Capability checks (search / trending / image / video)
- Query term resolution (placeholder and hentai substitution)
- A never-raises ``fetch()`` boundary
- A per-provider RecordNormalizer with documented default dimensions
"""

from __future__ import annotations

import logging
import random
from enum import Enum
from typing import TYPE_CHECKING, Any, TypeVar

from media_feed.domain.entities.media import ContentMode, MediaRecord, SafetyLevel

from .normalizer import RecordNormalizer

if TYPE_CHECKING:
    from collections.abc import Sequence

    from media_feed.infrastructure.http.client import ResilientFetcher

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Queries that carry no subject of their own; providers swap in their
# trending/default term instead of searching for them literally.
PLACEHOLDER_TOKENS: frozenset[str] = frozenset({"18+", "nsfw", "porn", "all", "adult", "sex", "trending"})

HENTAI_TOKEN = "hentai"


class Capability(str, Enum):
    """What a provider can be asked for."""

    SEARCH = "search"  # free-text query
    TRENDING = "trending"  # default feed when there is no query
    IMAGE = "image"
    VIDEO = "video"


def normalize_query(query: str | None) -> str:
    return (query or "").strip()


def is_hentai_query(query: str | None) -> bool:
    return HENTAI_TOKEN in normalize_query(query).lower()


def is_placeholder_query(query: str | None) -> bool:
    q = normalize_query(query).lower()
    return not q or q in PLACEHOLDER_TOKENS


class MediaProvider:
    """
    Base class for upstream media providers.

    Subclasses set the class attributes and implement ``_fetch()``:

    - ``tag``: id prefix, unique across providers
    - ``source_tag``: human-readable name shown on the UI badge
    - ``capabilities``: supported Capability set
    - ``default_height`` / ``default_width``: used when upstream omits sizes
    - ``default_term``: substituted for empty/placeholder queries
    - ``hentai_term``: substituted for hentai queries (None = search literally)

    Example:
        class MyProvider(MediaProvider):
            tag = "my"
            source_tag = "MySource"
            capabilities = frozenset({Capability.SEARCH, Capability.IMAGE})

            async def _fetch(self, query, mode, safety):
                data = await self._get_json(f"https://api.example.com/?q={query}")
                ...
    """

    tag: str = ""
    source_tag: str = ""
    capabilities: frozenset[Capability] = frozenset()
    default_height: int = 800
    default_width: int = 600
    default_term: str = "trending"
    hentai_term: str | None = None

    def __init__(
        self,
        fetcher: ResilientFetcher,
        rng: random.Random | None = None,
    ) -> None:
        self._fetcher = fetcher
        self._rng = rng or random.Random()
        self.normalizer = RecordNormalizer(
            self.tag,
            self.source_tag,
            default_height=self.default_height,
            default_width=self.default_width,
        )

    def __repr__(self) -> str:
        return f"{type(self).__name__}(tag={self.tag!r})"

    def supports(self, query: str | None, mode: ContentMode) -> bool:
        """Whether this (query, mode) combination is something the provider can serve."""
        wanted = Capability.SEARCH if normalize_query(query) else Capability.TRENDING
        media = Capability.VIDEO if mode is ContentMode.VIDEO else Capability.IMAGE
        return wanted in self.capabilities and media in self.capabilities

    def resolve_term(self, query: str | None) -> str:
        """Provider-specific search term for a free-text query."""
        q = normalize_query(query)
        if self.hentai_term is not None and is_hentai_query(q):
            return self.hentai_term
        if is_placeholder_query(q):
            return self.default_term
        return self.format_term(q)

    def format_term(self, query: str) -> str:
        """Hook for providers with their own query syntax (e.g. booru tags)."""
        return query

    async def fetch(
        self,
        query: str | None = None,
        mode: ContentMode = ContentMode.IMAGE,
        safety: SafetyLevel = SafetyLevel.STRICT,
    ) -> list[MediaRecord]:
        """
        Fetch and normalize records. Never raises.

        Args:
            query: Free-text query (None/empty = trending feed)
            mode: Image or video request
            safety: Upstream safe-search mode

        Returns:
            Records with thumbnails; empty on any failure or unsupported combination
        """
        if not self.supports(query, mode):
            return []
        try:
            records = await self._fetch(query, mode, safety)
        except Exception as e:
            logger.warning(f"{self.source_tag} {mode.value} fetch failed: {e}")
            return []
        return [r for r in records if r.thumbnail_url]

    async def _fetch(
        self,
        query: str | None,
        mode: ContentMode,
        safety: SafetyLevel,
    ) -> list[MediaRecord]:
        raise NotImplementedError

    async def _get_json(self, url: str, headers: dict[str, str] | None = None) -> Any | None:
        return await self._fetcher.fetch(url, headers=headers)

    def _choice(self, options: Sequence[T]) -> T:
        """Random pick used for instance/mirror rotation."""
        return self._rng.choice(options)
