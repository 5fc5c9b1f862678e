"""
FeedAggregator - Concurrent multi-provider feed assembly.

Pipeline for one request:
1. Classify the query into a ProviderQueryPlan
2. Dispatch every plan entry concurrently (settle-all, never fail-fast)
3. Concatenate successful results
4. Explicit-branch floor: if the explicit group yielded fewer than
   ``explicit_floor`` records, run one emergency Rule34 query and merge it
5. Deduplicate by id (first occurrence wins)
6. Drop records without a thumbnail
7. Rank (video-first or uniform shuffle)
8. Truncate to ``max_results``

Degradation:
- a failing provider only loses its own records
- when no networked provider returns anything, the response is a full
  placeholder batch of ``fallback_size`` Picsum records
- any exception inside the pipeline itself also yields the placeholder batch

Usage:
    aggregator = FeedAggregator(registry, CategoryClassifier(registry))
    records = await aggregator.aggregate("golden retriever")
    records, stats = await aggregator.aggregate_with_stats("videos")
"""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from media_feed.domain.entities.media import MediaRecord, ProviderGroup, SafetyLevel
from media_feed.shared.async_utils import gather_settled, split_outcomes
from media_feed.shared.exceptions import ProviderError

from .query_classifier import CategoryClassifier, ProviderQueryPlan
from .ranking import deduplicate, drop_incomplete, rank_records

if TYPE_CHECKING:
    from media_feed.infrastructure.sources.registry import ProviderRegistry

logger = logging.getLogger(__name__)

# Emergency Rule34 terms for the explicit-branch floor
FLOOR_HENTAI_TERM = "hentai"
FLOOR_DEFAULT_TERM = "rating:explicit"


@dataclass
class AggregationStats:
    """Statistics from one aggregation request."""

    query: str = ""
    dispatched: int = 0
    total_input: int = 0
    unique_records: int = 0
    duplicates_removed: int = 0
    dropped_incomplete: int = 0
    returned: int = 0
    images: int = 0
    videos: int = 0
    explicit_records: int = 0
    explicit_floor_triggered: bool = False
    fallback_used: bool = False
    by_source: dict[str, int] = field(default_factory=dict)
    failed_providers: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "query": self.query,
            "dispatched": self.dispatched,
            "total_input": self.total_input,
            "unique_records": self.unique_records,
            "duplicates_removed": self.duplicates_removed,
            "dropped_incomplete": self.dropped_incomplete,
            "returned": self.returned,
            "images": self.images,
            "videos": self.videos,
            "explicit_records": self.explicit_records,
            "explicit_floor_triggered": self.explicit_floor_triggered,
            "fallback_used": self.fallback_used,
            "by_source": self.by_source,
            "failed_providers": self.failed_providers,
        }


class FeedAggregator:
    """
    Runs a ProviderQueryPlan and assembles the ranked feed.

    Args:
        registry: Provider table (also supplies the Picsum and Rule34 adapters)
        classifier: Query router; defaults to one over ``registry``
        max_results: Response size cap
        fallback_size: Placeholder batch size on total failure
        explicit_floor: Minimum explicit-group records before the emergency query
        rng: Random source for ranking
    """

    def __init__(
        self,
        registry: ProviderRegistry,
        classifier: CategoryClassifier | None = None,
        *,
        max_results: int = 120,
        fallback_size: int = 25,
        explicit_floor: int = 5,
        rng: random.Random | None = None,
    ):
        self._registry = registry
        self._classifier = classifier or CategoryClassifier(registry)
        self._max_results = max_results
        self._fallback_size = fallback_size
        self._explicit_floor = explicit_floor
        self._rng = rng or random.Random()

    async def aggregate(
        self,
        query: str | None = None,
        safety_level: SafetyLevel | None = None,
    ) -> list[MediaRecord]:
        """
        Build the feed for ``query``. Never raises.

        Args:
            query: Free-text query (None/empty = trending)
            safety_level: Caller override for the classifier's safety level

        Returns:
            At most ``max_results`` records with distinct ids and thumbnails
        """
        records, _ = await self.aggregate_with_stats(query, safety_level)
        return records

    async def aggregate_with_stats(
        self,
        query: str | None = None,
        safety_level: SafetyLevel | None = None,
    ) -> tuple[list[MediaRecord], AggregationStats]:
        """Like ``aggregate()`` but also returns AggregationStats."""
        try:
            return await self._run(query, safety_level)
        except Exception as e:
            logger.error(f"Aggregation failed for {query!r}, serving placeholders: {e}")
            records = self.placeholder_batch()
            stats = AggregationStats(
                query=query or "",
                returned=len(records),
                images=len(records),
                fallback_used=True,
            )
            return records, stats

    def placeholder_batch(self) -> list[MediaRecord]:
        return self._registry.picsum.generate(self._fallback_size)

    # =========================================================================
    # Pipeline
    # =========================================================================

    async def _run(
        self,
        query: str | None,
        safety_level: SafetyLevel | None,
    ) -> tuple[list[MediaRecord], AggregationStats]:
        plan = self._classifier.classify(query, safety_level)
        stats = AggregationStats(query=plan.query, dispatched=len(plan.entries))
        logger.info(f"Aggregating {plan.query or 'trending'!r}: {len(plan.entries)} provider calls")

        collected = await self._dispatch(plan, stats)

        if plan.explicit_dispatched and stats.explicit_records < self._explicit_floor:
            collected.extend(await self._explicit_floor_records(plan, stats))

        placeholder_source = self._registry.picsum.source_tag
        if not any(r.source_tag != placeholder_source for r in collected):
            logger.warning(f"No provider returned records for {plan.query!r}, serving placeholders")
            collected = self.placeholder_batch()
            stats.fallback_used = True

        stats.total_input = len(collected)
        for record in collected:
            stats.by_source[record.source_tag] = stats.by_source.get(record.source_tag, 0) + 1

        unique = deduplicate(collected)
        stats.unique_records = len(unique)
        stats.duplicates_removed = stats.total_input - stats.unique_records

        complete = drop_incomplete(unique)
        stats.dropped_incomplete = len(unique) - len(complete)

        ranked = rank_records(complete, video_first=plan.video_focused, rng=self._rng)
        final = ranked[: self._max_results]

        stats.returned = len(final)
        stats.videos = sum(1 for r in final if r.is_video)
        stats.images = stats.returned - stats.videos
        logger.info(
            f"Returning {stats.returned} records ({stats.images} images, {stats.videos} videos) "
            f"for {plan.query or 'trending'!r}"
        )
        logger.debug(f"Aggregation stats: {stats.to_dict()}")
        return final, stats

    async def _dispatch(self, plan: ProviderQueryPlan, stats: AggregationStats) -> list[MediaRecord]:
        outcomes = await gather_settled(
            *(
                entry.provider.fetch(plan.query_for(entry), entry.mode, plan.safety_for(entry))
                for entry in plan.entries
            )
        )

        successes, failures = split_outcomes(outcomes)

        for index, exc in failures:
            entry = plan.entries[index]
            error = ProviderError(entry.name, str(exc))
            logger.warning(f"Provider call failed: {error.to_dict()}")
            stats.failed_providers.append(entry.name)

        collected: list[MediaRecord] = []
        for index, outcome in successes:
            entry = plan.entries[index]
            collected.extend(outcome)
            if entry.group is ProviderGroup.EXPLICIT:
                stats.explicit_records += len(outcome)
        return collected

    async def _explicit_floor_records(
        self,
        plan: ProviderQueryPlan,
        stats: AggregationStats,
    ) -> list[MediaRecord]:
        term = FLOOR_HENTAI_TERM if plan.is_hentai else FLOOR_DEFAULT_TERM
        logger.info(
            f"Explicit group returned {stats.explicit_records} records "
            f"(< {self._explicit_floor}), querying Rule34 for {term!r}"
        )
        stats.explicit_floor_triggered = True
        return await self._registry.rule34.fetch(term)
