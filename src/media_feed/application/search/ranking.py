"""
Feed ranking and deduplication.

There is no relevance scoring: upstream providers already rank their own
results, and the feed is meant to feel varied. Ranking is therefore a
shuffle, optionally partitioned so that videos come first.

Randomness always comes from a caller-supplied ``random.Random`` so the
order is reproducible under a fixed seed.
"""

from __future__ import annotations

import random
from collections.abc import Iterable

from media_feed.domain.entities.media import MediaRecord


def deduplicate(records: Iterable[MediaRecord]) -> list[MediaRecord]:
    """
    Drop records whose id was already seen; first occurrence wins.

    Input order is preserved for the survivors.
    """
    seen: set[str] = set()
    unique: list[MediaRecord] = []
    for record in records:
        if record.id in seen:
            continue
        seen.add(record.id)
        unique.append(record)
    return unique


def drop_incomplete(records: Iterable[MediaRecord]) -> list[MediaRecord]:
    """Keep only records with a thumbnail."""
    return [r for r in records if r.thumbnail_url]


def rank_records(
    records: list[MediaRecord],
    *,
    video_first: bool,
    rng: random.Random,
) -> list[MediaRecord]:
    """
    Order records for display.

    Args:
        records: Deduplicated records
        video_first: Put every video before every image
        rng: Random source for the shuffle

    Returns:
        A new, reordered list (input is not modified)
    """
    if not video_first:
        shuffled = list(records)
        rng.shuffle(shuffled)
        return shuffled

    videos = [r for r in records if r.is_video]
    images = [r for r in records if not r.is_video]
    rng.shuffle(videos)
    rng.shuffle(images)
    return videos + images
