"""
Feed Search Pipeline

Key Components:
- CategoryClassifier: routes a query to provider groups and a safety level
- FeedAggregator: concurrent fan-out, merge, dedup, rank, truncate
- ranking: deduplication and video-first / shuffled ordering

Architecture:
    User Query
        │
        ▼
    ┌────────────────────┐
    │ CategoryClassifier │  ← groups, safety level, video focus
    └─────────┬──────────┘
              │ ProviderQueryPlan
              ▼
    ┌────────────────────┐
    │  ProviderRegistry  │  ← static (provider, mode, group) table
    └─────────┬──────────┘
              │
    ┌─────────┼──────────┐
    ▼         ▼          ▼
  Generic  Themed    Explicit   ← Parallel, settle-all
    │         │          │
    └─────────┴──────────┘
              │
              ▼
    ┌────────────────────┐
    │   FeedAggregator   │  ← dedup + rank + truncate
    └─────────┬──────────┘
              │
              ▼
       MediaRecord[]
"""

from __future__ import annotations

from .feed_aggregator import AggregationStats, FeedAggregator
from .query_classifier import CategoryClassifier, ClassifierPolicy, ProviderQueryPlan
from .ranking import deduplicate, drop_incomplete, rank_records

__all__ = [
    "AggregationStats",
    "CategoryClassifier",
    "ClassifierPolicy",
    "FeedAggregator",
    "ProviderQueryPlan",
    "deduplicate",
    "drop_incomplete",
    "rank_records",
]
