"""
Application Layer - Feed use cases.

Contains:
- search: query classification, ranking and the feed aggregation pipeline
"""

from .search.feed_aggregator import AggregationStats, FeedAggregator
from .search.query_classifier import CategoryClassifier, ClassifierPolicy, ProviderQueryPlan

__all__ = [
    "AggregationStats",
    "CategoryClassifier",
    "ClassifierPolicy",
    "FeedAggregator",
    "ProviderQueryPlan",
]
