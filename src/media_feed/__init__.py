"""
Media Feed - Aggregated image/video feed from public media APIs.

Given a free-text query, concurrently queries ~25 heterogeneous providers,
normalizes their responses into one record shape, deduplicates, ranks and
returns at most 120 records, tolerating failure of any provider subset.

Usage:
    from media_feed import ApplicationContainer, FeedSettings

    container = ApplicationContainer()
    container.config.from_dict(FeedSettings.from_env().to_dict())

    records = await container.aggregator().aggregate("golden retriever")
    for record in records:
        print(f"{record.source_tag}: {record.title}")

Features:
    - Direct fetch with parallel relay escalation
    - Query-driven provider routing (generic, animal, space, explicit)
    - Settle-all fan-out; a failing provider never fails the request
    - Placeholder fallback so a response is never empty
"""

from .application.search.feed_aggregator import AggregationStats, FeedAggregator
from .application.search.query_classifier import CategoryClassifier, ClassifierPolicy
from .container import ApplicationContainer
from .domain.entities.media import MediaRecord, MediaType, SafetyLevel
from .infrastructure.http.client import ResilientFetcher
from .infrastructure.sources.registry import ProviderRegistry
from .shared.settings import FeedSettings

__version__ = "0.1.0"

__all__ = [
    # Pipeline
    "FeedAggregator",
    "AggregationStats",
    "CategoryClassifier",
    "ClassifierPolicy",
    "ProviderRegistry",
    "ResilientFetcher",
    # Domain
    "MediaRecord",
    "MediaType",
    "SafetyLevel",
    # Wiring
    "ApplicationContainer",
    "FeedSettings",
]
