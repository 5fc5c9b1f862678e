"""
Application DI Container (dependency-injector).

Centralizes creation of the fetcher, provider registry, classifier and
aggregator so the HTTP layer never instantiates services itself.

Usage::

    from media_feed.container import ApplicationContainer
    from media_feed.shared.settings import FeedSettings

    container = ApplicationContainer()
    container.config.from_dict(FeedSettings.from_env().to_dict())

    aggregator = container.aggregator()

    # In tests, override any provider:
    container.aggregator.override(providers.Object(fake_aggregator))
"""

from __future__ import annotations

import logging
import random
from typing import Any

from dependency_injector import containers, providers

from media_feed.shared.settings import FeedSettings

logger = logging.getLogger(__name__)


def _create_settings(values: dict[str, Any] | None) -> FeedSettings:
    """Rebuild typed settings from the container config (env when empty)."""
    if not values:
        return FeedSettings.from_env()
    if "relays" in values:
        values = {**values, "relays": tuple(values["relays"])}
    return FeedSettings(**values)


def _create_fetcher(settings: FeedSettings) -> object:
    """Lazy factory for ResilientFetcher."""
    from media_feed.infrastructure.http.client import ResilientFetcher

    return ResilientFetcher(
        direct_timeout=settings.direct_timeout,
        relay_timeout=settings.relay_timeout,
        relays=settings.relays,
    )


def _create_registry(fetcher: Any, settings: FeedSettings, rng: random.Random) -> object:
    """Lazy factory for ProviderRegistry."""
    from media_feed.infrastructure.sources.registry import ProviderRegistry

    return ProviderRegistry(fetcher, settings=settings, rng=rng)


def _create_classifier(registry: Any, settings: FeedSettings) -> object:
    """Lazy factory for CategoryClassifier."""
    from media_feed.application.search.query_classifier import CategoryClassifier, ClassifierPolicy

    return CategoryClassifier(registry, ClassifierPolicy.from_settings(settings))


def _create_aggregator(
    registry: Any,
    classifier: Any,
    settings: FeedSettings,
    rng: random.Random,
) -> object:
    """Lazy factory for FeedAggregator."""
    from media_feed.application.search.feed_aggregator import FeedAggregator

    return FeedAggregator(
        registry,
        classifier,
        max_results=settings.max_results,
        fallback_size=settings.fallback_size,
        explicit_floor=settings.explicit_floor,
        rng=rng,
    )


class ApplicationContainer(containers.DeclarativeContainer):
    """Central DI container for the Media Feed service.

    Manages creation and lifecycle of all core services:
    - ``settings``: typed FeedSettings rebuilt from ``config``
    - ``rng``: shared random source (ranking, instance rotation)
    - ``fetcher``: ResilientFetcher (direct + relay escalation)
    - ``registry``: static provider call table
    - ``classifier``: query router
    - ``aggregator``: feed pipeline
    """

    config = providers.Configuration()

    settings = providers.Singleton(_create_settings, values=config)

    rng = providers.Singleton(random.Random)

    fetcher = providers.Singleton(_create_fetcher, settings=settings)

    registry = providers.Singleton(
        _create_registry,
        fetcher=fetcher,
        settings=settings,
        rng=rng,
    )

    classifier = providers.Singleton(
        _create_classifier,
        registry=registry,
        settings=settings,
    )

    aggregator = providers.Singleton(
        _create_aggregator,
        registry=registry,
        classifier=classifier,
        settings=settings,
        rng=rng,
    )


__all__ = ["ApplicationContainer"]
