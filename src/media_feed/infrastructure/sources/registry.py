"""
Provider Registry - the static table of upstream calls.

Each ProviderEntry is one (provider, mode) call tagged with the classifier
group that enables it. The table is fixed at construction; the classifier
only selects rows from it.

Usage:
    registry = ProviderRegistry(fetcher, settings=FeedSettings.from_env())
    for entry in registry.entries:
        records = await entry.provider.fetch(query, entry.mode, safety)
"""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from typing import TYPE_CHECKING

from media_feed.domain.entities.media import ContentMode, ProviderGroup, SafetyLevel
from media_feed.shared.settings import FeedSettings

from .adult_reddit import RedditAdultProvider
from .adult_video import (
    BeegProvider,
    EpornerProvider,
    PornDotComProvider,
    PornhubProvider,
    RedGifsProvider,
    SpankBangProvider,
    XHamsterProvider,
    YouPornProvider,
)
from .feeds import CatProvider, DogProvider, NasaApodProvider
from .image_boards import (
    DanbooruProvider,
    GelbooruProvider,
    KonachanProvider,
    RealbooruProvider,
    Rule34Provider,
    TbibProvider,
    YandereProvider,
)
from .social import GiphyProvider, RedditProvider
from .stock import PexelsProvider, PicsumProvider, PixabayProvider
from .web import InvidiousProvider, SearxngProvider

if TYPE_CHECKING:
    from media_feed.infrastructure.http.client import ResilientFetcher

    from .base_provider import MediaProvider

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ProviderEntry:
    """
    One row of the provider table.

    Attributes:
        provider: Adapter instance
        mode: Image or video call
        group: Classifier group that enables this call
        forward_query: False for random-sample feeds called without a query
        safety: Fixed safety level overriding the plan's (None = use plan)
        trigger: Animal sub-trigger (``"dog"`` / ``"cat"``) for animal entries
    """

    provider: MediaProvider
    mode: ContentMode
    group: ProviderGroup
    forward_query: bool = True
    safety: SafetyLevel | None = None
    trigger: str | None = None

    @property
    def name(self) -> str:
        return f"{self.provider.source_tag}:{self.mode.value}"


class ProviderRegistry:
    """
    Builds every provider once and lays out the call table.

    Args:
        fetcher: Shared ResilientFetcher
        settings: API keys; defaults to ``FeedSettings()``
        rng: Random source handed to every provider (instance/mirror rotation)
    """

    def __init__(
        self,
        fetcher: ResilientFetcher,
        settings: FeedSettings | None = None,
        rng: random.Random | None = None,
    ) -> None:
        settings = settings or FeedSettings()
        rng = rng or random.Random()

        self.picsum = PicsumProvider(fetcher, rng)
        self.rule34 = Rule34Provider(fetcher, rng)

        youtube = InvidiousProvider(fetcher, rng)
        web = SearxngProvider(fetcher, rng)
        reddit = RedditProvider(fetcher, rng)
        giphy = GiphyProvider(fetcher, rng, api_key=settings.giphy_api_key)
        pexels = PexelsProvider(fetcher, rng, api_key=settings.pexels_api_key)
        pixabay = PixabayProvider(fetcher, rng, api_key=settings.pixabay_api_key)
        adult_reddit = RedditAdultProvider(fetcher, rng)
        nasa = NasaApodProvider(fetcher, rng, api_key=settings.nasa_api_key)

        generic = ProviderGroup.GENERIC
        animal = ProviderGroup.ANIMAL
        explicit = ProviderGroup.EXPLICIT
        image, video = ContentMode.IMAGE, ContentMode.VIDEO

        entries = [
            # Generic: always dispatched
            ProviderEntry(youtube, video, generic),
            ProviderEntry(web, image, generic),
            ProviderEntry(web, video, generic),
            ProviderEntry(pexels, image, generic),
            ProviderEntry(pixabay, image, generic),
            ProviderEntry(reddit, image, generic),
            ProviderEntry(reddit, video, generic),
            ProviderEntry(giphy, video, generic),
            ProviderEntry(pexels, video, generic),
            ProviderEntry(self.picsum, image, generic, forward_query=False),
            # Themed feeds
            ProviderEntry(nasa, image, ProviderGroup.SPACE, forward_query=False),
            ProviderEntry(DogProvider(fetcher, rng), image, animal, forward_query=False, trigger="dog"),
            ProviderEntry(CatProvider(fetcher, rng), image, animal, forward_query=False, trigger="cat"),
            # Explicit
            ProviderEntry(adult_reddit, image, explicit),
            ProviderEntry(adult_reddit, video, explicit),
            ProviderEntry(self.rule34, image, explicit),
        ]
        entries.extend(
            ProviderEntry(provider_cls(fetcher, rng), image, explicit)
            for provider_cls in (GelbooruProvider, RealbooruProvider, TbibProvider)
        )
        entries.extend(
            ProviderEntry(provider_cls(fetcher, rng), video, explicit)
            for provider_cls in (
                PornhubProvider,
                YouPornProvider,
                PornDotComProvider,
                EpornerProvider,
                XHamsterProvider,
                SpankBangProvider,
                BeegProvider,
                RedGifsProvider,
            )
        )
        entries.extend(
            ProviderEntry(provider_cls(fetcher, rng), image, explicit)
            for provider_cls in (DanbooruProvider, YandereProvider, KonachanProvider)
        )
        entries.extend(
            [
                ProviderEntry(web, image, explicit, safety=SafetyLevel.RELAXED),
                ProviderEntry(web, video, explicit, safety=SafetyLevel.RELAXED),
            ]
        )

        self._entries: tuple[ProviderEntry, ...] = tuple(entries)
        logger.debug(f"Provider registry built with {len(self._entries)} calls")

    @property
    def entries(self) -> tuple[ProviderEntry, ...]:
        return self._entries

    @property
    def providers(self) -> list[MediaProvider]:
        """Distinct adapter instances, in table order."""
        seen: dict[int, MediaProvider] = {}
        for entry in self._entries:
            seen.setdefault(id(entry.provider), entry.provider)
        return list(seen.values())

    def __len__(self) -> int:
        return len(self.providers)
