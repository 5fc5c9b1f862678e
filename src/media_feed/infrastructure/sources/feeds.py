"""
Themed Feed Providers - NASA APOD, Dog CEO and The Cat API.

These are random-sample feeds rather than search engines: they take no
query and are only dispatched when the classifier detects a matching
theme (space, dog, cat).
"""

from __future__ import annotations

import logging
import random
from typing import TYPE_CHECKING, Any

from media_feed.domain.entities.media import ContentMode, MediaRecord, SafetyLevel

from .base_provider import Capability, MediaProvider
from .normalizer import dig, native_id_from_url

if TYPE_CHECKING:
    from media_feed.infrastructure.http.client import ResilientFetcher

logger = logging.getLogger(__name__)

NASA_APOD_URL = "https://api.nasa.gov/planetary/apod"
DOG_CEO_URL = "https://dog.ceo/api/breeds/image/random"
CAT_API_URL = "https://api.thecatapi.com/v1/images/search"

FEED_CAPABILITIES = frozenset({Capability.TRENDING, Capability.IMAGE})


class NasaApodProvider(MediaProvider):
    """
    Random Astronomy Pictures of the Day.

    APOD entries whose ``media_type`` is not ``image`` (embedded videos)
    are skipped.
    """

    tag = "nasa"
    source_tag = "NASA"
    capabilities = FEED_CAPABILITIES
    default_height = 1080
    default_width = 1920
    count = 10

    def __init__(
        self,
        fetcher: ResilientFetcher,
        rng: random.Random | None = None,
        api_key: str = "DEMO_KEY",
    ) -> None:
        super().__init__(fetcher, rng)
        self._api_key = api_key

    async def _fetch(self, query: str | None, mode: ContentMode, safety: SafetyLevel) -> list[MediaRecord]:
        data = await self._get_json(f"{NASA_APOD_URL}?api_key={self._api_key}&count={self.count}")
        if not isinstance(data, list):
            return []
        entries = [e for e in data if isinstance(e, dict) and e.get("media_type") == "image" and e.get("url")]
        return self.normalizer.build_many(entries, self._map_entry)

    def _map_entry(self, entry: dict[str, Any]) -> MediaRecord | None:
        return self.normalizer.build(
            entry.get("date"),
            thumbnail=entry["url"],
            title=entry.get("title"),
            default_title="NASA Image",
            link=entry.get("hdurl") or entry["url"],
        )


class DogProvider(MediaProvider):
    """Random dog photos; Dog CEO returns bare URLs, so ids are URL hashes."""

    tag = "dog"
    source_tag = "Dogs"
    capabilities = FEED_CAPABILITIES
    count = 10

    async def _fetch(self, query: str | None, mode: ContentMode, safety: SafetyLevel) -> list[MediaRecord]:
        data = await self._get_json(f"{DOG_CEO_URL}/{self.count}")
        urls = dig(data, "message")
        if not isinstance(urls, list):
            return []
        return self.normalizer.build_many(urls, self._map_url)

    def _map_url(self, url: str) -> MediaRecord | None:
        return self.normalizer.build(
            native_id_from_url(url),
            thumbnail=url,
            title="Adorable Dog",
            author="Dog Lovers",
            link=url,
        )


class CatProvider(MediaProvider):
    """Random cat photos."""

    tag = "cat"
    source_tag = "Cats"
    capabilities = FEED_CAPABILITIES
    count = 10

    async def _fetch(self, query: str | None, mode: ContentMode, safety: SafetyLevel) -> list[MediaRecord]:
        data = await self._get_json(f"{CAT_API_URL}?limit={self.count}")
        if not isinstance(data, list):
            return []
        return self.normalizer.build_many(data, self._map_cat)

    def _map_cat(self, cat: dict[str, Any]) -> MediaRecord | None:
        return self.normalizer.build(
            cat.get("id"),
            thumbnail=cat.get("url"),
            title="Cute Cat",
            height=cat.get("height"),
            width=cat.get("width"),
            author="Cat Lovers",
            link=cat.get("url"),
        )
