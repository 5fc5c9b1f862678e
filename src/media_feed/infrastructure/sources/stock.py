"""
Stock Media Providers - Pexels, Pixabay and Picsum.

Pexels and Pixabay need API keys (``PEXELS_API_KEY`` / ``PIXABAY_API_KEY``);
without one they quietly return nothing. Picsum never touches the network
and doubles as the placeholder source when the whole pipeline fails.

API Documentation:
- Pexels: https://www.pexels.com/api/documentation/
- Pixabay: https://pixabay.com/api/docs/
- Picsum: https://picsum.photos/
"""

from __future__ import annotations

import logging
import random
import urllib.parse
from typing import TYPE_CHECKING, Any

from media_feed.domain.entities.media import ContentMode, MediaRecord, MediaType, SafetyLevel

from .base_provider import Capability, MediaProvider, normalize_query
from .normalizer import dig

if TYPE_CHECKING:
    from media_feed.infrastructure.http.client import ResilientFetcher

logger = logging.getLogger(__name__)

PEXELS_PHOTOS_URL = "https://api.pexels.com/v1/search"
PEXELS_VIDEOS_URL = "https://api.pexels.com/videos/search"
PIXABAY_API_URL = "https://pixabay.com/api/"

# Picsum serves ids 0-999
PICSUM_ID_SPACE = 1000


class PexelsProvider(MediaProvider):
    """
    Pexels photo and video search.

    Photos map to ``pexels-{id}``; videos to ``pexels-video-{id}`` so the
    two collections can never collide.
    """

    tag = "pexels"
    source_tag = "Pexels"
    capabilities = frozenset(
        {Capability.SEARCH, Capability.TRENDING, Capability.IMAGE, Capability.VIDEO}
    )
    default_height = 1080
    default_width = 1920
    default_term = "nature"
    photo_page_size = 25
    video_page_size = 15

    def __init__(
        self,
        fetcher: ResilientFetcher,
        rng: random.Random | None = None,
        api_key: str = "",
    ) -> None:
        super().__init__(fetcher, rng)
        self._api_key = api_key

    async def _fetch(self, query: str | None, mode: ContentMode, safety: SafetyLevel) -> list[MediaRecord]:
        if not self._api_key:
            logger.debug("Pexels: no API key configured, skipping")
            return []

        term = normalize_query(query) or self.default_term
        headers = {"Authorization": self._api_key}

        if mode is ContentMode.VIDEO:
            params = urllib.parse.urlencode({"query": term, "per_page": self.video_page_size})
            data = await self._get_json(f"{PEXELS_VIDEOS_URL}?{params}", headers=headers)
            videos = dig(data, "videos")
            if not isinstance(videos, list):
                return []
            return self.normalizer.build_many(videos, self._map_video)

        params = urllib.parse.urlencode({"query": term, "per_page": self.photo_page_size})
        data = await self._get_json(f"{PEXELS_PHOTOS_URL}?{params}", headers=headers)
        photos = dig(data, "photos")
        if not isinstance(photos, list):
            return []
        return self.normalizer.build_many(photos, lambda photo: self._map_photo(photo, term))

    def _map_photo(self, photo: dict[str, Any], term: str) -> MediaRecord | None:
        return self.normalizer.build(
            photo.get("id"),
            thumbnail=dig(photo, "src", "large"),
            title=photo.get("alt"),
            default_title=f"{term} Photo",
            height=photo.get("height"),
            width=photo.get("width"),
            author=photo.get("photographer"),
            link=photo.get("url"),
        )

    def _map_video(self, video: dict[str, Any]) -> MediaRecord | None:
        user_name = dig(video, "user", "name")
        return self.normalizer.build(
            video.get("id"),
            tag=f"{self.tag}-video",
            thumbnail=video.get("image"),
            title=f"Video by {user_name}" if user_name else None,
            default_title="Pexels Video",
            media_type=MediaType.VIDEO,
            video=dig(video, "video_files", 0, "link"),
            height=video.get("height"),
            width=video.get("width"),
            author=user_name,
            link=video.get("url"),
        )


class PixabayProvider(MediaProvider):
    """Pixabay photo search (safe-search always on)."""

    tag = "pixabay"
    source_tag = "Pixabay"
    capabilities = frozenset({Capability.SEARCH, Capability.TRENDING, Capability.IMAGE})
    default_height = 1080
    default_width = 1920
    default_term = "nature"
    page_size = 30

    def __init__(
        self,
        fetcher: ResilientFetcher,
        rng: random.Random | None = None,
        api_key: str = "",
    ) -> None:
        super().__init__(fetcher, rng)
        self._api_key = api_key

    async def _fetch(self, query: str | None, mode: ContentMode, safety: SafetyLevel) -> list[MediaRecord]:
        if not self._api_key:
            logger.debug("Pixabay: no API key configured, skipping")
            return []

        params = urllib.parse.urlencode(
            {
                "key": self._api_key,
                "q": normalize_query(query) or self.default_term,
                "image_type": "photo",
                "per_page": self.page_size,
                "safesearch": "true",
            }
        )
        data = await self._get_json(f"{PIXABAY_API_URL}?{params}")
        hits = dig(data, "hits")
        if not isinstance(hits, list):
            return []
        return self.normalizer.build_many(hits, self._map_hit)

    def _map_hit(self, hit: dict[str, Any]) -> MediaRecord | None:
        return self.normalizer.build(
            hit.get("id"),
            thumbnail=hit.get("largeImageURL") or hit.get("webformatURL"),
            title=hit.get("tags"),
            default_title="Pixabay Image",
            height=hit.get("imageHeight"),
            width=hit.get("imageWidth"),
            author=hit.get("user"),
            avatar=hit.get("userImageURL"),
            link=hit.get("pageURL"),
        )


class PicsumProvider(MediaProvider):
    """
    Synthetic placeholder images from picsum.photos.

    No network call is made; records are generated from random ids drawn
    without replacement, so a batch never repeats an id.

    Args:
        count: Batch size served through ``fetch()``
    """

    tag = "picsum"
    source_tag = "Picsum"
    capabilities = frozenset({Capability.TRENDING, Capability.IMAGE})
    default_height = 1200
    default_width = 800

    def __init__(
        self,
        fetcher: ResilientFetcher | None = None,
        rng: random.Random | None = None,
        count: int = 10,
    ) -> None:
        super().__init__(fetcher, rng)
        self.count = count

    async def _fetch(self, query: str | None, mode: ContentMode, safety: SafetyLevel) -> list[MediaRecord]:
        return self.generate(self.count)

    def generate(self, count: int) -> list[MediaRecord]:
        """
        Build ``count`` placeholder records (capped at the Picsum id space).

        Example:
            >>> records = PicsumProvider(rng=random.Random(7)).generate(3)
            >>> len({r.id for r in records})
            3
        """
        ids = self._rng.sample(range(PICSUM_ID_SPACE), min(max(count, 0), PICSUM_ID_SPACE))
        records: list[MediaRecord] = []
        for picsum_id in ids:
            record = self.normalizer.build(
                picsum_id,
                thumbnail=f"https://picsum.photos/id/{picsum_id}/{self.default_width}/{self.default_height}",
                title="Creative Inspiration",
                link="https://picsum.photos",
            )
            if record is not None:
                records.append(record)
        return records
