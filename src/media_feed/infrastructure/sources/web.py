"""
Web Video & Search Providers

- YouTube via public Invidious instances (keyless)
- Image/video web search via public SearXNG instances

Both rotate across community-run instances per request because any single
instance is frequently rate limited (HTTP 429) or offline.

API Documentation:
- Invidious: https://docs.invidious.io/api/
- SearXNG: https://docs.searxng.org/dev/search_api.html
"""

from __future__ import annotations

import logging
import urllib.parse
from typing import Any

from media_feed.domain.entities.media import ContentMode, MediaRecord, MediaType, SafetyLevel

from .base_provider import Capability, MediaProvider, normalize_query
from .normalizer import dig, first_present, native_id_from_url

logger = logging.getLogger(__name__)

INVIDIOUS_INSTANCES = (
    "https://inv.tux.pizza",
    "https://vid.puffyan.us",
    "https://invidious.drgns.space",
)

SEARXNG_INSTANCES = (
    "https://searx.be",
    "https://searx.run",
    "https://priv.au",
    "https://baresearch.org",
    "https://searxng.site",
    "https://search.ononoki.org",
    "https://searx.fmac.xyz",
    "https://search.indie.host",
)


class InvidiousProvider(MediaProvider):
    """
    YouTube search through Invidious.

    Thumbnails come from ``i.ytimg.com``; playback goes through the
    instance's ``latest_version`` endpoint (itag 18 = 360p mp4).
    """

    tag = "yt"
    source_tag = "YouTube"
    capabilities = frozenset({Capability.SEARCH, Capability.TRENDING, Capability.VIDEO})
    default_height = 720
    default_width = 1280
    max_items = 10

    async def _fetch(self, query: str | None, mode: ContentMode, safety: SafetyLevel) -> list[MediaRecord]:
        term = normalize_query(query) or self.default_term
        instance = self._choice(INVIDIOUS_INSTANCES)
        params = urllib.parse.urlencode({"q": term, "type": "video", "sort": "relevance"})

        data = await self._get_json(f"{instance}/api/v1/search?{params}")
        if not isinstance(data, list):
            return []

        return self.normalizer.build_many(
            data[: self.max_items],
            lambda item: self._map_video(item, instance),
        )

    def _map_video(self, item: dict[str, Any], instance: str) -> MediaRecord | None:
        video_id = item.get("videoId")
        if not video_id:
            return None
        return self.normalizer.build(
            video_id,
            thumbnail=f"https://i.ytimg.com/vi/{video_id}/hqdefault.jpg",
            title=item.get("title"),
            media_type=MediaType.VIDEO,
            video=f"{instance}/latest_version?id={video_id}&itag=18",
            author=item.get("author"),
            link=f"https://youtube.com/watch?v={video_id}",
        )


class SearxngProvider(MediaProvider):
    """
    Image and video web search via SearXNG's JSON API.

    Search-only: an empty query yields nothing. ``safesearch`` follows the
    requested SafetyLevel (1 = moderate, 0 = off).
    """

    tag = "web"
    source_tag = "Google Search"
    capabilities = frozenset({Capability.SEARCH, Capability.IMAGE, Capability.VIDEO})
    max_items = 20

    async def _fetch(self, query: str | None, mode: ContentMode, safety: SafetyLevel) -> list[MediaRecord]:
        instance = self._choice(SEARXNG_INSTANCES)
        params = urllib.parse.urlencode(
            {
                "q": normalize_query(query),
                "format": "json",
                "categories": "videos" if mode is ContentMode.VIDEO else "images",
                "safesearch": 0 if safety is SafetyLevel.RELAXED else 1,
            }
        )

        data = await self._get_json(f"{instance}/search?{params}")
        results = dig(data, "results")
        if not isinstance(results, list):
            return []

        return self.normalizer.build_many(
            results[: self.max_items],
            lambda item: self._map_result(item, mode),
        )

    def _map_result(self, item: dict[str, Any], mode: ContentMode) -> MediaRecord | None:
        url = item.get("url")
        if not url:
            return None
        is_video = mode is ContentMode.VIDEO or item.get("template") == "videos.html"
        return self.normalizer.build(
            native_id_from_url(url),
            thumbnail=first_present(item.get("img_src"), item.get("thumbnail")),
            title=item.get("title"),
            default_title="Web Result",
            media_type=MediaType.VIDEO if is_video else MediaType.IMAGE,
            video=url,
            author=first_present(item.get("author"), item.get("source"), "Web"),
            link=url,
        )
