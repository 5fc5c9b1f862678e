"""
Adult Video Providers - tube-site search APIs.

Every provider here:
- serves VIDEO records only (thumbnail + outbound watch link; RedGifs also
  exposes a direct playable rendition)
- resolves its search term through ``MediaProvider.resolve_term``: hentai
  queries map to ``hentai``, placeholder queries to the trending term
- is only dispatched for the explicit provider group

Pornhub, YouPorn and Porn.com share the same "webmasters" response schema
and differ only in their endpoint.
"""

from __future__ import annotations

import logging
import urllib.parse
from typing import Any

from media_feed.domain.entities.media import ContentMode, MediaRecord, MediaType, SafetyLevel

from .base_provider import Capability, MediaProvider
from .normalizer import dig, first_present

logger = logging.getLogger(__name__)

VIDEO_CAPABILITIES = frozenset({Capability.SEARCH, Capability.TRENDING, Capability.VIDEO})


class AdultVideoProvider(MediaProvider):
    """
    Shared flow: resolve term -> GET search URL -> list under ``items_key``.

    Subclasses implement ``_search_url()`` and ``_map_video()``.
    """

    capabilities = VIDEO_CAPABILITIES
    default_height = 720
    default_width = 1280
    hentai_term = "hentai"
    items_key = "videos"

    async def _fetch(self, query: str | None, mode: ContentMode, safety: SafetyLevel) -> list[MediaRecord]:
        data = await self._get_json(self._search_url(self.resolve_term(query)))
        items = dig(data, self.items_key)
        if not isinstance(items, list):
            return []
        return self.normalizer.build_many(items, self._map_video)

    def _search_url(self, term: str) -> str:
        raise NotImplementedError

    def _map_video(self, item: dict[str, Any]) -> MediaRecord | None:
        raise NotImplementedError


# =============================================================================
# Webmasters API family
# =============================================================================


class WebmasterVideoProvider(AdultVideoProvider):
    """Sites exposing the ``/webmasters/search`` schema."""

    endpoint = ""
    thumbsize = "large"

    def _search_url(self, term: str) -> str:
        params = urllib.parse.urlencode({"search": term, "thumbsize": self.thumbsize})
        return f"{self.endpoint}?{params}"

    def _map_video(self, item: dict[str, Any]) -> MediaRecord | None:
        return self.normalizer.build(
            item.get("video_id"),
            thumbnail=first_present(item.get("default_thumb"), dig(item, "thumbs", 0, "src")),
            title=item.get("title"),
            media_type=MediaType.VIDEO,
            link=item.get("url"),
        )


class PornhubProvider(WebmasterVideoProvider):
    tag = "ph"
    source_tag = "Pornhub"
    endpoint = "https://www.pornhub.com/webmasters/search"
    thumbsize = "large_next_gen"


class YouPornProvider(WebmasterVideoProvider):
    tag = "yp"
    source_tag = "YouPorn"
    endpoint = "https://www.youporn.com/api/webmasters/search"


class PornDotComProvider(WebmasterVideoProvider):
    tag = "pdc"
    source_tag = "Porn.com"
    endpoint = "https://api.porn.com/webmasters/search"


# =============================================================================
# Site-specific schemas
# =============================================================================


class EpornerProvider(AdultVideoProvider):
    """Eporner v2 search; thumbnails carry their own size."""

    tag = "eporner"
    source_tag = "EPORNER"
    default_height = 360
    default_width = 640
    items_key = "results"

    def _search_url(self, term: str) -> str:
        params = urllib.parse.urlencode({"query": term, "per_page": 30, "format": "json", "thumbsize": "big"})
        return f"https://www.eporner.com/api/v2/video/search/?{params}"

    def _map_video(self, item: dict[str, Any]) -> MediaRecord | None:
        thumb = item.get("default_thumb") or {}
        return self.normalizer.build(
            item.get("id"),
            thumbnail=first_present(thumb.get("src"), dig(item, "thumbs", 0, "src")),
            title=item.get("title"),
            media_type=MediaType.VIDEO,
            height=thumb.get("height"),
            width=thumb.get("width"),
            link=item.get("url"),
        )


class XHamsterProvider(AdultVideoProvider):
    tag = "xh"
    source_tag = "XHamster"

    def _search_url(self, term: str) -> str:
        params = urllib.parse.urlencode({"search": term, "limit": 25})
        return f"https://xhamster.com/xapi/v2/search/videos?{params}"

    def _map_video(self, item: dict[str, Any]) -> MediaRecord | None:
        video_id = item.get("id")
        return self.normalizer.build(
            video_id,
            thumbnail=first_present(item.get("thumb"), item.get("preview")),
            title=item.get("title"),
            default_title="XHamster Video",
            media_type=MediaType.VIDEO,
            link=f"https://xhamster.com/videos/{video_id}",
        )


class SpankBangProvider(AdultVideoProvider):
    tag = "sb"
    source_tag = "SpankBang"
    default_height = 360
    default_width = 640

    def _search_url(self, term: str) -> str:
        return f"https://spankbang.com/api/videos/search?{urllib.parse.urlencode({'q': term})}"

    def _map_video(self, item: dict[str, Any]) -> MediaRecord | None:
        video_id = item.get("id")
        return self.normalizer.build(
            video_id,
            thumbnail=first_present(item.get("thumbnail_url"), item.get("preview_url")),
            title=item.get("title"),
            media_type=MediaType.VIDEO,
            link=f"https://spankbang.com/{video_id}/video/",
        )


class BeegProvider(AdultVideoProvider):
    tag = "beeg"
    source_tag = "Beeg"

    def _search_url(self, term: str) -> str:
        return f"https://beeg.com/api/v1/video/search?{urllib.parse.urlencode({'query': term})}"

    def _map_video(self, item: dict[str, Any]) -> MediaRecord | None:
        video_id = item.get("id")
        return self.normalizer.build(
            video_id,
            thumbnail=item.get("thumbnail_url"),
            title=item.get("title"),
            media_type=MediaType.VIDEO,
            link=f"https://beeg.com/{video_id}",
        )


class RedGifsProvider(AdultVideoProvider):
    """RedGifs trending search; the only provider here with playable URLs."""

    tag = "rg"
    source_tag = "RedGifs"
    default_height = 360
    default_width = 640
    default_term = "hot"
    items_key = "gifs"

    def _search_url(self, term: str) -> str:
        params = urllib.parse.urlencode({"search_text": term, "count": 25, "order": "trending"})
        return f"https://api.redgifs.com/v2/gifs/search?{params}"

    def _map_video(self, item: dict[str, Any]) -> MediaRecord | None:
        urls = item.get("urls") or {}
        gif_id = item.get("id")
        return self.normalizer.build(
            gif_id,
            thumbnail=first_present(urls.get("thumbnail"), urls.get("poster")),
            title=item.get("userName"),
            default_title="RedGifs Video",
            media_type=MediaType.VIDEO,
            video=first_present(urls.get("sd"), urls.get("hd")),
            height=item.get("height"),
            width=item.get("width"),
            link=f"https://redgifs.com/watch/{gif_id}",
        )
