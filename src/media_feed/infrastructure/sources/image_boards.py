"""
Image Board Providers - booru-style tag search APIs.

Three API dialects are covered:
- Gelbooru "dapi" (Gelbooru, Rule34, Realbooru, TBIB):
  ``index.php?page=dapi&s=post&q=index&json=1&tags=...``
- Danbooru: ``posts.json?tags=...``
- Moebooru (Yande.re, Konachan): ``post.json?tags=...``

Queries are converted to tag syntax: spaces become underscores and some
boards append their explicit-rating tag. Placeholder and hentai queries
collapse to the board's rating tag (Rule34 searches ``hentai`` instead).
Any query containing "hentai" counts, so "hentai girls" also collapses to
the bare rating tag rather than becoming ``hentai_girls``.

Posts whose file is an mp4/webm become VIDEO records on boards that host
video (Gelbooru, Rule34).
"""

from __future__ import annotations

import logging
import urllib.parse
from typing import Any

from media_feed.domain.entities.media import ContentMode, MediaRecord, MediaType, SafetyLevel

from .base_provider import Capability, MediaProvider
from .normalizer import first_present

logger = logging.getLogger(__name__)

BOARD_CAPABILITIES = frozenset({Capability.SEARCH, Capability.TRENDING, Capability.IMAGE})
BOARD_PAGE_SIZE = 40
BOARD_TITLE_LENGTH = 100
VIDEO_EXTENSIONS = (".mp4", ".webm")


def is_video_file(url: Any) -> bool:
    return isinstance(url, str) and url.lower().endswith(VIDEO_EXTENSIONS)


def tag_title(tags: Any) -> str | None:
    """Board titles are their (long) tag strings, cut short for display."""
    if not isinstance(tags, str):
        return None
    return tags[:BOARD_TITLE_LENGTH]


class ImageBoardProvider(MediaProvider):
    """
    Shared flow for tag-search boards.

    Subclasses implement ``_search_url()`` and ``_map_post()``; boards with
    non-list payloads override ``_extract_posts()``.
    """

    capabilities = BOARD_CAPABILITIES
    default_term = "rating:explicit"
    hentai_term = "rating:explicit"
    rating_suffix = ""

    def format_term(self, query: str) -> str:
        tags = query.replace(" ", "_")
        return f"{tags} {self.rating_suffix}" if self.rating_suffix else tags

    async def _fetch(self, query: str | None, mode: ContentMode, safety: SafetyLevel) -> list[MediaRecord]:
        data = await self._get_json(self._search_url(self.resolve_term(query)))
        return self.normalizer.build_many(self._extract_posts(data), self._map_post)

    def _extract_posts(self, data: Any) -> list[Any]:
        return data if isinstance(data, list) else []

    def _search_url(self, tags: str) -> str:
        raise NotImplementedError

    def _map_post(self, post: dict[str, Any]) -> MediaRecord | None:
        raise NotImplementedError


# =============================================================================
# Gelbooru dapi dialect
# =============================================================================


class DapiBoardProvider(ImageBoardProvider):
    """Boards speaking the Gelbooru ``dapi`` protocol."""

    api_base = ""
    post_base = ""
    hosts_video = False

    def _search_url(self, tags: str) -> str:
        params = urllib.parse.urlencode(
            {"page": "dapi", "s": "post", "q": "index", "json": 1, "limit": BOARD_PAGE_SIZE, "tags": tags}
        )
        return f"{self.api_base}/index.php?{params}"

    def _extract_posts(self, data: Any) -> list[Any]:
        # Newer Gelbooru builds wrap posts as {"@attributes": ..., "post": [...]}
        if isinstance(data, dict) and isinstance(data.get("post"), list):
            return data["post"]
        return super()._extract_posts(data)

    def _map_post(self, post: dict[str, Any]) -> MediaRecord | None:
        file_url = post.get("file_url")
        is_video = self.hosts_video and is_video_file(file_url)
        return self.normalizer.build(
            post.get("id"),
            thumbnail=file_url,
            title=post.get("tags"),
            default_title=f"{self.source_tag} Content",
            media_type=MediaType.VIDEO if is_video else MediaType.IMAGE,
            video=file_url,
            height=post.get("height"),
            width=post.get("width"),
            link=f"{self.post_base}/index.php?page=post&s=view&id={post.get('id')}",
        )


class GelbooruProvider(DapiBoardProvider):
    tag = "gel"
    source_tag = "Gelbooru"
    api_base = "https://gelbooru.com"
    post_base = "https://gelbooru.com"
    hosts_video = True


class RealbooruProvider(DapiBoardProvider):
    tag = "real"
    source_tag = "Realbooru"
    api_base = "https://realbooru.com"
    post_base = "https://realbooru.com"


class TbibProvider(DapiBoardProvider):
    tag = "tbib"
    source_tag = "TBIB"
    api_base = "https://tbib.org"
    post_base = "https://tbib.org"


class Rule34Provider(DapiBoardProvider):
    """
    Rule34.xxx.

    Hentai queries search the ``hentai`` tag. The API sometimes answers
    with an object keyed by index instead of an array; its values are used.
    Thumbnails prefer the sample rendition.
    """

    tag = "r34"
    source_tag = "Rule34.xxx"
    api_base = "https://api.rule34.xxx"
    post_base = "https://rule34.xxx"
    hentai_term = "hentai"
    hosts_video = True

    def _extract_posts(self, data: Any) -> list[Any]:
        if isinstance(data, dict):
            return list(data.values())
        return super()._extract_posts(data)

    def _map_post(self, post: dict[str, Any]) -> MediaRecord | None:
        file_url = post.get("file_url")
        if not file_url:
            return None
        is_video = is_video_file(file_url)
        return self.normalizer.build(
            post.get("id"),
            thumbnail=first_present(post.get("sample_url"), file_url),
            title=tag_title(post.get("tags")),
            default_title="Rule34 Content",
            media_type=MediaType.VIDEO if is_video else MediaType.IMAGE,
            video=file_url,
            height=first_present(post.get("sample_height"), post.get("height")),
            width=first_present(post.get("sample_width"), post.get("width")),
            link=f"{self.post_base}/index.php?page=post&s=view&id={post.get('id')}",
        )


# =============================================================================
# Danbooru
# =============================================================================


class DanbooruProvider(ImageBoardProvider):
    tag = "dan"
    source_tag = "Danbooru"
    default_height = 1000
    default_width = 700
    rating_suffix = "rating:explicit"

    def _search_url(self, tags: str) -> str:
        params = urllib.parse.urlencode({"tags": tags, "limit": BOARD_PAGE_SIZE})
        return f"https://danbooru.donmai.us/posts.json?{params}"

    def _map_post(self, post: dict[str, Any]) -> MediaRecord | None:
        return self.normalizer.build(
            post.get("id"),
            thumbnail=first_present(post.get("large_file_url"), post.get("file_url")),
            title=tag_title(post.get("tag_string")),
            default_title="Danbooru Content",
            height=post.get("image_height"),
            width=post.get("image_width"),
            link=f"https://danbooru.donmai.us/posts/{post.get('id')}",
        )


# =============================================================================
# Moebooru dialect
# =============================================================================


class MoebooruProvider(ImageBoardProvider):
    """Yande.re / Konachan; both use the short ``rating:e`` tag."""

    default_height = 1000
    default_width = 700
    default_term = "rating:e"
    hentai_term = "rating:e"
    rating_suffix = "rating:e"
    site = ""
    author = ""

    def _search_url(self, tags: str) -> str:
        params = urllib.parse.urlencode({"tags": tags, "limit": BOARD_PAGE_SIZE})
        return f"{self.site}/post.json?{params}"

    def _map_post(self, post: dict[str, Any]) -> MediaRecord | None:
        return self.normalizer.build(
            post.get("id"),
            thumbnail=first_present(post.get("sample_url"), post.get("file_url")),
            title=tag_title(post.get("tags")),
            default_title=f"{self.source_tag} Content",
            height=post.get("sample_height"),
            width=post.get("sample_width"),
            author=self.author,
            link=f"{self.site}/post/show/{post.get('id')}",
        )


class YandereProvider(MoebooruProvider):
    tag = "yan"
    source_tag = "Yande.re"
    site = "https://yande.re"
    author = "Yandere"


class KonachanProvider(MoebooruProvider):
    tag = "kona"
    source_tag = "Konachan"
    site = "https://konachan.com"
    author = "Konachan"
