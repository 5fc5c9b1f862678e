"""
Social Providers - Reddit (safe-for-work) and Giphy.

Reddit:
- search across a fixed subreddit multi per mode, or the hot listing of a
  randomly picked subreddit when there is no query
- over-18 and removed posts are always excluded here; adult Reddit content
  lives in ``adult_reddit``

Giphy:
- search or trending, rating ``g``; every GIF is served as a video record
  (mp4 rendition) with a fixed-height still as thumbnail
"""

from __future__ import annotations

import logging
import random
import re
import urllib.parse
from typing import TYPE_CHECKING, Any

from media_feed.domain.entities.media import ContentMode, MediaRecord, MediaType, SafetyLevel

from .base_provider import Capability, MediaProvider, normalize_query
from .normalizer import dig

if TYPE_CHECKING:
    from media_feed.infrastructure.http.client import ResilientFetcher

logger = logging.getLogger(__name__)

REDDIT_BASE_URL = "https://www.reddit.com"

SEARCH_SUBREDDITS = {
    ContentMode.IMAGE: ("pics", "Images", "itookapicture", "photographs", "Art", "Design"),
    ContentMode.VIDEO: ("videos", "gifs", "BetterEveryLoop", "oddlysatisfying"),
}
HOT_SUBREDDITS = {
    ContentMode.IMAGE: ("pics", "Art", "Photography", "Design", "NatureIsFuckingLit"),
    ContentMode.VIDEO: ("videos", "gifs", "oddlysatisfying", "Cinemagraphs"),
}

IMAGE_EXTENSION_RE = re.compile(r"\.(jpg|jpeg|png|gif|webp)$", re.IGNORECASE)

GIPHY_API_URL = "https://api.giphy.com/v1/gifs"


class RedditProvider(MediaProvider):
    """Safe-for-work Reddit posts with image or hosted-video content."""

    tag = "reddit"
    source_tag = "Reddit"
    capabilities = frozenset(
        {Capability.SEARCH, Capability.TRENDING, Capability.IMAGE, Capability.VIDEO}
    )
    max_items = 20

    def _listing_url(self, query: str | None, mode: ContentMode) -> str:
        term = normalize_query(query).lower()
        if term:
            subreddit = "+".join(SEARCH_SUBREDDITS[mode])
            params = urllib.parse.urlencode(
                {"q": term, "restrict_sr": "on", "limit": 25, "sort": "relevance", "t": "year"}
            )
            return f"{REDDIT_BASE_URL}/r/{subreddit}/search.json?{params}"

        subreddit = self._choice(HOT_SUBREDDITS[mode])
        return f"{REDDIT_BASE_URL}/r/{subreddit}/hot.json?limit=25"

    async def _fetch(self, query: str | None, mode: ContentMode, safety: SafetyLevel) -> list[MediaRecord]:
        data = await self._get_json(self._listing_url(query, mode))
        children = dig(data, "data", "children")
        if not isinstance(children, list):
            return []

        posts = [c.get("data") for c in children if isinstance(c, dict)]
        eligible = [p for p in posts if isinstance(p, dict) and self._is_eligible(p, mode)]
        return self.normalizer.build_many(
            eligible[: self.max_items],
            lambda post: self._map_post(post, mode),
        )

    @staticmethod
    def _is_hosted_video(post: dict[str, Any]) -> bool:
        return bool(post.get("is_video")) or post.get("post_hint") == "hosted:video"

    def _is_eligible(self, post: dict[str, Any], mode: ContentMode) -> bool:
        url = post.get("url")
        if post.get("over_18") or post.get("removed_by_category") or not isinstance(url, str) or not url:
            return False
        if mode is ContentMode.VIDEO:
            return self._is_hosted_video(post) or ".gif" in url
        return post.get("post_hint") == "image" or bool(IMAGE_EXTENSION_RE.search(url))

    def _map_post(self, post: dict[str, Any], mode: ContentMode) -> MediaRecord | None:
        is_video = self._is_hosted_video(post)
        source = dig(post, "preview", "images", 0, "source") or {}
        fallback_url = dig(post, "media", "reddit_video", "fallback_url")

        return self.normalizer.build(
            f"{post['id']}-{mode.value}",
            thumbnail=source.get("url") or post["url"],
            title=post.get("title"),
            default_title="Reddit Post",
            media_type=MediaType.VIDEO if is_video else MediaType.IMAGE,
            video=fallback_url.split("?")[0] if isinstance(fallback_url, str) else None,
            height=source.get("height"),
            width=source.get("width"),
            author=post.get("author"),
            link=f"https://reddit.com{post.get('permalink', '')}",
        )


class GiphyProvider(MediaProvider):
    """
    Giphy GIF search/trending.

    Args:
        api_key: Giphy API key; the public beta key works at low volume
    """

    tag = "giphy"
    source_tag = "Giphy"
    capabilities = frozenset({Capability.SEARCH, Capability.TRENDING, Capability.VIDEO})
    default_height = 400
    default_width = 400
    page_size = 20

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
            logger.debug("Giphy: no API key configured, skipping")
            return []

        term = normalize_query(query)
        params = {"api_key": self._api_key, "limit": self.page_size, "rating": "g"}
        if term:
            url = f"{GIPHY_API_URL}/search?{urllib.parse.urlencode({**params, 'q': term})}"
        else:
            url = f"{GIPHY_API_URL}/trending?{urllib.parse.urlencode(params)}"

        data = await self._get_json(url)
        gifs = dig(data, "data")
        if not isinstance(gifs, list):
            return []
        return self.normalizer.build_many(gifs, self._map_gif)

    def _map_gif(self, gif: dict[str, Any]) -> MediaRecord | None:
        original = dig(gif, "images", "original") or {}
        return self.normalizer.build(
            gif.get("id"),
            thumbnail=dig(gif, "images", "fixed_height", "url"),
            title=gif.get("title"),
            default_title="Animated GIF",
            media_type=MediaType.VIDEO,
            video=original.get("mp4"),
            height=original.get("height"),
            width=original.get("width"),
            author=gif.get("username"),
            link=gif.get("url"),
        )
