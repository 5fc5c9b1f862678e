"""
Adult Reddit Feed Provider

Reads over-18 subreddits through a rotating set of Reddit mirrors (the
main site aggressively blocks anonymous JSON clients).

Feed selection:
- placeholder queries (``18+``, ``nsfw``, ``hentai``, ...) read the newest
  posts of a fixed subreddit multi, one for images and one for videos,
  switching to hentai-focused subreddits for hentai queries
- any other query searches a small subreddit multi; there is no video
  search feed, so VIDEO requests with a specific query yield nothing

Image posts become ``nsfw-img-*`` records, video posts ``nsfw-vid-*``.
"""

from __future__ import annotations

import logging
import re
import urllib.parse
from typing import Any

from media_feed.domain.entities.media import ContentMode, MediaRecord, MediaType, SafetyLevel
from media_feed.infrastructure.http.client import BROWSER_USER_AGENT

from .base_provider import Capability, MediaProvider, is_hentai_query, normalize_query
from .normalizer import clean_url, dig, first_present

logger = logging.getLogger(__name__)

REDDIT_MIRRORS = (
    "https://n.reddit.com",
    "https://old.reddit.com",
    "https://reddit.one",
    "https://reddit.quest",
    "https://p.opnxng.com",
    "https://safer.reddit.com",
)

# Broader than the shared placeholder set: "hentai" alone is a feed request.
FEED_TOKENS = frozenset({"18+", "nsfw", "porn", "sex", "hentai", "all", "trending"})

FEED_SUBREDDITS = {
    (False, ContentMode.IMAGE): "porn+RealGirls+legalteens+nsfw+gonewild",
    (False, ContentMode.VIDEO): "porn_gifs+nsfw_gifs+AdultGIFs+60fpsporn",
    (True, ContentMode.IMAGE): "hentai+rule34+animehentai+HighResHentai",
    (True, ContentMode.VIDEO): "HentaiVideos+hentai_gifs+HENTAI_GIF",
}
SEARCH_SUBREDDITS = {False: "nsfw+porn", True: "hentai+rule34"}

IMAGE_EXTENSION_RE = re.compile(r"\.(jpg|jpeg|png|webp|gif)$", re.IGNORECASE)
IMGUR_DIRECT_RE = re.compile(r"\.(jpg|jpeg|png|gif)$")


def is_feed_query(query: str | None) -> bool:
    q = normalize_query(query).lower()
    return not q or q in FEED_TOKENS


class RedditAdultProvider(MediaProvider):
    """Over-18 Reddit image and video posts."""

    tag = "nsfw"
    source_tag = "Reddit"
    capabilities = frozenset(
        {Capability.SEARCH, Capability.TRENDING, Capability.IMAGE, Capability.VIDEO}
    )
    listing_limit = 100

    def listing_url(self, query: str | None, mode: ContentMode) -> str | None:
        """Listing to read for (query, mode), or None when there is none."""
        hentai = is_hentai_query(query)
        mirror = self._choice(REDDIT_MIRRORS)

        if is_feed_query(query):
            params = urllib.parse.urlencode(
                {"limit": self.listing_limit, "include_over_18": "on", "raw_json": 1, "sort": "hot"}
            )
            return f"{mirror}/r/{FEED_SUBREDDITS[(hentai, mode)]}/new.json?{params}"

        if mode is ContentMode.VIDEO:
            return None

        params = urllib.parse.urlencode(
            {
                "q": normalize_query(query),
                "restrict_sr": "on",
                "limit": self.listing_limit,
                "include_over_18": "on",
                "raw_json": 1,
            }
        )
        return f"{mirror}/r/{SEARCH_SUBREDDITS[hentai]}/search.json?{params}"

    async def _fetch(self, query: str | None, mode: ContentMode, safety: SafetyLevel) -> list[MediaRecord]:
        url = self.listing_url(query, mode)
        if url is None:
            return []

        data = await self._get_json(url, headers={"User-Agent": BROWSER_USER_AGENT})
        children = dig(data, "data", "children")
        if not isinstance(children, list):
            return []

        mapper = self._map_video_post if mode is ContentMode.VIDEO else self._map_image_post
        seen: set[str] = set()
        records: list[MediaRecord] = []
        for record in self.normalizer.build_many(
            [c.get("data") for c in children if isinstance(c, dict)], mapper
        ):
            if record.id not in seen:
                seen.add(record.id)
                records.append(record)
        return records

    # =========================================================================
    # Post mapping
    # =========================================================================

    @staticmethod
    def _author(post: dict[str, Any]) -> Any:
        return first_present(post.get("subreddit_name_prefixed"), post.get("author"))

    def _map_image_post(self, post: dict[str, Any]) -> MediaRecord | None:
        url = post.get("url")
        if not url:
            return None
        if not (IMAGE_EXTENSION_RE.search(url) or post.get("post_hint") == "image"):
            return None

        # imgur page links resolve to the image with an explicit extension
        if "imgur.com" in url and not IMGUR_DIRECT_RE.search(url):
            url = f"{url}.jpg"

        source = dig(post, "preview", "images", 0, "source") or {}
        return self.normalizer.build(
            post["id"],
            tag="nsfw-img",
            thumbnail=url,
            title=post.get("title"),
            height=source.get("height"),
            width=source.get("width"),
            author=self._author(post),
            link=f"https://reddit.com{post.get('permalink', '')}",
        )

    def _map_video_post(self, post: dict[str, Any]) -> MediaRecord | None:
        url = post.get("url")
        if not url:
            return None
        domain = post.get("domain") or ""
        is_video = (
            post.get("is_video")
            or post.get("post_hint") == "hosted:video"
            or ".gif" in url
            or "redgifs" in domain
            or ".mp4" in url
            or "v.redd.it" in url
        )
        if not is_video:
            return None

        video_url = first_present(
            dig(post, "preview", "reddit_video_preview", "fallback_url"),
            dig(post, "media", "reddit_video", "fallback_url"),
            dig(post, "preview", "images", 0, "variants", "mp4", "source", "url"),
        )
        if not video_url and "redgifs" in domain:
            video_url = f"https://v3.redgifs.com/watch/{url.rstrip('/').split('/')[-1]}"
        if not video_url and ".mp4" not in url:
            return None

        source = dig(post, "preview", "images", 0, "source") or {}
        return self.normalizer.build(
            post["id"],
            tag="nsfw-vid",
            thumbnail=first_present(source.get("url"), post.get("thumbnail")),
            title=post.get("title"),
            media_type=MediaType.VIDEO,
            video=clean_url(video_url or url).split("?")[0],
            height=source.get("height"),
            width=source.get("width"),
            author=self._author(post),
            link=f"https://reddit.com{post.get('permalink', '')}",
        )
