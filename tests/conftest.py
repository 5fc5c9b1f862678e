"""
Pytest configuration and shared fixtures.
"""

from __future__ import annotations

import random
from typing import Any

import pytest

from media_feed.domain.entities.media import Attribution, Dimensions, MediaRecord, MediaType

# ============================================================
# Fake Fetcher
# ============================================================


class FakeFetcher:
    """
    Stand-in for ResilientFetcher.

    ``routes`` maps a URL substring to the payload returned for any URL
    containing it (first match wins). A payload that is an Exception is
    raised instead. Unmatched URLs resolve to None, like a fully failed fetch.
    """

    def __init__(self, routes: dict[str, Any] | None = None):
        self.routes: dict[str, Any] = dict(routes or {})
        self.calls: list[tuple[str, dict[str, str] | None]] = []

    async def fetch(self, url: str, headers: dict[str, str] | None = None) -> Any:
        self.calls.append((url, headers))
        for fragment, payload in self.routes.items():
            if fragment in url:
                if isinstance(payload, Exception):
                    raise payload
                return payload
        return None

    def urls(self) -> list[str]:
        return [url for url, _ in self.calls]


@pytest.fixture
def fake_fetcher():
    """Fetcher with no routes: every upstream call fails."""
    return FakeFetcher()


@pytest.fixture
def routed_fetcher():
    """Factory: ``routed_fetcher({"fragment": payload})``."""
    return FakeFetcher


@pytest.fixture
def rng():
    """Seeded random source for reproducible ordering."""
    return random.Random(1234)


# ============================================================
# Record Builders
# ============================================================


def make_record(
    record_id: str,
    media_type: MediaType = MediaType.IMAGE,
    source_tag: str = "Test",
    thumbnail_url: str = "https://img.example.com/a.jpg",
) -> MediaRecord:
    return MediaRecord(
        id=record_id,
        title=f"Record {record_id}",
        thumbnail_url=thumbnail_url,
        media_type=media_type,
        video_url="https://video.example.com/a.mp4" if media_type is MediaType.VIDEO else None,
        dimensions=Dimensions(height=800, width=600),
        attribution=Attribution(display_name=source_tag),
        source_tag=source_tag,
    )


@pytest.fixture
def record_factory():
    return make_record


# ============================================================
# Mock Provider Payloads
# ============================================================


@pytest.fixture
def reddit_listing():
    """Safe-for-work Reddit listing with one image, one video, one over-18 post."""
    return {
        "data": {
            "children": [
                {
                    "data": {
                        "id": "abc1",
                        "title": "Mountain sunrise",
                        "url": "https://i.redd.it/sunrise.jpg",
                        "post_hint": "image",
                        "author": "hiker",
                        "permalink": "/r/pics/comments/abc1/",
                        "preview": {
                            "images": [
                                {
                                    "source": {
                                        "url": "https://preview.redd.it/sunrise.jpg?width=1080&amp;s=xyz",
                                        "height": 1350,
                                        "width": 1080,
                                    }
                                }
                            ]
                        },
                    }
                },
                {
                    "data": {
                        "id": "vid2",
                        "title": "Satisfying loop",
                        "url": "https://v.redd.it/vid2",
                        "is_video": True,
                        "post_hint": "hosted:video",
                        "author": "looper",
                        "permalink": "/r/videos/comments/vid2/",
                        "media": {"reddit_video": {"fallback_url": "https://v.redd.it/vid2/DASH_720.mp4?source=fallback"}},
                        "preview": {"images": [{"source": {"url": "https://preview.redd.it/vid2.jpg"}}]},
                    }
                },
                {
                    "data": {
                        "id": "nsfw3",
                        "title": "Hidden",
                        "url": "https://i.redd.it/hidden.jpg",
                        "post_hint": "image",
                        "over_18": True,
                    }
                },
            ]
        }
    }


@pytest.fixture
def giphy_payload():
    return {
        "data": [
            {
                "id": "g1",
                "title": "Dancing cat",
                "username": "catgifs",
                "url": "https://giphy.com/gifs/g1",
                "images": {
                    "fixed_height": {"url": "https://media.giphy.com/g1/200.gif"},
                    "original": {"mp4": "https://media.giphy.com/g1/giphy.mp4", "height": "480", "width": "360"},
                },
            },
            {
                "id": "g2",
                "title": "",
                "images": {"fixed_height": {"url": "https://media.giphy.com/g2/200.gif"}, "original": {}},
            },
        ]
    }


@pytest.fixture
def dapi_posts():
    """Gelbooru-style posts: one image, one webm, one without a file."""
    return [
        {"id": 11, "file_url": "https://img.gelbooru.com/a.png", "tags": "tag_a tag_b", "height": 1200, "width": 900},
        {"id": 12, "file_url": "https://img.gelbooru.com/b.webm", "tags": "tag_c"},
        {"id": 13, "file_url": "", "tags": "missing"},
    ]


@pytest.fixture
def webmaster_payload():
    return {
        "videos": [
            {
                "video_id": "ph100",
                "title": "First",
                "default_thumb": "https://ci.example.com/thumb1.jpg",
                "url": "https://www.example.com/view?v=ph100",
            },
            {
                "video_id": "ph101",
                "title": "Second",
                "thumbs": [{"src": "//ci.example.com/thumb2.jpg"}],
                "url": "https://www.example.com/view?v=ph101",
            },
        ]
    }
