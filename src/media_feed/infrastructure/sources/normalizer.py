"""
Record Normalizer - the one place a MediaRecord is constructed.

Every provider funnels its mapped fields through RecordNormalizer.build(),
which guarantees:
- ids of the form ``{tag}-{native_id}``
- a non-empty, bounded title
- an absolute thumbnail URL (records without one are dropped)
- a video URL only on video records
- integer dimensions with per-provider defaults
"""

from __future__ import annotations

import hashlib
import logging
from collections.abc import Callable
from typing import Any

from media_feed.domain.entities.media import (
    MAX_TITLE_LENGTH,
    Attribution,
    Dimensions,
    MediaRecord,
    MediaType,
)

logger = logging.getLogger(__name__)


def clean_url(url: Any) -> str:
    """
    Make a provider URL absolute and unescaped.

    - ``//host/path`` becomes ``https://host/path``
    - HTML-escaped ``&amp;`` (Reddit previews) becomes ``&``
    - anything that is not a string becomes ``""``
    """
    if not isinstance(url, str):
        return ""
    cleaned = url.strip()
    if cleaned.startswith("//"):
        cleaned = f"https:{cleaned}"
    return cleaned.replace("&amp;", "&")


def is_absolute_url(url: str) -> bool:
    return url.startswith(("http://", "https://"))


def coerce_dimension(value: Any, default: int) -> int:
    """Parse a provider size field (int, float or numeric string), else default."""
    if isinstance(value, bool):
        return default
    if isinstance(value, (int, float)):
        return int(value) if value > 0 else default
    if isinstance(value, str):
        try:
            parsed = int(float(value.strip()))
        except ValueError:
            return default
        return parsed if parsed > 0 else default
    return default


def native_id_from_url(url: str, length: int = 16) -> str:
    """Stable id for providers that only hand back URLs."""
    return hashlib.sha1(url.encode("utf-8"), usedforsecurity=False).hexdigest()[:length]


def first_present(*values: Any) -> Any:
    """First truthy value, mirroring ``a || b || c`` chains in provider payloads."""
    for value in values:
        if value:
            return value
    return None


def dig(data: Any, *path: str | int) -> Any:
    """
    Safe nested lookup into decoded JSON.

    Example:
        >>> dig({"a": {"b": [{"c": 1}]}}, "a", "b", 0, "c")
        1
        >>> dig({"a": None}, "a", "b") is None
        True
    """
    current = data
    for key in path:
        if isinstance(key, int):
            if not isinstance(current, list) or not -len(current) <= key < len(current):
                return None
            current = current[key]
        else:
            if not isinstance(current, dict):
                return None
            current = current.get(key)
        if current is None:
            return None
    return current


class RecordNormalizer:
    """
    Builds MediaRecords for one provider.

    Args:
        tag: Id prefix (e.g. ``"giphy"``)
        source_tag: Human-readable provider name (e.g. ``"Giphy"``)
        default_height: Height used when the upstream omits it
        default_width: Width used when the upstream omits it
    """

    def __init__(
        self,
        tag: str,
        source_tag: str,
        default_height: int = 800,
        default_width: int = 600,
    ) -> None:
        self.tag = tag
        self.source_tag = source_tag
        self.default_height = default_height
        self.default_width = default_width

    def build(
        self,
        native_id: Any,
        *,
        thumbnail: Any,
        title: Any = None,
        default_title: str = "",
        media_type: MediaType = MediaType.IMAGE,
        video: Any = None,
        height: Any = None,
        width: Any = None,
        author: Any = None,
        avatar: Any = None,
        link: Any = None,
        tag: str | None = None,
    ) -> MediaRecord | None:
        """
        Build one record, or None when it has no usable id or thumbnail.

        Args:
            native_id: Provider-side identifier
            thumbnail: Raw thumbnail URL (cleaned here)
            title: Raw title; falls back to ``default_title`` then source tag
            media_type: IMAGE or VIDEO
            video: Raw playable URL (kept only for VIDEO records)
            height / width: Raw size fields
            author / avatar: Attribution fields; author falls back to source tag
            link: Outbound page URL
            tag: Override for the id prefix (e.g. ``pexels-video``)
        """
        if native_id is None or native_id == "":
            return None

        thumbnail_url = clean_url(thumbnail)
        if not thumbnail_url or not is_absolute_url(thumbnail_url):
            return None

        video_url: str | None = None
        if media_type is MediaType.VIDEO:
            video_url = clean_url(video) or None

        display_title = title.strip() if isinstance(title, str) else ""
        if not display_title:
            display_title = default_title or self.source_tag

        display_name = author.strip() if isinstance(author, str) else ""

        return MediaRecord(
            id=f"{tag or self.tag}-{native_id}",
            title=display_title[:MAX_TITLE_LENGTH],
            thumbnail_url=thumbnail_url,
            media_type=media_type,
            video_url=video_url,
            dimensions=Dimensions(
                height=coerce_dimension(height, self.default_height),
                width=coerce_dimension(width, self.default_width),
            ),
            attribution=Attribution(
                display_name=display_name or self.source_tag,
                avatar_url=clean_url(avatar),
            ),
            external_link=clean_url(link) or None,
            source_tag=self.source_tag,
        )

    def build_many(
        self,
        items: list[Any],
        mapper: Callable[[Any], MediaRecord | None],
    ) -> list[MediaRecord]:
        """
        Map each raw item with ``mapper`` and keep the records that survive.

        A mapper exception drops only that item.
        """
        records: list[MediaRecord] = []
        for item in items:
            try:
                record = mapper(item)
            except (AttributeError, KeyError, TypeError, ValueError) as e:
                logger.debug(f"{self.source_tag}: skipping malformed item: {e}")
                continue
            if record is not None:
                records.append(record)
        return records
