"""
Domain Entity: MediaRecord

Provider-agnostic media item (image or video reference plus metadata).
Pure domain entity with no provider-specific factory methods.
Provider mapping is handled by Infrastructure layer adapters.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any

MAX_TITLE_LENGTH = 120


class MediaType(str, Enum):
    """Kind of media a record points at."""

    IMAGE = "image"
    VIDEO = "video"


class ContentMode(str, Enum):
    """Which kind of media an upstream request is asking for."""

    IMAGE = "image"
    VIDEO = "video"


class SafetyLevel(str, Enum):
    """
    Upstream filtering mode.

    STRICT keeps provider safe-search filters on.
    RELAXED disables them for explicit-content queries.
    """

    STRICT = "strict"
    RELAXED = "relaxed"


class ProviderGroup(str, Enum):
    """Groups used by the classifier to select providers."""

    GENERIC = "generic"
    ANIMAL = "animal"
    SPACE = "space"
    EXPLICIT = "explicit"


@dataclass(frozen=True, slots=True)
class Dimensions:
    """Pixel (or aspect-ratio) size of the media."""

    height: int
    width: int


@dataclass(frozen=True, slots=True)
class Attribution:
    """Who the media is credited to."""

    display_name: str
    avatar_url: str = ""


@dataclass(frozen=True, slots=True)
class MediaRecord:
    """
    Canonical normalized media item.

    Constructed exactly once per provider response item and never mutated.
    ``id`` is ``"{providerTag}-{providerNativeId}"`` so ids from different
    providers can never collide.
    """

    id: str
    title: str
    thumbnail_url: str
    media_type: MediaType
    dimensions: Dimensions
    attribution: Attribution
    source_tag: str
    video_url: str | None = None
    external_link: str | None = None

    @property
    def is_video(self) -> bool:
        return self.media_type is MediaType.VIDEO

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the wire shape consumed by the feed UI."""
        data: dict[str, Any] = {
            "id": self.id,
            "title": self.title,
            "image": self.thumbnail_url,
            "type": self.media_type.value,
            "height": self.dimensions.height,
            "width": self.dimensions.width,
            "user": {
                "name": self.attribution.display_name,
                "avatar": self.attribution.avatar_url,
            },
            "source": self.source_tag,
        }
        if self.video_url:
            data["video"] = self.video_url
        if self.external_link:
            data["link"] = self.external_link
        return data


