"""
Domain Entities

Core business objects for media aggregation.
"""

from __future__ import annotations

from .media import (
    MAX_TITLE_LENGTH,
    Attribution,
    ContentMode,
    Dimensions,
    MediaRecord,
    MediaType,
    ProviderGroup,
    SafetyLevel,
)

__all__ = [
    "MediaRecord",
    "MediaType",
    "ContentMode",
    "SafetyLevel",
    "ProviderGroup",
    "Dimensions",
    "Attribution",
    "MAX_TITLE_LENGTH",
]
