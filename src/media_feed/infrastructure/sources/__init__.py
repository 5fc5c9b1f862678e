"""
Upstream media providers.

One adapter per third-party API, all sharing the MediaProvider base and
the RecordNormalizer. ProviderRegistry lays them out as a static call table.
"""

from .base_provider import Capability, MediaProvider, is_hentai_query, is_placeholder_query
from .normalizer import RecordNormalizer
from .registry import ProviderEntry, ProviderRegistry

__all__ = [
    "Capability",
    "MediaProvider",
    "ProviderEntry",
    "ProviderRegistry",
    "RecordNormalizer",
    "is_hentai_query",
    "is_placeholder_query",
]
