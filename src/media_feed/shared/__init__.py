"""
Shared module for Media Feed.

Provides:
- Unified exception hierarchy
- Settle-all async helpers
- Environment-backed settings

Python 3.12+ features:
- Type parameter syntax (PEP 695)
- asyncio.TaskGroup
"""

from .async_utils import gather_settled, split_outcomes
from .exceptions import (
    ConfigurationError,
    ErrorCategory,
    ErrorContext,
    ErrorSeverity,
    FetchError,
    MediaFeedError,
    NetworkError,
    ParseError,
    ProviderError,
)
from .settings import DEFAULT_RELAYS, FeedSettings

__all__ = [
    # Exceptions
    "MediaFeedError",
    "ErrorContext",
    "ErrorSeverity",
    "ErrorCategory",
    "FetchError",
    "NetworkError",
    "ParseError",
    "ProviderError",
    "ConfigurationError",
    # Async utilities
    "gather_settled",
    "split_outcomes",
    # Settings
    "FeedSettings",
    "DEFAULT_RELAYS",
]
