"""
Unified Exception Hierarchy for Media Feed.

Errors are recovered as close to where they happen as possible:
fetch errors become ``None`` at the fetcher, provider errors become an
empty list at the provider boundary, and anything escaping the
aggregator becomes the placeholder batch. Only configuration errors are
allowed to reach the caller (at startup).

Exception Hierarchy:
    MediaFeedError (base)
    ├── FetchError
    │   ├── NetworkError
    │   └── ParseError
    ├── ProviderError
    └── ConfigurationError
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any


class ErrorSeverity(Enum):
    """Severity levels for errors."""
    WARNING = auto()      # Recoverable, can continue
    ERROR = auto()        # Failed for this call only
    CRITICAL = auto()     # Cannot continue


class ErrorCategory(Enum):
    """Categories for error classification."""
    NETWORK = "network"
    DATA = "data"
    PROVIDER = "provider"
    CONFIGURATION = "config"


@dataclass(frozen=True, slots=True)
class ErrorContext:
    """Rich context attached to every error."""
    url: str | None = None
    provider: str | None = None
    status_code: int | None = None
    suggestion: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)


class MediaFeedError(Exception):
    """
    Base exception for all Media Feed errors.

    Provides:
    - Structured error context
    - Severity classification
    - Category for log grouping
    """

    __slots__ = ("context", "severity", "category")

    def __init__(
        self,
        message: str,
        *,
        context: ErrorContext | None = None,
        severity: ErrorSeverity = ErrorSeverity.ERROR,
        category: ErrorCategory = ErrorCategory.NETWORK,
    ) -> None:
        super().__init__(message)
        self.context = context or ErrorContext()
        self.severity = severity
        self.category = category

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        result: dict[str, Any] = {
            "error": str(self),
            "category": self.category.value,
            "severity": self.severity.name.lower(),
        }
        if self.context.url:
            result["url"] = self.context.url
        if self.context.provider:
            result["provider"] = self.context.provider
        if self.context.status_code is not None:
            result["status_code"] = self.context.status_code
        if self.context.suggestion:
            result["suggestion"] = self.context.suggestion
        return result


# =============================================================================
# Fetch Errors
# =============================================================================

class FetchError(MediaFeedError):
    """Base class for a single outbound call that did not yield JSON."""

    def __init__(
        self,
        message: str,
        *,
        context: ErrorContext | None = None,
        category: ErrorCategory = ErrorCategory.NETWORK,
    ) -> None:
        super().__init__(
            message,
            context=context,
            severity=ErrorSeverity.WARNING,
            category=category,
        )


class NetworkError(FetchError):
    """Raised for connection failures, timeouts and non-success status codes."""

    def __init__(
        self,
        message: str = "Network request failed",
        *,
        url: str | None = None,
        status_code: int | None = None,
    ) -> None:
        super().__init__(
            message,
            context=ErrorContext(url=url, status_code=status_code),
        )


class ParseError(FetchError):
    """Raised when a response body is not usable JSON."""

    def __init__(
        self,
        message: str = "Invalid JSON response",
        *,
        url: str | None = None,
    ) -> None:
        super().__init__(
            f"Parse error: {message}",
            context=ErrorContext(url=url),
            category=ErrorCategory.DATA,
        )


# =============================================================================
# Provider Errors
# =============================================================================

class ProviderError(MediaFeedError):
    """Adapter-level failure, tagged with the provider call that produced it."""

    def __init__(
        self,
        provider: str,
        message: str,
    ) -> None:
        super().__init__(
            f"{provider}: {message}",
            context=ErrorContext(provider=provider),
            severity=ErrorSeverity.WARNING,
            category=ErrorCategory.PROVIDER,
        )


# =============================================================================
# Configuration Errors
# =============================================================================

class ConfigurationError(MediaFeedError):
    """Raised for invalid environment configuration."""

    def __init__(
        self,
        message: str,
        *,
        setting: str | None = None,
        value: Any = None,
    ) -> None:
        super().__init__(
            message,
            context=ErrorContext(
                suggestion=f"Check the {setting} environment variable" if setting else None,
                metadata={"setting": setting, "value": value} if setting else {},
            ),
            severity=ErrorSeverity.CRITICAL,
            category=ErrorCategory.CONFIGURATION,
        )
