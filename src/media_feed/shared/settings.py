"""
Runtime settings for Media Feed.

All values come from environment variables with defaults that work
without any account on the upstream services. Invalid values raise
ConfigurationError at startup rather than failing per request.

Environment Variables:
    MEDIA_FEED_DIRECT_TIMEOUT: Direct request deadline in seconds, total (default: 6)
    MEDIA_FEED_RELAY_TIMEOUT: Per-relay deadline in seconds, total (default: 10)
    MEDIA_FEED_RELAYS: Comma-separated relay prefixes. Relayed requests never
        carry the caller's Authorization header (the Pexels key).
    MEDIA_FEED_MAX_RESULTS: Response size cap (default: 120)
    MEDIA_FEED_FALLBACK_SIZE: Placeholder batch size on failure (default: 25)
    MEDIA_FEED_EXPLICIT_FLOOR: Minimum explicit-branch records before the
        emergency query (default: 5)
    MEDIA_FEED_BROAD_NET_MIN_LENGTH: Queries longer than this also enable the
        explicit group (default: 3, "off" disables)
    MEDIA_FEED_EXPLICIT_ENABLED: Master switch for the explicit group
    PEXELS_API_KEY / PIXABAY_API_KEY / GIPHY_API_KEY / NASA_API_KEY
    MEDIA_FEED_HOST / MEDIA_FEED_PORT: HTTP bind address
    MEDIA_FEED_LOG_LEVEL: Logging level name (default: INFO)
"""

from __future__ import annotations

import dataclasses
import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from .exceptions import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_RELAYS: tuple[str, ...] = (
    "https://api.allorigins.win/raw?url=",
    "https://api.codetabs.com/v1/proxy?quest=",
    "https://corsproxy.io/?",
    "https://jsonp.afeld.me/?url=",
    "https://proxy.cors.sh/",
)

# Giphy's documented public beta key; NASA's shared demo key
DEFAULT_GIPHY_KEY = "dc6zaTOxFJmzC"
DEFAULT_NASA_KEY = "DEMO_KEY"

_DISABLED_VALUES = {"off", "none", "disabled", ""}
_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


@dataclass(frozen=True)
class FeedSettings:
    """Strongly typed runtime configuration."""

    direct_timeout: float = 6.0
    relay_timeout: float = 10.0
    relays: tuple[str, ...] = DEFAULT_RELAYS

    max_results: int = 120
    fallback_size: int = 25
    explicit_floor: int = 5
    broad_net_min_length: int | None = 3
    explicit_enabled: bool = True

    pexels_api_key: str = ""
    pixabay_api_key: str = ""
    giphy_api_key: str = DEFAULT_GIPHY_KEY
    nasa_api_key: str = DEFAULT_NASA_KEY

    host: str = "0.0.0.0"  # noqa: S104
    port: int = 8765
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> FeedSettings:
        """
        Build settings from environment variables.

        Args:
            environ: Mapping to read from (defaults to ``os.environ``)

        Raises:
            ConfigurationError: When a value cannot be parsed or is out of range
        """
        env = os.environ if environ is None else environ

        relays_raw = env.get("MEDIA_FEED_RELAYS")
        relays = DEFAULT_RELAYS
        if relays_raw is not None:
            relays = tuple(r.strip() for r in relays_raw.split(",") if r.strip())

        settings = cls(
            direct_timeout=_parse_float(env, "MEDIA_FEED_DIRECT_TIMEOUT", cls.direct_timeout),
            relay_timeout=_parse_float(env, "MEDIA_FEED_RELAY_TIMEOUT", cls.relay_timeout),
            relays=relays,
            max_results=_parse_int(env, "MEDIA_FEED_MAX_RESULTS", cls.max_results, minimum=1),
            fallback_size=_parse_int(env, "MEDIA_FEED_FALLBACK_SIZE", cls.fallback_size, minimum=1),
            explicit_floor=_parse_int(env, "MEDIA_FEED_EXPLICIT_FLOOR", cls.explicit_floor, minimum=0),
            broad_net_min_length=_parse_optional_int(env, "MEDIA_FEED_BROAD_NET_MIN_LENGTH", 3),
            explicit_enabled=_parse_bool(env, "MEDIA_FEED_EXPLICIT_ENABLED", cls.explicit_enabled),
            pexels_api_key=env.get("PEXELS_API_KEY", "").strip(),
            pixabay_api_key=env.get("PIXABAY_API_KEY", "").strip(),
            giphy_api_key=env.get("GIPHY_API_KEY", "").strip() or DEFAULT_GIPHY_KEY,
            nasa_api_key=env.get("NASA_API_KEY", "").strip() or DEFAULT_NASA_KEY,
            host=env.get("MEDIA_FEED_HOST", cls.host),
            port=_parse_int(env, "MEDIA_FEED_PORT", cls.port, minimum=1),
            log_level=env.get("MEDIA_FEED_LOG_LEVEL", cls.log_level).upper(),
        )

        if settings.log_level not in logging.getLevelNamesMapping():
            raise ConfigurationError(
                f"Unknown log level: {settings.log_level!r}",
                setting="MEDIA_FEED_LOG_LEVEL",
                value=settings.log_level,
            )
        return settings

    def to_dict(self) -> dict[str, Any]:
        """Convert to a plain dict (used to seed the DI container config)."""
        return dataclasses.asdict(self)


# =============================================================================
# Parsing helpers
# =============================================================================

def _parse_float(env: Mapping[str, str], name: str, default: float) -> float:
    raw = env.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = float(raw)
    except ValueError as e:
        raise ConfigurationError(f"{name} must be a number, got {raw!r}", setting=name, value=raw) from e
    if value <= 0:
        raise ConfigurationError(f"{name} must be positive, got {value}", setting=name, value=raw)
    return value


def _parse_int(env: Mapping[str, str], name: str, default: int, minimum: int = 0) -> int:
    raw = env.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = int(raw)
    except ValueError as e:
        raise ConfigurationError(f"{name} must be an integer, got {raw!r}", setting=name, value=raw) from e
    if value < minimum:
        raise ConfigurationError(f"{name} must be >= {minimum}, got {value}", setting=name, value=raw)
    return value


def _parse_optional_int(env: Mapping[str, str], name: str, default: int | None) -> int | None:
    raw = env.get(name)
    if raw is None:
        return default
    if raw.strip().lower() in _DISABLED_VALUES:
        return None
    return _parse_int(env, name, default or 0)


def _parse_bool(env: Mapping[str, str], name: str, default: bool) -> bool:
    raw = env.get(name)
    if raw is None or not raw.strip():
        return default
    lowered = raw.strip().lower()
    if lowered in _TRUE_VALUES:
        return True
    if lowered in _FALSE_VALUES:
        return False
    raise ConfigurationError(f"{name} must be a boolean, got {raw!r}", setting=name, value=raw)
