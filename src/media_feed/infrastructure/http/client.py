"""
HTTP Client Module - Resilient JSON fetcher with relay escalation.

This module provides the single outbound HTTP path used by every provider:
- Direct attempt with a browser-like identity and a short timeout
- Parallel escalation through public forwarding relays when the direct
  attempt fails (network error, non-2xx, timeout or non-JSON body)
- Never raises: every failure resolves to ``None``

Usage:
    from media_feed.infrastructure.http.client import ResilientFetcher

    fetcher = ResilientFetcher()
    data = await fetcher.fetch("https://api.example.com/items.json")
    if data is None:
        ...  # upstream unavailable, degrade gracefully
"""

from __future__ import annotations

import asyncio
import json
import logging
import urllib.parse
from typing import Any

import httpx

from media_feed.shared.async_utils import gather_settled
from media_feed.shared.exceptions import FetchError, NetworkError, ParseError
from media_feed.shared.settings import DEFAULT_RELAYS

logger = logging.getLogger(__name__)

BROWSER_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)
DEFAULT_REFERER = "https://www.google.com"

# Credentials stay on the direct path; relays are third-party hosts.
RELAY_STRIPPED_HEADERS = frozenset({"authorization"})


def build_relay_url(relay: str, url: str) -> str:
    """
    Build the relayed form of ``url``.

    Relays whose prefix carries a query string take the URL-encoded
    target; path-style relays take the target verbatim.

    Examples:
        >>> build_relay_url("https://corsproxy.io/?", "https://a.b/c?d=1")
        'https://corsproxy.io/?https%3A%2F%2Fa.b%2Fc%3Fd%3D1'
        >>> build_relay_url("https://proxy.cors.sh/", "https://a.b/c")
        'https://proxy.cors.sh/https://a.b/c'
    """
    if "?" in relay:
        return f"{relay}{urllib.parse.quote(url, safe='')}"
    return f"{relay}{url}"


def parse_json_body(text: str, url: str) -> Any:
    """
    Parse a response body as a JSON object or array.

    Raises:
        ParseError: When the body is not JSON or is a bare scalar
    """
    try:
        data = json.loads(text)
    except (json.JSONDecodeError, ValueError) as e:
        raise ParseError(str(e), url=url) from e
    if not isinstance(data, (dict, list)):
        raise ParseError(f"expected object or array, got {type(data).__name__}", url=url)
    return data


class ResilientFetcher:
    """
    Two-stage JSON fetcher: direct first, then every relay in parallel.

    Each call opens its own ``httpx.AsyncClient``; nothing is pooled or
    cached across calls.

    Args:
        direct_timeout: Timeout for the direct attempt in seconds
        relay_timeout: Timeout for each relay attempt in seconds
        relays: Relay prefixes, tried in parallel; list order breaks ties
        transport: Optional httpx transport (tests pass ``httpx.MockTransport``)
    """

    def __init__(
        self,
        direct_timeout: float = 6.0,
        relay_timeout: float = 10.0,
        relays: tuple[str, ...] | list[str] = DEFAULT_RELAYS,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._direct_timeout = direct_timeout
        self._relay_timeout = relay_timeout
        self._relays = tuple(relays)
        self._transport = transport

    @property
    def relays(self) -> tuple[str, ...]:
        return self._relays

    async def fetch(self, url: str, headers: dict[str, str] | None = None) -> Any | None:
        """
        Fetch ``url`` and return its parsed JSON body.

        Args:
            url: Absolute URL to request
            headers: Extra headers (e.g. provider Authorization)

        Returns:
            Parsed JSON (dict or list), or None when every stage failed
        """
        try:
            return await self._direct(url, headers)
        except FetchError as e:
            logger.debug(f"Direct fetch failed ({e}), escalating to {len(self._relays)} relays: {url}")
        except Exception as e:
            logger.warning(f"Unexpected direct fetch error for {url}: {e}")

        if not self._relays:
            return None

        try:
            return await self._via_relays(url, headers)
        except Exception as e:
            logger.warning(f"Relay escalation error for {url}: {e}")
            return None

    # =========================================================================
    # Stages
    # =========================================================================

    async def _direct(self, url: str, headers: dict[str, str] | None) -> Any:
        request_headers = {
            **(headers or {}),
            "Referer": DEFAULT_REFERER,
            "User-Agent": BROWSER_USER_AGENT,
        }
        return await self._get_json(url, request_headers, self._direct_timeout)

    async def _via_relays(self, url: str, headers: dict[str, str] | None) -> Any | None:
        request_headers = {
            name: value for name, value in (headers or {}).items() if name.lower() not in RELAY_STRIPPED_HEADERS
        }
        request_headers["User-Agent"] = BROWSER_USER_AGENT
        outcomes = await gather_settled(
            *(
                self._get_json(build_relay_url(relay, url), request_headers, self._relay_timeout)
                for relay in self._relays
            )
        )
        for relay, outcome in zip(self._relays, outcomes, strict=True):
            if not isinstance(outcome, Exception):
                logger.debug(f"Relay {relay} served {url}")
                return outcome

        logger.debug(f"All {len(self._relays)} relays failed for {url}")
        return None

    async def _get_json(self, url: str, headers: dict[str, str], timeout: float) -> Any:
        """
        Issue one GET and parse its JSON body.

        ``timeout`` is a total deadline covering connect, every redirect hop
        and the full body read.

        Raises:
            NetworkError: Transport failure, timeout or non-2xx status
            ParseError: Body is not a JSON object or array
        """
        try:
            async with asyncio.timeout(timeout):
                async with httpx.AsyncClient(
                    timeout=timeout,
                    follow_redirects=True,
                    transport=self._transport,
                ) as client:
                    response = await client.get(url, headers=headers)
        except (TimeoutError, httpx.TimeoutException) as e:
            raise NetworkError(f"Request timeout after {timeout}s", url=url) from e
        except httpx.HTTPError as e:
            raise NetworkError(f"Connection failed: {e}", url=url) from e

        if not response.is_success:
            raise NetworkError(
                f"HTTP {response.status_code}: {response.reason_phrase}",
                url=url,
                status_code=response.status_code,
            )
        return parse_json_body(response.text, url)
