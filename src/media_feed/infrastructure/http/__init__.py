"""
HTTP infrastructure.

Single outbound path for all provider traffic.
"""

from .client import BROWSER_USER_AGENT, ResilientFetcher, build_relay_url

__all__ = ["ResilientFetcher", "build_relay_url", "BROWSER_USER_AGENT"]
