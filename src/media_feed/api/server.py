"""
HTTP API Server for the media feed.

Endpoints:
- ``GET /api/pins?q=<query>&safe=strict|relaxed``: ranked feed, always 200
- ``GET /health``: liveness and provider count

The aggregation pipeline never raises, so there is no error status path
for upstream failures: a degraded request still returns a JSON array
(possibly the placeholder batch).
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

from fastapi import FastAPI, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel

from media_feed.container import ApplicationContainer
from media_feed.domain.entities.media import SafetyLevel
from media_feed.shared.settings import FeedSettings

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

logger = logging.getLogger(__name__)


# Pydantic models for API responses
class UserResponse(BaseModel):
    """Attribution shown under a pin."""

    name: str
    avatar: str = ""


class PinResponse(BaseModel):
    """One feed record in the wire shape the feed UI consumes."""

    id: str
    title: str
    image: str
    video: str | None = None
    type: str
    height: int
    width: int
    user: UserResponse
    link: str | None = None
    source: str


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    providers: int


def parse_safety(value: str | None) -> SafetyLevel | None:
    """Map the ``safe`` query parameter to a SafetyLevel; unknown values are ignored."""
    if not value:
        return None
    try:
        return SafetyLevel(value.strip().lower())
    except ValueError:
        logger.debug(f"Ignoring unknown safe={value!r}")
        return None


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Application lifespan manager."""
    container: ApplicationContainer = app.state.container
    logger.info(f"Media feed API ready with {len(container.registry())} providers")
    yield
    logger.info("Media feed API shutting down")


def create_app(
    container: ApplicationContainer | None = None,
    settings: FeedSettings | None = None,
) -> FastAPI:
    """
    Create the FastAPI application.

    Args:
        container: Pre-configured DI container (tests override providers on it)
        settings: Settings used to configure a new container; read from the
            environment when omitted

    Returns:
        Configured FastAPI instance.
    """
    if container is None:
        container = ApplicationContainer()
        container.config.from_dict((settings or FeedSettings.from_env()).to_dict())

    app = FastAPI(
        title="Media Feed API",
        description="Aggregated image and video feed from public media APIs.",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.container = container

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/health", response_model=HealthResponse)
    async def health_check(request: Request) -> HealthResponse:
        """Health check endpoint."""
        registry = request.app.state.container.registry()
        return HealthResponse(status="healthy", providers=len(registry))

    @app.get(
        "/api/pins",
        response_model=list[PinResponse],
        response_model_exclude_none=True,
    )
    async def get_pins(
        request: Request,
        q: str | None = Query(default=None, description="Free-text query; empty = trending"),
        safe: str | None = Query(default=None, description="Safety override: strict or relaxed"),
    ) -> list[dict]:
        """
        Get the aggregated feed for a query.

        Returns at most 120 records (configurable); never an error status.
        """
        aggregator = request.app.state.container.aggregator()
        records = await aggregator.aggregate(q, parse_safety(safe))
        return [record.to_dict() for record in records]

    return app


__all__ = ["create_app", "PinResponse", "HealthResponse", "parse_safety"]
