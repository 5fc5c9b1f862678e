"""
Media Feed Server - command line entry point.

Usage:
    # Defaults from the environment (MEDIA_FEED_HOST / MEDIA_FEED_PORT)
    python -m media_feed

    # Custom bind address and verbose logging
    python -m media_feed --host 127.0.0.1 --port 9000 --log-level DEBUG

    # Keep explicit-content providers out of the feed
    python -m media_feed --no-explicit

Environment Variables:
    See ``media_feed.shared.settings`` for the full list.
"""

from __future__ import annotations

import argparse
import dataclasses
import logging
import sys

from media_feed.shared.exceptions import ConfigurationError
from media_feed.shared.settings import FeedSettings

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def build_parser(settings: FeedSettings) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Run the Media Feed HTTP API")
    parser.add_argument(
        "--host",
        default=settings.host,
        help=f"Server host (default: {settings.host})",
    )
    parser.add_argument(
        "--port",
        type=int,
        default=settings.port,
        help=f"Server port (default: {settings.port})",
    )
    parser.add_argument(
        "--log-level",
        default=settings.log_level,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        type=str.upper,
        help=f"Logging level (default: {settings.log_level})",
    )
    parser.add_argument(
        "--no-explicit",
        action="store_true",
        help="Never dispatch the explicit-content provider group",
    )
    return parser


def main(argv: list[str] | None = None) -> None:
    try:
        settings = FeedSettings.from_env()
    except ConfigurationError as e:
        logging.basicConfig(level=logging.ERROR, format=LOG_FORMAT)
        details = e.to_dict()
        logger.error(f"Invalid configuration: {details['error']}")
        if "suggestion" in details:
            logger.error(f"  Hint: {details['suggestion']}")
        sys.exit(2)

    args = build_parser(settings).parse_args(argv)
    logging.basicConfig(level=getattr(logging, args.log_level), format=LOG_FORMAT)

    settings = dataclasses.replace(
        settings,
        host=args.host,
        port=args.port,
        log_level=args.log_level,
        explicit_enabled=settings.explicit_enabled and not args.no_explicit,
    )

    logger.info("Creating Media Feed API server...")
    logger.info(f"  Host: {settings.host}")
    logger.info(f"  Port: {settings.port}")
    logger.info(f"  Relays: {len(settings.relays)}")
    logger.info(f"  Explicit group: {'Enabled' if settings.explicit_enabled else 'Disabled'}")
    logger.info(f"  Pexels key: {'Set' if settings.pexels_api_key else 'Not set'}")
    logger.info(f"  Pixabay key: {'Set' if settings.pixabay_api_key else 'Not set'}")

    import uvicorn

    from media_feed.api.server import create_app

    app = create_app(settings=settings)
    logger.info(f"Starting server at http://{settings.host}:{settings.port}")
    uvicorn.run(app, host=settings.host, port=settings.port, log_level=settings.log_level.lower())


if __name__ == "__main__":
    main()
