#!/usr/bin/env python3
"""
Media Feed Server - HTTP Mode

Runs the feed API from a source checkout without installing the package.

Usage:
    python run_server.py --port 8765
    python run_server.py --host 127.0.0.1 --log-level DEBUG

Environment Variables:
    MEDIA_FEED_HOST: Server host (default: 0.0.0.0)
    MEDIA_FEED_PORT: Server port (default: 8765)
    MEDIA_FEED_LOG_LEVEL: Logging level (default: INFO)
    PEXELS_API_KEY / PIXABAY_API_KEY: Optional stock-media API keys
"""

import os
import sys

# Add src to path for development
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "src"))

from media_feed.cli import main  # noqa: E402

if __name__ == "__main__":
    main()
