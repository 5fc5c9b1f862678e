"""Entry point: ``python -m media_feed``."""

from media_feed.cli import main

if __name__ == "__main__":
    main()
