"""Command-line access to feed discovery, feed preview and keyword extraction."""

from __future__ import annotations

import argparse
import logging
import sys
from typing import List, Optional

from .config import load_settings
from .core import RSSReader
from .exceptions import RSSReaderError

logger = logging.getLogger(__name__)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="rss-reader")
    parser.add_argument("--log-level", default=None, help="Overrides RSS_READER_LOG_LEVEL.")
    sub = parser.add_subparsers(dest="command", required=True)

    discover = sub.add_parser("discover", help="Find feed URLs for a website.")
    discover.add_argument("url")

    preview = sub.add_parser("preview", help="Fetch a feed and list its entries.")
    preview.add_argument("url")
    preview.add_argument("--limit", type=int, default=20)

    keywords = sub.add_parser("keywords", help="Extract keywords from text.")
    keywords.add_argument("text")
    keywords.add_argument("-n", "--max-keywords", type=int, default=None)
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = _build_parser().parse_args(argv)
    settings = load_settings()
    level = (args.log_level or settings.log_level).upper()
    logging.basicConfig(level=level, format="%(asctime)s - %(levelname)s - %(message)s")

    reader = RSSReader(settings=settings)
    try:
        if args.command == "discover":
            feeds = reader.discover_feeds(args.url)
            if not feeds:
                logger.warning("No feeds found for %s", args.url)
            for url in feeds:
                print(url)
        elif args.command == "preview":
            feed = reader.preview_feed(args.url)
            print(feed.title)
            entries = sorted(feed.entries, key=lambda e: e.published_at, reverse=True)
            for entry in entries[: max(0, args.limit)]:
                print(f"{entry.published_at:%Y-%m-%d %H:%M}  {entry.title}\n    {entry.link}")
        elif args.command == "keywords":
            for word, weight in reader.extract_keywords(args.text, args.max_keywords).items():
                print(f"{weight:.4f}  {word}")
    except RSSReaderError as e:
        logger.error("%s", e)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
