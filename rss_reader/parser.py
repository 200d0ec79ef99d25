from __future__ import annotations

import calendar
import json
import time
from datetime import datetime, timezone
from typing import Any, Mapping, Optional, Sequence

import feedparser
from dateutil import parser as date_parser

from .exceptions import ParseError
from .models import FeedVariant, ParsedDocument

# JSON Feed 1.0 and 1.1 declare a version URL under one of these prefixes.
JSON_FEED_VERSION_PREFIXES = ("https://jsonfeed.org/version/", "http://jsonfeed.org/version/")


def detect_variant(version: Optional[str]) -> FeedVariant:
    """
    Map feedparser's `version` string to a FeedVariant.
    RSS 0.9x and 1.0 share the RSS 2.0 mapping.
    """
    v = (version or "").lower()
    if v.startswith("rss"):
        return FeedVariant.RSS2
    if v.startswith("atom"):
        return FeedVariant.ATOM
    raise ParseError(f"Unsupported or unrecognised feed format (version={version!r})")


def _is_json(content: bytes, content_type: Optional[str]) -> bool:
    head = content.lstrip(b"\xef\xbb\xbf \t\r\n")[:1]
    if head == b"{":
        return True
    # A JSON content type on an XML body is a misconfigured server, not JSON.
    return "json" in (content_type or "").lower() and head != b"<"


def parse_json_feed(content: bytes) -> ParsedDocument:
    """
    Decode a JSON Feed (1.0 or 1.1) document. feedparser has no JSON
    support, so the top-level object becomes `feed` and its `items` the
    entries, with JSON Feed key names left as they are.
    """
    try:
        data = json.loads(content.decode("utf-8-sig"))
    except (UnicodeDecodeError, ValueError) as e:
        raise ParseError(f"Invalid JSON Feed document: {e}") from e
    if not isinstance(data, dict):
        raise ParseError("JSON Feed document must be a JSON object")

    version = data.get("version")
    if not isinstance(version, str) or not version.startswith(JSON_FEED_VERSION_PREFIXES):
        raise ParseError(f"Unsupported or unrecognised feed format (version={version!r})")
    items = data.get("items")
    if not isinstance(items, list):
        raise ParseError("JSON Feed document has no items array")

    return ParsedDocument(
        variant=FeedVariant.JSON_FEED,
        feed={k: v for k, v in data.items() if k != "items"},
        entries=items,
    )


def parse_feed(content: bytes, content_type: Optional[str] = None) -> ParsedDocument:
    """
    Parse raw feed bytes and tag the detected variant. RSS and Atom go
    through feedparser; JSON Feed is decoded by parse_json_feed.

    Raises ParseError when the bytes are not an RSS, Atom or JSON Feed document.
    """
    if not content or not content.strip():
        raise ParseError("Empty feed document")

    if _is_json(content, content_type):
        return parse_json_feed(content)

    try:
        parsed = feedparser.parse(content)
    except Exception as e:  # pragma: no cover - feedparser reports problems via bozo
        raise ParseError(f"Failed to parse feed: {e}") from e

    version = parsed.get("version")
    if not version:
        exc = parsed.get("bozo_exception")
        msg = "Document is not a recognised feed"
        if exc:
            msg += f" ({exc})"
        raise ParseError(msg)

    return ParsedDocument(
        variant=detect_variant(version),
        feed=parsed.get("feed") or {},
        entries=list(parsed.get("entries") or []),
    )


def to_datetime(entry: Mapping[str, Any], keys: Sequence[str]) -> Optional[datetime]:
    """
    Convert the first usable date field among `keys` to an aware UTC datetime.
    `<key>_parsed` (struct_time, already UTC in feedparser) wins over the raw string.
    """
    for key in keys:
        val = entry.get(f"{key}_parsed")
        if isinstance(val, time.struct_time):
            try:
                return datetime.fromtimestamp(calendar.timegm(val), tz=timezone.utc)
            except (OverflowError, ValueError, OSError):
                pass
        s = entry.get(key)
        if isinstance(s, datetime):
            return s if s.tzinfo else s.replace(tzinfo=timezone.utc)
        if isinstance(s, str) and s.strip():
            try:
                dt = date_parser.parse(s)
            except (ValueError, OverflowError):
                continue
            return dt if dt.tzinfo else dt.replace(tzinfo=timezone.utc)
    return None
