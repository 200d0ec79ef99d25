from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, Mapping, Optional, Tuple
from urllib.parse import urljoin, urlparse

from .models import Feed, FeedEntry, FeedVariant, ParsedDocument
from .parser import to_datetime
from .text import clean_text, first_image_src, truncate

logger = logging.getLogger(__name__)


def _str(value: Any) -> Optional[str]:
    if isinstance(value, str):
        value = value.strip()
        return value or None
    return None


def _first(d: Mapping[str, Any], *keys: str) -> Optional[str]:
    for k in keys:
        v = _str(d.get(k))
        if v:
            return v
    return None


def is_absolute_url(url: Optional[str]) -> bool:
    if not url:
        return False
    parsed = urlparse(url)
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


def _rel_link(links: Any, rel: str) -> Optional[str]:
    if not isinstance(links, list):
        return None
    for link in links:
        if isinstance(link, Mapping) and (link.get("rel") or "alternate") == rel:
            href = _str(link.get("href"))
            if href:
                return href
    return None


def _content_value(entry: Mapping[str, Any]) -> Optional[str]:
    # feedparser: a list of {"value", "type"}, first non-empty wins.
    content = entry.get("content")
    if isinstance(content, list):
        for part in content:
            if isinstance(part, Mapping):
                value = _str(part.get("value"))
                if value:
                    return value
    return _str(content)


def _is_image(mime: Any, medium: Any = None) -> bool:
    return medium == "image" or (isinstance(mime, str) and mime.lower().startswith("image/"))


def _media_image(entry: Mapping[str, Any]) -> Optional[str]:
    """Image declared through media/enclosure metadata rather than inline HTML."""
    for media in entry.get("media_content") or []:
        if not isinstance(media, Mapping):
            continue
        url = _str(media.get("url"))
        medium, mime = media.get("medium"), media.get("type")
        if url and (_is_image(mime, medium) or (not medium and not mime)):
            return url
    for thumb in entry.get("media_thumbnail") or []:
        if isinstance(thumb, Mapping) and _str(thumb.get("url")):
            return _str(thumb.get("url"))
    for enc in entry.get("enclosures") or []:
        if isinstance(enc, Mapping) and _is_image(enc.get("type")):
            url = _first(enc, "href", "url")
            if url:
                return url
    for link in entry.get("links") or []:
        if isinstance(link, Mapping) and link.get("rel") == "enclosure" and _is_image(link.get("type")):
            href = _str(link.get("href"))
            if href:
                return href
    image = entry.get("image")
    if isinstance(image, Mapping):
        url = _first(image, "href", "url")
    else:
        url = _str(image)
    if url:
        return url
    # JSON Feed attachments: {"url", "mime_type"}
    for attachment in entry.get("attachments") or []:
        if isinstance(attachment, Mapping) and _is_image(attachment.get("mime_type")):
            url = _str(attachment.get("url"))
            if url:
                return url
    return None


@dataclass(frozen=True)
class _VariantMapping:
    """Field names and lookups that differ between wire formats."""
    feed_description: Tuple[str, ...]
    feed_link: Callable[[Mapping[str, Any]], Optional[str]]
    entry_link: Callable[[Mapping[str, Any]], Optional[str]]
    entry_author: Callable[[Mapping[str, Any]], Optional[str]]
    entry_content: Callable[[Mapping[str, Any]], Optional[str]]
    date_keys: Tuple[str, ...]


def _atom_author(entry: Mapping[str, Any]) -> Optional[str]:
    authors = entry.get("authors")
    if isinstance(authors, list) and authors and isinstance(authors[0], Mapping):
        name = _str(authors[0].get("name"))
        if name:
            return name
    return _str(entry.get("author"))


def _json_author(entry: Mapping[str, Any]) -> Optional[str]:
    # 1.1 lists authors[]; 1.0 has a single author object.
    name = _atom_author(entry)
    if name:
        return name
    author = entry.get("author")
    if isinstance(author, Mapping):
        return _str(author.get("name"))
    return None


_MAPPINGS: Dict[FeedVariant, _VariantMapping] = {
    FeedVariant.RSS2: _VariantMapping(
        feed_description=("description", "subtitle"),
        feed_link=lambda f: _first(f, "link"),
        entry_link=lambda e: _first(e, "link"),
        entry_author=lambda e: _first(e, "author"),
        entry_content=_content_value,
        date_keys=("published",),
    ),
    FeedVariant.ATOM: _VariantMapping(
        feed_description=("subtitle", "description"),
        feed_link=lambda f: _rel_link(f.get("links"), "alternate") or _first(f, "link"),
        entry_link=lambda e: _rel_link(e.get("links"), "alternate") or _first(e, "link"),
        entry_author=_atom_author,
        entry_content=_content_value,
        date_keys=("published", "updated"),
    ),
    # Raw JSON Feed keys, as decoded by parser.parse_json_feed.
    FeedVariant.JSON_FEED: _VariantMapping(
        feed_description=("description",),
        feed_link=lambda f: _first(f, "home_page_url"),
        entry_link=lambda e: _first(e, "url", "external_url"),
        entry_author=_json_author,
        entry_content=lambda e: _first(e, "content_html", "content_text"),
        date_keys=("date_published",),
    ),
}

_unmapped = set(FeedVariant) - set(_MAPPINGS)
if _unmapped:  # pragma: no cover - guards against adding a variant without a mapping
    raise RuntimeError(f"No normalizer mapping for {sorted(v.value for v in _unmapped)}")


class FeedNormalizer:
    """
    Turn a ParsedDocument of any supported variant into one canonical Feed.

    Malformed entries are skipped one by one (logged at DEBUG and counted in
    Feed.skipped_entries); a feed left with no entries is still a valid Feed.
    """

    def __init__(self, *, title_fallback_chars: int = 60) -> None:
        self.title_fallback_chars = title_fallback_chars

    def normalize(self, document: ParsedDocument) -> Feed:
        mapping = _MAPPINGS[document.variant]
        feed = document.feed
        site_link = mapping.feed_link(feed)
        if not is_absolute_url(site_link):
            site_link = None

        entries = []
        skipped = 0
        for index, raw in enumerate(document.entries):
            entry = self._normalize_entry(raw, mapping, site_link, index)
            if entry is None:
                skipped += 1
                continue
            entries.append(entry)

        if skipped:
            logger.info("Skipped %d of %d entries while normalizing feed", skipped, len(document.entries))

        return Feed(
            title=_first(feed, "title") or "Untitled",
            description=_first(feed, *mapping.feed_description),
            link=site_link,
            entries=entries,
            skipped_entries=skipped,
        )

    def _normalize_entry(
        self,
        raw: Mapping[str, Any],
        mapping: _VariantMapping,
        site_link: Optional[str],
        index: int,
    ) -> Optional[FeedEntry]:
        if not isinstance(raw, Mapping):
            logger.debug("Skipping entry %d: not a mapping", index)
            return None

        link = self._resolve_link(mapping.entry_link(raw), site_link)
        if link is None:
            logger.debug("Skipping entry %d: no resolvable link", index)
            return None

        published_at = to_datetime(raw, mapping.date_keys)
        if published_at is None:
            logger.debug("Skipping entry %d (%s): no publish date", index, link)
            return None

        summary = _first(raw, "summary", "description")
        content = mapping.entry_content(raw)
        title = clean_text(_str(raw.get("title")))
        if not title:
            plain = clean_text(summary)
            if not plain:
                logger.debug("Skipping entry %d (%s): no title or description", index, link)
                return None
            title = truncate(plain, self.title_fallback_chars)

        return FeedEntry(
            title=title,
            link=link,
            published_at=published_at,
            summary=summary,
            content=content,
            author=mapping.entry_author(raw),
            image_url=self._primary_image(raw, content, summary, link),
        )

    @staticmethod
    def _resolve_link(link: Optional[str], site_link: Optional[str]) -> Optional[str]:
        if not link:
            return None
        if is_absolute_url(link):
            return link
        if site_link is None:
            return None
        resolved = urljoin(site_link, link)
        return resolved if is_absolute_url(resolved) else None

    @staticmethod
    def _primary_image(
        raw: Mapping[str, Any], content: Optional[str], summary: Optional[str], link: str
    ) -> Optional[str]:
        candidates: Iterable[Callable[[], Optional[str]]] = (
            lambda: _media_image(raw),
            lambda: first_image_src(content),
            lambda: first_image_src(summary),
        )
        for find in candidates:
            src = find()
            if src:
                return urljoin(link, src)
        return None
