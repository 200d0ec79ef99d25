from __future__ import annotations

from typing import AbstractSet, Iterable, List, Set, Tuple

from .models import FeedEntry


def dedup_key(source_id: str, link: str) -> Tuple[str, str]:
    """Natural key of an article: one article per (source, link)."""
    return (source_id, link)


def new_entries(entries: Iterable[FeedEntry], existing_links: AbstractSet[str]) -> List[FeedEntry]:
    """
    Drop entries whose link is already stored for the source, and repeated
    links within the same batch. Keeps the first occurrence and preserves
    original order.
    """
    seen: Set[str] = set(existing_links)
    out: List[FeedEntry] = []
    for entry in entries:
        if entry.link in seen:
            continue
        seen.add(entry.link)
        out.append(entry)
    return out
