from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Sequence


class FeedVariant(str, Enum):
    """Wire formats the normalizer understands."""
    RSS2 = "rss2"
    ATOM = "atom"
    JSON_FEED = "json_feed"


class RelationType(str, Enum):
    PREREQUISITE = "prerequisite"
    EXTENSION = "extension"
    SIMILAR = "similar"


@dataclass(frozen=True)
class ParsedDocument:
    """
    Output of the wire-format parser: which variant was detected plus the
    variant-specific feed and entry mappings (feedparser dicts for RSS and
    Atom, the decoded JSON object for JSON Feed).
    """
    variant: FeedVariant
    feed: Mapping[str, Any]
    entries: Sequence[Mapping[str, Any]]


@dataclass(frozen=True)
class FeedEntry:
    """
    One normalized entry. Entries without a resolvable link or a publish
    timestamp never reach this type.
    """
    title: str
    link: str
    published_at: datetime
    summary: Optional[str] = None
    content: Optional[str] = None
    author: Optional[str] = None
    image_url: Optional[str] = None


@dataclass(frozen=True)
class Feed:
    """
    Canonical feed, identical in shape for RSS 2.0, Atom and JSON Feed.

    WARNING: Do not change fields lightly. This is the library's contract.
    """
    title: str
    description: Optional[str] = None
    link: Optional[str] = None
    entries: List[FeedEntry] = field(default_factory=list)
    skipped_entries: int = 0


def _new_id() -> str:
    return str(uuid.uuid4())


@dataclass
class Source:
    title: str
    url: str
    website_url: Optional[str] = None
    description: Optional[str] = None
    category: Optional[str] = None
    is_active: bool = True
    last_updated: Optional[datetime] = None
    id: str = field(default_factory=_new_id)


@dataclass
class Article:
    """
    Persistent article. (source_id, link) is unique; is_read, is_favorite
    and reading_progress belong to the user and ingestion never writes them
    after creation.
    """
    source_id: str
    title: str
    link: str
    published_at: datetime
    summary: Optional[str] = None
    content: Optional[str] = None
    author: Optional[str] = None
    image_url: Optional[str] = None
    is_read: bool = False
    is_favorite: bool = False
    reading_progress: float = 0.0
    keywords: Dict[str, float] = field(default_factory=dict)
    id: str = field(default_factory=_new_id)


@dataclass
class KeywordGroup:
    name: str
    keywords: List[str] = field(default_factory=list)
    is_active: bool = True
    id: str = field(default_factory=_new_id)


@dataclass(frozen=True)
class ArticleRelation:
    source_article_id: str
    target_article_id: str
    relation_type: RelationType
    relevance_score: float
