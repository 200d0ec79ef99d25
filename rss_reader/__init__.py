"""
rss_reader

The feed-ingestion and content-intelligence core of an RSS reader.

Core ideas:
- Input: a website URL or a feed URL (RSS 2.0, Atom or JSON Feed)
- Process: discover → fetch → normalize → deduplicate → persist → extract keywords
- Output: stored Articles, keyword-group matches and related-article rankings

Example
-------
from rss_reader import RSSReader

reader = RSSReader()

feeds = reader.discover_feeds("https://example.com")
source = reader.add_source("Example", feeds[0])
added = reader.ingest_source(source.id)

for article in reader.articles(source.id):
    print(article.published_at, article.title, list(article.keywords)[:3])

group = reader.add_keyword_group("Architecture", ["architecture", "design patterns"])
matches = reader.articles_matching_group(group.id)
related = reader.find_related_articles(matches[0].id, max_results=3)
"""
from .config import Settings, load_settings
from .core import RSSReader
from .exceptions import (
    FetchCancelledError,
    FetchTimeoutError,
    NetworkError,
    NotFoundError,
    ParseError,
    PersistenceError,
    RSSReaderError,
)
from .ingestion import IngestReport
from .models import (
    Article,
    ArticleRelation,
    Feed,
    FeedEntry,
    FeedVariant,
    KeywordGroup,
    RelationType,
    Source,
)

__all__ = [
    "RSSReader",
    "Settings",
    "load_settings",
    "IngestReport",
    "Article",
    "ArticleRelation",
    "Feed",
    "FeedEntry",
    "FeedVariant",
    "KeywordGroup",
    "RelationType",
    "Source",
    "RSSReaderError",
    "NetworkError",
    "FetchTimeoutError",
    "FetchCancelledError",
    "ParseError",
    "PersistenceError",
    "NotFoundError",
]
