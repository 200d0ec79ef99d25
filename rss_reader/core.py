from __future__ import annotations

import logging
import threading
from typing import Dict, List, Optional, Sequence

from .aggregator import match_group
from .cache import LRUCache
from .config import Settings
from .discovery import FeedDiscoverer
from .fetcher import fetch_feed
from .http import HttpClient, RequestsHttpClient
from .ingestion import IngestionEngine, IngestReport
from .keywords import KeywordExtractor
from .models import Article, ArticleRelation, Feed, KeywordGroup, Source
from .normalizer import FeedNormalizer
from .relations import RelationEngine
from .repository import InMemoryRepository, Repository
from .tokenizer import TextTokenizer

logger = logging.getLogger(__name__)


class RSSReader:
    """
    High-level API over the feed core.

    Pipeline: discover -> fetch -> normalize -> dedup -> persist, with keyword
    extraction, keyword-group matching and related-article lookup on top of
    the stored articles. Storage and HTTP are injected; by default articles
    live in memory and requests does the fetching.
    """

    def __init__(
        self,
        *,
        settings: Optional[Settings] = None,
        repository: Optional[Repository] = None,
        http: Optional[HttpClient] = None,
        tokenizer: Optional[TextTokenizer] = None,
    ) -> None:
        self.settings = settings or Settings()
        s = self.settings
        self.repository: Repository = repository if repository is not None else InMemoryRepository()
        self.http: HttpClient = http if http is not None else RequestsHttpClient(user_agent=s.user_agent)

        self.keyword_cache: LRUCache[Dict[str, float]] = LRUCache(s.keyword_cache_size)
        self.extractor = KeywordExtractor(tokenizer, cache=self.keyword_cache)
        self.normalizer = FeedNormalizer(title_fallback_chars=s.title_fallback_chars)
        self.discoverer = FeedDiscoverer(self.http, timeout=s.http_timeout, max_workers=s.discovery_workers)
        self.ingestion = IngestionEngine(
            self.repository,
            self.http,
            normalizer=self.normalizer,
            extractor=self.extractor,
            timeout=s.http_timeout,
            max_workers=s.ingest_workers,
            max_keywords=s.max_keywords,
        )
        self.relations = RelationEngine(
            self.extractor,
            max_keywords=s.max_keywords,
            extension_ratio=s.extension_ratio,
        )

    # Feeds

    def discover_feeds(self, website_url: str, cancel: Optional[threading.Event] = None) -> List[str]:
        return self.discoverer.discover(website_url, cancel=cancel)

    def preview_feed(self, url: str, cancel: Optional[threading.Event] = None) -> Feed:
        """Fetch and normalize a feed without storing anything."""
        document = fetch_feed(url, self.http, timeout=self.settings.http_timeout, cancel=cancel)
        return self.normalizer.normalize(document)

    def ingest_source(self, source_id: str, cancel: Optional[threading.Event] = None) -> int:
        """Fetch one source and store its new articles. Returns the number added."""
        source = self.repository.get_source(source_id)
        return self.ingestion.ingest(source, cancel=cancel)

    def refresh_all(self, cancel: Optional[threading.Event] = None) -> List[IngestReport]:
        """Ingest every active source; failures are reported per source."""
        sources = [s for s in self.repository.list_sources() if s.is_active]
        reports = self.ingestion.ingest_many(sources, cancel=cancel)
        failed = sum(1 for r in reports if not r.ok)
        logger.info(
            "Refreshed %d sources: %d new articles, %d failed",
            len(reports),
            sum(r.added_count for r in reports),
            failed,
        )
        return reports

    # Content intelligence

    def extract_keywords(self, text: str, max_keywords: Optional[int] = None) -> Dict[str, float]:
        n = self.settings.max_keywords if max_keywords is None else max_keywords
        return self.extractor.extract(text, n)

    def find_related_articles(self, article_id: str, max_results: int = 5) -> List[ArticleRelation]:
        article = self.repository.get_article(article_id)
        return self.relations.find_related(article, self.repository.list_articles(), max_results)

    def articles_matching_group(self, group_id: str) -> List[Article]:
        group = self.repository.get_keyword_group(group_id)
        return match_group(
            group,
            self.repository.list_articles(),
            extractor=self.extractor,
            max_keywords=self.settings.max_keywords,
        )

    # Sources

    def add_source(
        self,
        title: str,
        url: str,
        *,
        website_url: Optional[str] = None,
        description: Optional[str] = None,
        category: Optional[str] = None,
    ) -> Source:
        source = Source(
            title=title,
            url=url,
            website_url=website_url,
            description=description,
            category=category,
        )
        self.repository.add_source(source)
        return source

    def update_source(self, source: Source) -> None:
        self.repository.update_source(source)

    def remove_source(self, source_id: str) -> None:
        self.repository.delete_source(source_id)

    def sources(self) -> List[Source]:
        return self.repository.list_sources()

    # Articles

    def articles(self, source_id: Optional[str] = None) -> List[Article]:
        """Stored articles, newest first, optionally for one source."""
        if source_id is None:
            return self.repository.list_articles()
        self.repository.get_source(source_id)
        return self.repository.articles_for_source(source_id)

    def mark_as_read(self, article_id: str, is_read: bool = True) -> Article:
        article = self.repository.get_article(article_id)
        article.is_read = is_read
        self.repository.update_article(article)
        return article

    def toggle_favorite(self, article_id: str) -> Article:
        article = self.repository.get_article(article_id)
        article.is_favorite = not article.is_favorite
        self.repository.update_article(article)
        return article

    def update_reading_progress(self, article_id: str, progress: float) -> Article:
        if not 0.0 <= progress <= 1.0:
            raise ValueError(f"reading progress must be within [0, 1], got {progress}")
        article = self.repository.get_article(article_id)
        article.reading_progress = progress
        self.repository.update_article(article)
        return article

    # Keyword groups

    def add_keyword_group(self, name: str, keywords: Sequence[str], *, is_active: bool = True) -> KeywordGroup:
        group = KeywordGroup(name=name, keywords=list(keywords), is_active=is_active)
        self.repository.add_keyword_group(group)
        return group

    def update_keyword_group(self, group: KeywordGroup) -> None:
        self.repository.update_keyword_group(group)

    def remove_keyword_group(self, group_id: str) -> None:
        self.repository.delete_keyword_group(group_id)

    def keyword_groups(self) -> List[KeywordGroup]:
        return self.repository.list_keyword_groups()
