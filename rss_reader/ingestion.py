from __future__ import annotations

import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, Dict, List, Optional, Sequence

from .dedup import new_entries
from .exceptions import RSSReaderError
from .fetcher import fetch_feed
from .http import HttpClient
from .keywords import KeywordExtractor
from .models import Article, FeedEntry, Source
from .normalizer import FeedNormalizer
from .repository import Repository

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class IngestReport:
    source_id: str
    added_count: int = 0
    error: Optional[RSSReaderError] = None

    @property
    def ok(self) -> bool:
        return self.error is None


class IngestionEngine:
    """
    fetch -> normalize -> dedup against stored links -> persist new articles.

    Ingestion of one source never overlaps with itself: a second caller waits
    for the first and then finds nothing new.
    """

    def __init__(
        self,
        repository: Repository,
        http: HttpClient,
        *,
        normalizer: Optional[FeedNormalizer] = None,
        extractor: Optional[KeywordExtractor] = None,
        timeout: float = 15.0,
        max_workers: int = 4,
        max_keywords: int = 10,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self.repository = repository
        self.http = http
        self.normalizer = normalizer or FeedNormalizer()
        self.extractor = extractor or KeywordExtractor()
        self.timeout = timeout
        self.max_workers = max(1, max_workers)
        self.max_keywords = max_keywords
        self.clock = clock
        self._locks: Dict[str, threading.Lock] = {}
        self._locks_guard = threading.Lock()

    def _lock_for(self, source_id: str) -> threading.Lock:
        with self._locks_guard:
            lock = self._locks.get(source_id)
            if lock is None:
                lock = self._locks[source_id] = threading.Lock()
            return lock

    def ingest(self, source: Source, cancel: Optional[threading.Event] = None) -> int:
        """
        Ingest one source and return how many new articles were stored.

        NetworkError, ParseError and PersistenceError propagate; in that case
        source.last_updated is left as it was.
        """
        with self._lock_for(source.id):
            document = fetch_feed(source.url, self.http, timeout=self.timeout, cancel=cancel)
            feed = self.normalizer.normalize(document)

            existing = self.repository.existing_links_for_source(source.id)
            fresh = new_entries(feed.entries, existing)
            articles = [self._to_article(source, entry) for entry in fresh]
            if articles:
                self.repository.add_articles(source.id, articles)

            # An empty but successful fetch still proves the source is alive.
            # Only last_updated is written; the stored copy may have been
            # edited by the user while the fetch ran.
            now = self.clock()
            stored = self.repository.get_source(source.id)
            stored.last_updated = now
            self.repository.update_source(stored)
            source.last_updated = now

        logger.info(
            "Ingested %s: %d new, %d already stored, %d skipped",
            source.url,
            len(articles),
            len(feed.entries) - len(articles),
            feed.skipped_entries,
        )
        return len(articles)

    def _to_article(self, source: Source, entry: FeedEntry) -> Article:
        article = Article(
            source_id=source.id,
            title=entry.title,
            link=entry.link,
            published_at=entry.published_at,
            summary=entry.summary,
            content=entry.content,
            author=entry.author,
            image_url=entry.image_url,
        )
        article.keywords = self.extractor.extract_article(article, self.max_keywords)
        return article

    def ingest_many(
        self, sources: Sequence[Source], cancel: Optional[threading.Event] = None
    ) -> List[IngestReport]:
        """
        Ingest several sources in parallel. One report per source, in input
        order; a failing source is reported and does not stop the others.
        """
        if not sources:
            return []

        def _one(source: Source) -> IngestReport:
            try:
                return IngestReport(source_id=source.id, added_count=self.ingest(source, cancel=cancel))
            except RSSReaderError as e:
                logger.warning("Ingestion failed for %s: %s", source.url, e)
                return IngestReport(source_id=source.id, error=e)

        with ThreadPoolExecutor(max_workers=min(self.max_workers, len(sources))) as ex:
            return list(ex.map(_one, sources))
