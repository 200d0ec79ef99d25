from __future__ import annotations

import copy
import threading
from datetime import datetime, timezone
from typing import Dict, List, Optional, Protocol, Sequence, Set, Tuple

from .dedup import dedup_key
from .exceptions import NotFoundError, PersistenceError
from .models import Article, KeywordGroup, Source


class Repository(Protocol):
    """Storage the core reads from and writes to. Keys are the entities' ids."""

    def add_source(self, source: Source) -> None: ...
    def update_source(self, source: Source) -> None: ...
    def delete_source(self, source_id: str) -> None: ...
    def get_source(self, source_id: str) -> Source: ...
    def list_sources(self) -> List[Source]: ...

    def add_articles(self, source_id: str, articles: Sequence[Article]) -> None:
        """Insert a batch atomically: either every article is stored or none is."""
        ...

    def update_article(self, article: Article) -> None: ...
    def delete_article(self, article_id: str) -> None: ...
    def get_article(self, article_id: str) -> Article: ...
    def articles_for_source(self, source_id: str) -> List[Article]: ...
    def list_articles(self) -> List[Article]: ...
    def existing_links_for_source(self, source_id: str) -> Set[str]: ...

    def add_keyword_group(self, group: KeywordGroup) -> None: ...
    def update_keyword_group(self, group: KeywordGroup) -> None: ...
    def delete_keyword_group(self, group_id: str) -> None: ...
    def get_keyword_group(self, group_id: str) -> KeywordGroup: ...
    def list_keyword_groups(self) -> List[KeywordGroup]: ...


_EPOCH = datetime.min.replace(tzinfo=timezone.utc)


def newest_first(articles: Sequence[Article]) -> List[Article]:
    return sorted(articles, key=lambda a: a.published_at or _EPOCH, reverse=True)


class InMemoryRepository:
    """
    Thread-safe Repository kept in process memory.

    Entities are copied on the way in and out, so callers only change stored
    state through the update_* methods.
    """

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._sources: Dict[str, Source] = {}
        self._articles: Dict[str, Article] = {}
        self._links: Dict[Tuple[str, str], str] = {}
        self._groups: Dict[str, KeywordGroup] = {}

    # Sources

    def add_source(self, source: Source) -> None:
        with self._lock:
            if source.id in self._sources:
                raise PersistenceError(f"Source already exists: {source.id}")
            self._sources[source.id] = copy.deepcopy(source)

    def update_source(self, source: Source) -> None:
        with self._lock:
            if source.id not in self._sources:
                raise NotFoundError(f"Unknown source: {source.id}")
            self._sources[source.id] = copy.deepcopy(source)

    def delete_source(self, source_id: str) -> None:
        with self._lock:
            if self._sources.pop(source_id, None) is None:
                raise NotFoundError(f"Unknown source: {source_id}")
            for article in [a for a in self._articles.values() if a.source_id == source_id]:
                self._remove_article(article)

    def get_source(self, source_id: str) -> Source:
        with self._lock:
            try:
                return copy.deepcopy(self._sources[source_id])
            except KeyError:
                raise NotFoundError(f"Unknown source: {source_id}") from None

    def list_sources(self) -> List[Source]:
        with self._lock:
            sources = [copy.deepcopy(s) for s in self._sources.values()]
        return sorted(sources, key=lambda s: s.title.lower())

    # Articles

    def add_articles(self, source_id: str, articles: Sequence[Article]) -> None:
        with self._lock:
            if source_id not in self._sources:
                raise PersistenceError(f"Cannot add articles to unknown source: {source_id}")
            batch_keys = set()
            for article in articles:
                key = dedup_key(source_id, article.link)
                if article.source_id != source_id:
                    raise PersistenceError(f"Article {article.id} belongs to source {article.source_id}")
                if key in self._links or key in batch_keys:
                    raise PersistenceError(f"Duplicate article link for source {source_id}: {article.link}")
                if article.id in self._articles:
                    raise PersistenceError(f"Article already exists: {article.id}")
                batch_keys.add(key)
            # Validated as a whole; commit.
            for article in articles:
                self._articles[article.id] = copy.deepcopy(article)
                self._links[dedup_key(source_id, article.link)] = article.id

    def update_article(self, article: Article) -> None:
        with self._lock:
            current = self._articles.get(article.id)
            if current is None:
                raise NotFoundError(f"Unknown article: {article.id}")
            if (current.source_id, current.link) != (article.source_id, article.link):
                raise PersistenceError("An article's source and link cannot change")
            self._articles[article.id] = copy.deepcopy(article)

    def delete_article(self, article_id: str) -> None:
        with self._lock:
            article = self._articles.get(article_id)
            if article is None:
                raise NotFoundError(f"Unknown article: {article_id}")
            self._remove_article(article)

    def _remove_article(self, article: Article) -> None:
        del self._articles[article.id]
        self._links.pop(dedup_key(article.source_id, article.link), None)

    def get_article(self, article_id: str) -> Article:
        with self._lock:
            try:
                return copy.deepcopy(self._articles[article_id])
            except KeyError:
                raise NotFoundError(f"Unknown article: {article_id}") from None

    def articles_for_source(self, source_id: str) -> List[Article]:
        with self._lock:
            articles = [copy.deepcopy(a) for a in self._articles.values() if a.source_id == source_id]
        return newest_first(articles)

    def list_articles(self) -> List[Article]:
        with self._lock:
            articles = [copy.deepcopy(a) for a in self._articles.values()]
        return newest_first(articles)

    def existing_links_for_source(self, source_id: str) -> Set[str]:
        with self._lock:
            return {link for (sid, link) in self._links if sid == source_id}

    # Keyword groups

    def add_keyword_group(self, group: KeywordGroup) -> None:
        with self._lock:
            if group.id in self._groups:
                raise PersistenceError(f"Keyword group already exists: {group.id}")
            self._groups[group.id] = copy.deepcopy(group)

    def update_keyword_group(self, group: KeywordGroup) -> None:
        with self._lock:
            if group.id not in self._groups:
                raise NotFoundError(f"Unknown keyword group: {group.id}")
            self._groups[group.id] = copy.deepcopy(group)

    def delete_keyword_group(self, group_id: str) -> None:
        with self._lock:
            if self._groups.pop(group_id, None) is None:
                raise NotFoundError(f"Unknown keyword group: {group_id}")

    def get_keyword_group(self, group_id: str) -> KeywordGroup:
        with self._lock:
            try:
                return copy.deepcopy(self._groups[group_id])
            except KeyError:
                raise NotFoundError(f"Unknown keyword group: {group_id}") from None

    def list_keyword_groups(self) -> List[KeywordGroup]:
        with self._lock:
            groups = [copy.deepcopy(g) for g in self._groups.values()]
        return sorted(groups, key=lambda g: g.name.lower())
