"""Tests for rss_reader.repository.InMemoryRepository."""

from datetime import datetime, timezone

import pytest

from rss_reader.dedup import new_entries
from rss_reader.exceptions import NotFoundError, PersistenceError
from rss_reader.models import Article, FeedEntry, KeywordGroup, Source
from rss_reader.repository import InMemoryRepository


def _article(source_id, link, day=1) -> Article:
    return Article(
        source_id=source_id,
        title=link,
        link=link,
        published_at=datetime(2024, 1, day, tzinfo=timezone.utc),
    )


@pytest.fixture
def repo() -> InMemoryRepository:
    return InMemoryRepository()


@pytest.fixture
def source(repo) -> Source:
    s = Source(title="Blog", url="https://example.com/feed")
    repo.add_source(s)
    return s


class TestSources:
    def test_add_get_update(self, repo, source) -> None:
        stored = repo.get_source(source.id)
        assert stored == source
        assert stored is not source

        stored.is_active = False
        assert repo.get_source(source.id).is_active
        repo.update_source(stored)
        assert not repo.get_source(source.id).is_active

    def test_duplicate_add_rejected(self, repo, source) -> None:
        with pytest.raises(PersistenceError):
            repo.add_source(source)

    def test_unknown_ids(self, repo) -> None:
        with pytest.raises(NotFoundError):
            repo.get_source("missing")
        with pytest.raises(NotFoundError):
            repo.delete_source("missing")
        with pytest.raises(KeyError):
            repo.update_source(Source(title="x", url="https://x.example.com"))

    def test_listed_by_title(self, repo) -> None:
        for title in ("zeta", "Alpha", "beta"):
            repo.add_source(Source(title=title, url=f"https://{title}.example.com"))
        assert [s.title for s in repo.list_sources()] == ["Alpha", "beta", "zeta"]

    def test_delete_cascades_to_articles(self, repo, source) -> None:
        other = Source(title="Other", url="https://other.example.com/feed")
        repo.add_source(other)
        repo.add_articles(source.id, [_article(source.id, "https://example.com/1")])
        repo.add_articles(other.id, [_article(other.id, "https://other.example.com/1")])

        repo.delete_source(source.id)

        assert [a.source_id for a in repo.list_articles()] == [other.id]
        assert repo.existing_links_for_source(source.id) == set()


class TestArticles:
    def test_batch_is_atomic(self, repo, source) -> None:
        repo.add_articles(source.id, [_article(source.id, "https://example.com/1")])
        batch = [_article(source.id, "https://example.com/2"), _article(source.id, "https://example.com/1")]
        with pytest.raises(PersistenceError):
            repo.add_articles(source.id, batch)
        assert repo.existing_links_for_source(source.id) == {"https://example.com/1"}

    def test_duplicate_link_within_batch_rejected(self, repo, source) -> None:
        batch = [_article(source.id, "https://example.com/a"), _article(source.id, "https://example.com/a")]
        with pytest.raises(PersistenceError):
            repo.add_articles(source.id, batch)
        assert repo.list_articles() == []

    def test_same_link_allowed_for_different_sources(self, repo, source) -> None:
        other = Source(title="Mirror", url="https://mirror.example.com/feed")
        repo.add_source(other)
        repo.add_articles(source.id, [_article(source.id, "https://example.com/a")])
        repo.add_articles(other.id, [_article(other.id, "https://example.com/a")])
        assert len(repo.list_articles()) == 2

    def test_unknown_or_mismatched_source_rejected(self, repo, source) -> None:
        with pytest.raises(PersistenceError):
            repo.add_articles("missing", [_article("missing", "https://example.com/a")])
        with pytest.raises(PersistenceError):
            repo.add_articles(source.id, [_article("someone-else", "https://example.com/a")])

    def test_newest_first(self, repo, source) -> None:
        repo.add_articles(source.id, [
            _article(source.id, "https://example.com/old", day=1),
            _article(source.id, "https://example.com/new", day=9),
            _article(source.id, "https://example.com/mid", day=5),
        ])
        assert [a.link for a in repo.articles_for_source(source.id)] == [
            "https://example.com/new",
            "https://example.com/mid",
            "https://example.com/old",
        ]

    def test_update_keeps_identity_fields(self, repo, source) -> None:
        article = _article(source.id, "https://example.com/1")
        repo.add_articles(source.id, [article])
        article.is_read = True
        repo.update_article(article)
        assert repo.get_article(article.id).is_read

        article.link = "https://example.com/moved"
        with pytest.raises(PersistenceError):
            repo.update_article(article)

    def test_delete_article_frees_link(self, repo, source) -> None:
        article = _article(source.id, "https://example.com/1")
        repo.add_articles(source.id, [article])
        repo.delete_article(article.id)
        assert repo.existing_links_for_source(source.id) == set()
        with pytest.raises(NotFoundError):
            repo.get_article(article.id)


class TestKeywordGroups:
    def test_crud(self, repo) -> None:
        group = KeywordGroup(name="Tech", keywords=["python"])
        repo.add_keyword_group(group)
        group.keywords.append("rust")
        assert repo.get_keyword_group(group.id).keywords == ["python"]
        repo.update_keyword_group(group)
        assert repo.get_keyword_group(group.id).keywords == ["python", "rust"]
        repo.delete_keyword_group(group.id)
        assert repo.list_keyword_groups() == []
        with pytest.raises(NotFoundError):
            repo.get_keyword_group(group.id)


def test_new_entries_drops_stored_and_repeated_links() -> None:
    when = datetime(2024, 1, 1, tzinfo=timezone.utc)
    entries = [
        FeedEntry(title="a", link="https://example.com/a", published_at=when),
        FeedEntry(title="b", link="https://example.com/b", published_at=when),
        FeedEntry(title="a again", link="https://example.com/a", published_at=when),
        FeedEntry(title="c", link="https://example.com/c", published_at=when),
    ]
    fresh = new_entries(entries, {"https://example.com/b"})
    assert [e.title for e in fresh] == ["a", "c"]
