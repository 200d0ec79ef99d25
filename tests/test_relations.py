"""Tests for rss_reader.relations."""

import math
from datetime import datetime, timezone

import pytest

from rss_reader.models import Article, RelationType
from rss_reader.relations import RelationEngine, classify_relation, content_length, cosine_similarity


def _article(title, day, content="", keywords=None, month=1) -> Article:
    return Article(
        source_id="s1",
        title=title,
        link=f"https://example.com/{title.replace(' ', '-').lower()}",
        published_at=datetime(2024, month, day, tzinfo=timezone.utc),
        content=content,
        keywords=dict(keywords or {}),
    )


class TestCosineSimilarity:
    def test_identical_vectors(self) -> None:
        v = {"python": 0.5, "feeds": 0.3}
        assert cosine_similarity(v, v) == pytest.approx(1.0)

    def test_disjoint_vectors(self) -> None:
        assert cosine_similarity({"a": 1.0}, {"b": 1.0}) == 0.0

    def test_symmetric_and_bounded(self) -> None:
        a = {"python": 0.4, "rss": 0.35, "atom": 0.25, "feeds": 0.1}
        b = {"feeds": 0.6, "python": 0.1, "json": 0.3}
        score = cosine_similarity(a, b)
        assert score == cosine_similarity(b, a)
        assert 0.0 < score < 1.0

    def test_known_value(self) -> None:
        assert cosine_similarity({"x": 1.0, "y": 1.0}, {"x": 1.0}) == pytest.approx(1 / math.sqrt(2))

    def test_zero_vectors(self) -> None:
        assert cosine_similarity({}, {"a": 1.0}) == 0.0
        assert cosine_similarity({"a": 0.0}, {"a": 0.0}) == 0.0


class TestClassifyRelation:
    def test_later_and_longer_is_extension_earlier_is_prerequisite(self) -> None:
        a = _article("A", 1, content="x" * 500, month=1)
        b = _article("B", 1, content="y" * 1200, month=2)
        assert classify_relation(a, b) == RelationType.EXTENSION
        assert classify_relation(b, a) == RelationType.PREREQUISITE

    def test_later_but_similar_length_is_similar(self) -> None:
        a = _article("A", 1, content="x" * 500)
        b = _article("B", 2, content="y" * 600)
        assert classify_relation(a, b) == RelationType.SIMILAR

    def test_length_ignores_markup(self) -> None:
        a = _article("A", 1, content="x" * 500)
        wrapped = '<div class="post-body wide-layout">' + '<span class="w">y</span>' * 300 + "</div>"
        b = _article("B", 2, content=wrapped)
        assert content_length(b) == 300 * 2 - 1
        assert classify_relation(a, b) == RelationType.SIMILAR

    def test_same_day_is_not_prerequisite(self) -> None:
        a = _article("A", 1, content="x" * 100)
        b = _article("B", 1, content="y" * 100)
        assert classify_relation(a, b) == RelationType.SIMILAR


class TestFindRelated:
    def test_extension_and_prerequisite_through_engine(self) -> None:
        shared = {"architecture": 0.5, "software": 0.5}
        a = _article("A", 1, content="x" * 500, keywords=shared, month=1)
        b = _article("B", 1, content="y" * 1200, keywords=shared, month=2)
        engine = RelationEngine()

        [rel_ab] = engine.find_related(a, [a, b])
        [rel_ba] = engine.find_related(b, [a, b])
        assert (rel_ab.source_article_id, rel_ab.target_article_id) == (a.id, b.id)
        assert rel_ab.relation_type == RelationType.EXTENSION
        assert rel_ba.relation_type == RelationType.PREREQUISITE
        assert rel_ab.relevance_score == pytest.approx(1.0)

    def test_ranked_by_score_and_self_excluded(self) -> None:
        target = _article("T", 5, keywords={"python": 0.6, "feeds": 0.4})
        close = _article("Close", 2, keywords={"python": 0.6, "feeds": 0.3})
        far = _article("Far", 3, keywords={"python": 0.1, "cooking": 0.9})
        none = _article("None", 4, keywords={"cooking": 1.0})

        related = RelationEngine().find_related(target, [none, far, target, close], max_results=5)

        assert [r.target_article_id for r in related] == [close.id, far.id, none.id]
        assert related[-1].relevance_score == 0.0
        scores = [r.relevance_score for r in related]
        assert scores == sorted(scores, reverse=True)

    def test_ties_go_to_newer_article(self) -> None:
        kw = {"python": 1.0}
        target = _article("T", 10, keywords=kw)
        older = _article("Older", 1, keywords=kw)
        newer = _article("Newer", 8, keywords=kw)
        related = RelationEngine().find_related(target, [older, newer])
        assert [r.target_article_id for r in related] == [newer.id, older.id]

    def test_max_results(self) -> None:
        target = _article("T", 10, keywords={"a": 1.0})
        pool = [_article(f"P{i}", i, keywords={"a": 1.0}) for i in range(1, 6)]
        engine = RelationEngine()
        assert len(engine.find_related(target, pool, max_results=2)) == 2
        assert engine.find_related(target, pool, max_results=0) == []

    def test_keywords_extracted_when_not_stored(self) -> None:
        a = _article("Python feed parsing", 1, content="Parsing feeds with Python.")
        b = _article("Parsing Python feeds", 2, content="Feed parsing in Python.")
        [rel] = RelationEngine().find_related(a, [b])
        assert rel.relevance_score > 0.0
