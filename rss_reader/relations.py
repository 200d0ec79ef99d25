"""
Article-to-article relations from keyword overlap.

Similarity is the cosine of the two keyword-weight vectors. The relation
type is a heuristic rather than a claim about content causality: an older
candidate is a prerequisite, a newer one that is much longer is an
extension, anything else is similar.
"""
from __future__ import annotations

import math
from datetime import datetime, timezone
from typing import Dict, Iterable, List, Mapping, Optional, Tuple

from .keywords import KeywordExtractor
from .models import Article, ArticleRelation, RelationType
from .text import clean_text

_EPOCH = datetime.min.replace(tzinfo=timezone.utc)


def _norm(vector: Mapping[str, float]) -> float:
    return math.sqrt(sum(w * w for _, w in sorted(vector.items())))


def cosine_similarity(a: Mapping[str, float], b: Mapping[str, float]) -> float:
    """
    Cosine similarity of two sparse non-negative weight vectors, in [0, 1].
    Keys missing from one side contribute 0; an all-zero side gives 0.
    """
    na, nb = _norm(a), _norm(b)
    if na == 0.0 or nb == 0.0:
        return 0.0
    # Sorted keys make the float sum independent of argument order.
    dot = sum(a[k] * b[k] for k in sorted(a.keys() & b.keys()))
    return max(0.0, min(1.0, dot / (na * nb)))


def content_length(article: Article) -> int:
    """Visible text length of the content (or summary), markup excluded."""
    return len(clean_text(article.content) or clean_text(article.summary) or "")


def classify_relation(article: Article, candidate: Article, extension_ratio: float = 1.5) -> RelationType:
    """Relation of `candidate` as seen from `article`."""
    if candidate.published_at < article.published_at:
        return RelationType.PREREQUISITE
    if content_length(candidate) > extension_ratio * content_length(article):
        return RelationType.EXTENSION
    return RelationType.SIMILAR


class RelationEngine:
    def __init__(
        self,
        extractor: Optional[KeywordExtractor] = None,
        *,
        max_keywords: int = 10,
        extension_ratio: float = 1.5,
    ) -> None:
        self.extractor = extractor or KeywordExtractor()
        self.max_keywords = max_keywords
        self.extension_ratio = extension_ratio

    def keywords_for(self, article: Article) -> Dict[str, float]:
        """Stored keyword map when the article has one, freshly extracted otherwise."""
        if article.keywords:
            return dict(article.keywords)
        return self.extractor.extract_article(article, self.max_keywords)

    def find_related(
        self, article: Article, candidates: Iterable[Article], max_results: int = 5
    ) -> List[ArticleRelation]:
        """
        Rank `candidates` by similarity to `article`, highest first.

        Ties go to the more recently published candidate, then to pool order.
        The article itself is never part of the result; nothing else is
        filtered out, zero-similarity candidates included.
        """
        if max_results <= 0:
            return []
        target = self.keywords_for(article)

        scored: List[Tuple[float, Article]] = []
        for candidate in candidates:
            if candidate.id == article.id:
                continue
            scored.append((cosine_similarity(target, self.keywords_for(candidate)), candidate))

        # Stable sort keeps pool order for complete ties.
        scored.sort(key=lambda sc: (sc[0], sc[1].published_at or _EPOCH), reverse=True)

        return [
            ArticleRelation(
                source_article_id=article.id,
                target_article_id=candidate.id,
                relation_type=classify_relation(article, candidate, self.extension_ratio),
                relevance_score=score,
            )
            for score, candidate in scored[:max_results]
        ]
