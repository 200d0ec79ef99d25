from __future__ import annotations

from typing import Iterable, List, Mapping, Optional

from .keywords import KeywordExtractor
from .models import Article, KeywordGroup
from .text import clean_text


def _contains_any(text: Optional[str], keywords: Iterable[str]) -> bool:
    if not text:
        return False
    t = text.lower()
    return any(k in t for k in keywords)


def _group_terms(group: KeywordGroup) -> List[str]:
    return [k.strip().lower() for k in group.keywords if k and k.strip()]


def matches_group(
    group: KeywordGroup,
    article: Article,
    keywords: Optional[Mapping[str, float]] = None,
) -> bool:
    """
    True when any group keyword is a case-insensitive substring of the
    article's title, summary or content, or of one of its extracted keywords.

    `keywords` overrides article.keywords, for articles that have none stored.
    """
    terms = _group_terms(group)
    if not terms:
        return False

    # Markup is not article text: tag names and attributes never match.
    if (
        _contains_any(article.title, terms)
        or _contains_any(clean_text(article.summary), terms)
        or _contains_any(clean_text(article.content), terms)
    ):
        return True

    extracted = article.keywords if keywords is None else keywords
    return any(_contains_any(kw, terms) for kw in extracted)


def match_group(
    group: KeywordGroup,
    articles: Iterable[Article],
    extractor: Optional[KeywordExtractor] = None,
    max_keywords: int = 10,
) -> List[Article]:
    """
    Articles matching `group`, in input order. Aggregation never re-sorts.

    When `extractor` is given, articles without stored keywords have theirs
    extracted on the fly.
    """
    out = []
    for article in articles:
        keywords = None
        if not article.keywords and extractor is not None:
            keywords = extractor.extract_article(article, max_keywords)
        if matches_group(group, article, keywords):
            out.append(article)
    return out
