"""
Keyword extraction by normalized term frequency.

weight(token) = count(token) / total tokens kept after stop-word filtering.
This is deliberately not TF-IDF: a single call sees one document and has no
corpus statistics, so callers that need corpus-wide discrimination apply
their own IDF on top of these weights.
"""
from __future__ import annotations

from collections import Counter
from typing import Dict, Optional

from .cache import LRUCache
from .models import Article
from .text import clean_text
from .tokenizer import TextTokenizer


def article_text(article: Article) -> str:
    """Title, summary and content of an article as one plain-text string."""
    parts = [article.title, clean_text(article.summary), clean_text(article.content)]
    return "\n".join(p for p in parts if p)


class KeywordExtractor:
    def __init__(
        self,
        tokenizer: Optional[TextTokenizer] = None,
        cache: Optional[LRUCache[Dict[str, float]]] = None,
    ) -> None:
        self.tokenizer = tokenizer or TextTokenizer()
        self.cache = cache

    def extract(self, text: Optional[str], max_keywords: int = 10) -> Dict[str, float]:
        """
        Map the top `max_keywords` tokens of `text` to their weight in (0, 1].

        The returned dict is ordered by weight descending; equal weights keep
        the order in which the tokens first appeared. Empty or fully
        stop-worded text yields an empty dict.
        """
        if not text or not text.strip() or max_keywords <= 0:
            return {}

        key = (text, max_keywords)
        if self.cache is not None:
            hit = self.cache.get(key)
            if hit is not None:
                return dict(hit)

        # Counter keeps first-occurrence order, and sorted() is stable.
        counts = Counter(self.tokenizer.tokenize(text))
        total = sum(counts.values())
        if total == 0:
            return {}
        ranked = sorted(counts.items(), key=lambda kv: kv[1], reverse=True)
        weights = {token: n / total for token, n in ranked[:max_keywords]}

        if self.cache is not None:
            self.cache.put(key, dict(weights))
        return weights

    def extract_article(self, article: Article, max_keywords: int = 10) -> Dict[str, float]:
        return self.extract(article_text(article), max_keywords)
