"""
Word tokenization for keyword extraction.

Latin-script text is split on Unicode word boundaries. Chinese has no
spaces, so each run of CJK ideographs is emitted as overlapping character
bigrams; single ideographs are too short to survive the length filter anyway.
"""
from __future__ import annotations

import re
from typing import FrozenSet, Iterable, Iterator, Optional

ENGLISH_STOP_WORDS: FrozenSet[str] = frozenset({
    "a", "about", "above", "after", "again", "against", "all", "also", "am", "an",
    "and", "any", "are", "as", "at", "be", "because", "been", "before", "being",
    "below", "between", "both", "but", "by", "can", "could", "did", "do", "does",
    "doing", "down", "during", "each", "few", "for", "from", "further", "had",
    "has", "have", "having", "he", "her", "here", "hers", "herself", "him",
    "himself", "his", "how", "i", "if", "in", "into", "is", "it", "its", "itself",
    "just", "me", "more", "most", "my", "myself", "no", "nor", "not", "now", "of",
    "off", "on", "once", "only", "or", "other", "our", "ours", "ourselves", "out",
    "over", "own", "same", "she", "should", "so", "some", "such", "than", "that",
    "the", "their", "theirs", "them", "themselves", "then", "there", "these",
    "they", "this", "those", "through", "to", "too", "under", "until", "up",
    "very", "was", "we", "were", "what", "when", "where", "which", "while", "who",
    "whom", "why", "will", "with", "would", "you", "your", "yours", "yourself",
    "yourselves",
})

CHINESE_STOP_WORDS: FrozenSet[str] = frozenset({
    "的", "了", "和", "是", "在", "我", "有", "就", "不", "人", "都", "一", "也",
    "很", "到", "说", "要", "去", "你", "会", "着", "看", "好", "这", "那", "他",
    "她", "它", "们", "我们", "你们", "他们", "她们", "它们", "这个", "那个",
    "这些", "那些", "一个", "没有", "因为", "所以", "但是", "而且", "如果", "可以",
    "什么", "怎么", "已经", "还是", "或者", "就是", "不是", "自己", "这样", "那样",
    "以及", "通过", "进行", "对于", "关于", "其中", "以后", "之后", "之前", "然后",
})

DEFAULT_STOP_WORDS: FrozenSet[str] = ENGLISH_STOP_WORDS | CHINESE_STOP_WORDS

_STOP_WORDS_BY_LANGUAGE = {
    "en": ENGLISH_STOP_WORDS,
    "zh": CHINESE_STOP_WORDS,
}

# Word characters, minus the underscore which \w lets through.
_WORD_RE = re.compile(r"[^\W_]+")
_CJK_RE = re.compile(r"[\u3400-\u4dbf\u4e00-\u9fff\uf900-\ufaff]+")


def stop_words_for(languages: Optional[Iterable[str]] = None) -> FrozenSet[str]:
    """
    Union of the stop-word sets for the given language codes ("en", "zh",
    or tags like "en-US"). None means every known language.
    """
    if languages is None:
        return DEFAULT_STOP_WORDS
    out: FrozenSet[str] = frozenset()
    for lang in languages:
        key = (lang or "").lower().split("-")[0]
        out = out | _STOP_WORDS_BY_LANGUAGE.get(key, frozenset())
    return out


def _split_word(word: str) -> Iterator[str]:
    # A run like "ai模型训练" mixes scripts; split CJK stretches out of it.
    pos = 0
    for m in _CJK_RE.finditer(word):
        if m.start() > pos:
            yield word[pos:m.start()]
        run = m.group()
        if len(run) == 1:
            yield run
        else:
            for i in range(len(run) - 1):
                yield run[i:i + 2]
        pos = m.end()
    if pos < len(word):
        yield word[pos:]


class TextTokenizer:
    def __init__(self, stop_words: Optional[Iterable[str]] = None) -> None:
        self.stop_words = DEFAULT_STOP_WORDS if stop_words is None else frozenset(stop_words)

    def tokenize(self, text: Optional[str]) -> Iterator[str]:
        """Yield lowercase tokens longer than one character that are not stop words."""
        if not text:
            return
        for m in _WORD_RE.finditer(text.lower()):
            for token in _split_word(m.group()):
                if len(token) <= 1 or token in self.stop_words:
                    continue
                yield token


_DEFAULT_TOKENIZER = TextTokenizer()


def tokenize(text: Optional[str]) -> Iterator[str]:
    return _DEFAULT_TOKENIZER.tokenize(text)
