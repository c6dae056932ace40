"""
Keyword and phrase extraction from article text.

Turns raw post markup into an ordered keyword list:
1. The most frequent single words (stopwords excluded)
2. Followed by short n-gram phrases (bigrams and trigrams)

Ordering is deterministic: frequency ties keep first-seen order and
phrases keep discovery order.
"""

import re
from collections import Counter
from typing import Optional

from .config import DEFAULT_CONFIG, LinkerConfig


_TAG_RE = re.compile(r"<[^>]*>")
_WORD_RE = re.compile(r"\b[a-z]{2,}\b", re.ASCII)
_SENTENCE_SPLIT_RE = re.compile(r"[.!?]+")


def strip_markup(text: str) -> str:
    """
    Replace HTML tags with spaces and lower-case the result.

    Markdown syntax is left in place; it only affects phrase windows,
    never single-word tokens.
    """
    return _TAG_RE.sub(" ", text).lower()


def tokenize(clean_text: str) -> list[str]:
    """Extract lower-case word tokens of two or more ASCII letters."""
    return _WORD_RE.findall(clean_text)


def rank_words(tokens: list[str], config: Optional[LinkerConfig] = None) -> list[str]:
    """
    Return the top non-stopword tokens by frequency.

    Counter.most_common orders equal counts by first occurrence, which
    keeps the ranking stable across runs.
    """
    config = config or DEFAULT_CONFIG
    frequencies = Counter(token for token in tokens if not config.is_stopword(token))
    return [word for word, _ in frequencies.most_common(config.max_single_keywords)]


def extract_phrases(clean_text: str, config: Optional[LinkerConfig] = None) -> list[str]:
    """
    Extract candidate 2- and 3-word phrases, sentence by sentence.

    Bigrams must be longer than ``bigram_min_length`` and contain no
    stopword. Trigrams only need to be longer than ``trigram_min_length``;
    they are not filtered against stopwords.

    Phrases are built from whitespace-separated tokens, so punctuation
    other than sentence terminators stays attached to words.

    The cap applies to the candidates as found, repeats included; repeats
    are dropped afterwards. A phrase that occurs twice therefore uses two
    of the ``max_phrases`` slots.

    Returns:
        Unique phrases in discovery order, at most ``max_phrases``.
    """
    config = config or DEFAULT_CONFIG
    candidates: list[str] = []

    for sentence in _SENTENCE_SPLIT_RE.split(clean_text):
        words = sentence.split()
        for i in range(len(words) - 1):
            bigram = f"{words[i]} {words[i + 1]}"
            if (
                len(bigram) > config.bigram_min_length
                and not config.is_stopword(words[i])
                and not config.is_stopword(words[i + 1])
            ):
                candidates.append(bigram)

            if i < len(words) - 2:
                trigram = f"{words[i]} {words[i + 1]} {words[i + 2]}"
                if len(trigram) > config.trigram_min_length:
                    candidates.append(trigram)

    return list(dict.fromkeys(candidates[:max(config.max_phrases, 0)]))


def extract_keywords(text: str, config: Optional[LinkerConfig] = None) -> list[str]:
    """
    Extract ranked keywords and phrases from raw post text.

    Args:
        text: Raw text, possibly containing HTML or Markdown.
        config: Optional configuration; defaults are used otherwise.

    Returns:
        Top single words by frequency followed by n-gram phrases.
    """
    config = config or DEFAULT_CONFIG
    clean_text = strip_markup(text)
    top_words = rank_words(tokenize(clean_text), config)
    return top_words + extract_phrases(clean_text, config)


class KeywordExtractor:
    """Keyword extractor bound to a configuration."""

    def __init__(self, config: Optional[LinkerConfig] = None):
        self.config = config or DEFAULT_CONFIG

    def __call__(self, text: str) -> list[str]:
        return extract_keywords(text, self.config)

    def extract(self, text: str) -> list[str]:
        return extract_keywords(text, self.config)
