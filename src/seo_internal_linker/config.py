# -*- coding: utf-8 -*-
"""
Centralized configuration for SEO Internal Linker.

This module provides a unified configuration dataclass that controls
keyword extraction, opportunity scoring and link construction. Every
threshold used by the engine lives here with its default value.
"""

from dataclasses import dataclass, field


# Common function words excluded from keyword frequency ranking and
# from bigram phrases.
DEFAULT_STOPWORDS = frozenset({
    "the", "a", "an", "and", "or", "but", "in", "on", "at", "to", "for",
    "of", "with", "by", "from", "as", "is", "was", "are", "been", "be",
    "have", "has", "had", "do", "does", "did", "will", "would", "could",
    "should", "may", "might", "must", "can", "this", "that", "these",
    "those", "i", "you", "he", "she", "it", "we", "they", "what", "which",
    "who", "when", "where", "why", "how",
})


@dataclass
class LinkerConfig:
    """
    Central configuration for link discovery and insertion.

    Attributes:
        stopwords: Words excluded from single-keyword ranking and from
            bigram phrases. Trigrams are NOT filtered against this set.

        max_single_keywords: Number of top-frequency words kept per text.
        max_phrases: Maximum number of n-gram phrases appended after
            the single words.
        bigram_min_length: A 2-word phrase is kept only when its length
            (including the separating space) exceeds this value.
        trigram_min_length: A 3-word phrase is kept only when its length
            exceeds this value.

        Scoring:
            relevance_threshold: Opportunities must score strictly above
                this value to be retained.
            category_bonus: Added when source and target share a category.
            keyword_weight: Score contributed per matched keyword.
            max_keyword_score: Cap on the keyword contribution.
            max_matched_keywords: Matched keywords stored per opportunity.

        Context snippets:
            snippet_chars_before / snippet_chars_after: Window around the
                first occurrence of the anchor keyword.
            fallback_snippet_length: Content prefix used when the keyword
                is not found and the source has no excerpt.

        link_path_prefix: Path prepended to the target slug in anchors.

        high_relevance_threshold / medium_relevance_threshold: Boundaries
            for the High/Medium/Low relevance tiers.
    """

    stopwords: frozenset = field(default_factory=lambda: DEFAULT_STOPWORDS)

    # Keyword extraction
    max_single_keywords: int = 20
    max_phrases: int = 15
    bigram_min_length: int = 5
    trigram_min_length: int = 10

    # Scoring
    relevance_threshold: float = 0.3
    category_bonus: float = 0.3
    keyword_weight: float = 0.15
    max_keyword_score: float = 0.7
    max_matched_keywords: int = 5

    # Context snippets
    snippet_chars_before: int = 50
    snippet_chars_after: int = 100
    fallback_snippet_length: int = 150

    # Anchors
    link_path_prefix: str = "/blog/"

    # Relevance tiers
    high_relevance_threshold: float = 0.7
    medium_relevance_threshold: float = 0.5

    def __post_init__(self) -> None:
        """Normalize stopwords so callers may pass any iterable."""
        self.stopwords = frozenset(word.lower() for word in self.stopwords)

    def is_stopword(self, word: str) -> bool:
        """Check whether a token is a configured stopword."""
        return word in self.stopwords

    def link_href(self, slug: str) -> str:
        """Build the href used for a target post slug."""
        return f"{self.link_path_prefix}{slug}"

    def keyword_score(self, match_count: int) -> float:
        """Score contributed by keyword overlap, capped at max_keyword_score."""
        return min(match_count * self.keyword_weight, self.max_keyword_score)

    def tier_for(self, score: float) -> str:
        """Return the tier name ("high", "medium", "low") for a relevance score."""
        if score >= self.high_relevance_threshold:
            return "high"
        if score >= self.medium_relevance_threshold:
            return "medium"
        return "low"


DEFAULT_CONFIG = LinkerConfig()
