"""
Cross-post link opportunity discovery.

Compares every ordered pair of posts (source, target), measures keyword
overlap between the source body and the target summary, and keeps the
pairs whose relevance score clears the discovery threshold.

Scoring:
    relevance = category_bonus + min(match_count * keyword_weight, max_keyword_score)

The scan is sequential. A progress callback receives the number of
source posts fully analyzed after each outer iteration.
"""

import logging
from typing import Callable, Optional, Sequence

from .config import DEFAULT_CONFIG, LinkerConfig
from .keyword_extractor import KeywordExtractor
from .models import LinkOpportunity, Post, ScanStats

logger = logging.getLogger(__name__)

# progress_callback(posts_analyzed, total_posts)
ProgressCallback = Callable[[int, int], None]
Extractor = Callable[[str], list[str]]


def find_matches(source_keywords: list[str], target_keywords: list[str]) -> list[str]:
    """
    Return source keywords that overlap any target keyword.

    Overlap is bidirectional substring containment, so "sleep" matches
    "sleep training" and vice versa. Source order is preserved.
    """
    return [
        keyword for keyword in source_keywords
        if any(target in keyword or keyword in target for target in target_keywords)
    ]


def build_context_snippet(post: Post, keyword: str, config: Optional[LinkerConfig] = None) -> str:
    """
    Build a context snippet around the first occurrence of keyword.

    Falls back to the post excerpt, then to the start of the content,
    when the keyword does not occur verbatim in the content.
    """
    config = config or DEFAULT_CONFIG
    content = post.content
    index = content.lower().find(keyword.lower())

    if index == -1:
        return post.excerpt or content[:config.fallback_snippet_length]

    start = max(0, index - config.snippet_chars_before)
    end = min(len(content), index + config.snippet_chars_after)
    return f"...{content[start:end]}..."


def category_bonus(source: Post, target: Post, config: Optional[LinkerConfig] = None) -> float:
    """Bonus for posts in the same category. Two uncategorized posts count as the same."""
    config = config or DEFAULT_CONFIG
    return config.category_bonus if source.category_slug == target.category_slug else 0.0


def relevance_score(source: Post, target: Post, match_count: int, config: Optional[LinkerConfig] = None) -> float:
    config = config or DEFAULT_CONFIG
    return category_bonus(source, target, config) + config.keyword_score(match_count)


class OpportunityMatcher:
    """
    Discovers internal link opportunities across a set of posts.

    Source keywords come from the full body plus title; target keywords
    come only from the title plus excerpt, so a target is judged by its
    summary rather than its full text.
    """

    def __init__(
        self,
        config: Optional[LinkerConfig] = None,
        extractor: Optional[Extractor] = None,
    ):
        self.config = config or DEFAULT_CONFIG
        self.extractor = extractor or KeywordExtractor(self.config)

    def source_keywords(self, post: Post) -> list[str]:
        return self.extractor(f"{post.content} {post.title}")

    def target_keywords(self, post: Post) -> list[str]:
        return self.extractor(f"{post.title} {post.excerpt}")

    def compare(
        self,
        source: Post,
        target: Post,
        source_keywords: list[str],
        target_keywords: list[str],
    ) -> Optional[LinkOpportunity]:
        """
        Compare one (source, target) pair.

        Returns:
            A LinkOpportunity when the pair scores above the threshold,
            None otherwise.
        """
        matches = find_matches(source_keywords, target_keywords)
        if not matches:
            return None

        score = relevance_score(source, target, len(matches), self.config)
        if score <= self.config.relevance_threshold:
            return None

        return LinkOpportunity(
            source_post=source,
            target_post=target,
            matched_keywords=matches[:self.config.max_matched_keywords],
            context_snippet=build_context_snippet(source, matches[0], self.config),
            relevance_score=score,
        )

    def scan(
        self,
        posts: Sequence[Post],
        progress_callback: Optional[ProgressCallback] = None,
    ) -> list[LinkOpportunity]:
        """
        Find link opportunities between all ordered pairs of posts.

        Args:
            posts: Snapshot of published posts. Not modified.
            progress_callback: Called with (posts_analyzed, total_posts) once
                each source post has been compared against every target.

        Returns:
            Opportunities sorted by relevance score, highest first. Equal
            scores keep discovery order (source index, then target index).
        """
        total = len(posts)
        if total < 2:
            logger.warning(f"Need at least 2 posts to analyze, got {total}")
            return []

        logger.info(f"Scanning {total} posts for internal link opportunities")
        found: list[LinkOpportunity] = []
        target_cache: dict[int, list[str]] = {}

        for i, source in enumerate(posts):
            try:
                source_keywords = self.source_keywords(source)
            except Exception as e:
                logger.warning(f"Skipping source post {source.id}: keyword extraction failed: {e}")
                source_keywords = None

            if source_keywords is not None:
                for j, target in enumerate(posts):
                    if i == j or source.id == target.id:
                        continue
                    try:
                        if j not in target_cache:
                            target_cache[j] = self.target_keywords(target)
                        opportunity = self.compare(source, target, source_keywords, target_cache[j])
                    except Exception as e:
                        logger.warning(f"Skipping pair {source.id} -> {target.id}: {e}")
                        continue
                    if opportunity is not None:
                        found.append(opportunity)

            if progress_callback is not None:
                progress_callback(i + 1, total)

        found.sort(key=lambda opp: opp.relevance_score, reverse=True)
        logger.info(f"Found {len(found)} internal linking opportunities")
        return found

    def scan_with_stats(
        self,
        posts: Sequence[Post],
        progress_callback: Optional[ProgressCallback] = None,
    ) -> tuple[list[LinkOpportunity], ScanStats]:
        """Run a scan and also return the counters shown to users."""
        stats = ScanStats(total_posts=len(posts))

        def _track(analyzed: int, total: int) -> None:
            stats.posts_analyzed = analyzed
            if progress_callback is not None:
                progress_callback(analyzed, total)

        opportunities = self.scan(posts, _track)
        stats.opportunities_found = len(opportunities)
        return opportunities, stats


def scan(
    posts: Sequence[Post],
    progress_callback: Optional[ProgressCallback] = None,
    config: Optional[LinkerConfig] = None,
) -> list[LinkOpportunity]:
    """Convenience wrapper around OpportunityMatcher.scan."""
    return OpportunityMatcher(config).scan(posts, progress_callback)
