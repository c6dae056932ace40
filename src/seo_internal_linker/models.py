"""
Data models for SEO Internal Linker.

This module defines all the core data structures used throughout the application.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional

from .config import DEFAULT_CONFIG, LinkerConfig


class RelevanceTier(Enum):
    """Priority buckets used when presenting opportunities."""
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"

    @property
    def label(self) -> str:
        """Human-readable label ("High", "Medium", "Low")."""
        return self.value.capitalize()

    @classmethod
    def for_score(cls, score: float, config: Optional[LinkerConfig] = None) -> "RelevanceTier":
        """Classify a relevance score into a tier."""
        return cls((config or DEFAULT_CONFIG).tier_for(score))


class ApprovalOutcome(Enum):
    """Terminal state of an opportunity after an approval attempt."""
    APPLIED = "applied"
    NO_MATCH = "no_match"
    ERRORED = "errored"


@dataclass(frozen=True)
class Category:
    """A post category."""
    name: str
    slug: str

    def to_dict(self) -> dict[str, str]:
        return {"name": self.name, "slug": self.slug}


@dataclass
class Post:
    """
    A published article snapshot.

    The content is raw markup (Markdown or HTML). Posts are owned by a
    PostStore; the engine treats them as read-only snapshots and re-reads
    content from the store before mutating it.
    """
    id: str
    title: str
    slug: str
    content: str
    excerpt: str = ""
    category: Optional[Category] = None

    @property
    def category_slug(self) -> Optional[str]:
        """Category slug, or None when the post is uncategorized."""
        return self.category.slug if self.category else None

    @property
    def category_name(self) -> str:
        """Category name for display."""
        return self.category.name if self.category else "Uncategorized"

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Post":
        """
        Build a Post from a store row.

        Accepts a nested ``category`` object ({"name", "slug"}) as returned by
        the REST store, or flat ``category_name``/``category_slug`` keys as
        found in spreadsheet exports.
        """
        category = None
        raw_category = data.get("category")
        if isinstance(raw_category, dict) and raw_category.get("slug"):
            category = Category(
                name=str(raw_category.get("name") or raw_category["slug"]),
                slug=str(raw_category["slug"]),
            )
        elif data.get("category_slug"):
            category = Category(
                name=str(data.get("category_name") or data["category_slug"]),
                slug=str(data["category_slug"]),
            )

        return cls(
            id=str(data["id"]),
            title=str(data.get("title") or ""),
            slug=str(data.get("slug") or ""),
            content=str(data.get("content") or ""),
            excerpt=str(data.get("excerpt") or ""),
            category=category,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "slug": self.slug,
            "content": self.content,
            "excerpt": self.excerpt,
            "category": self.category.to_dict() if self.category else None,
        }


@dataclass
class LinkOpportunity:
    """
    A proposed one-directional link from a source post to a target post.

    Attributes:
        source_post: Post whose content would receive the anchor.
        target_post: Post the anchor points to.
        matched_keywords: Overlapping keywords, in discovery order. The first
            entry is the anchor keyword used at approval time.
        context_snippet: Excerpt of the source around the anchor keyword.
        relevance_score: Category bonus plus capped keyword score, in (0.3, 1.0].
    """
    source_post: Post
    target_post: Post
    matched_keywords: list[str]
    context_snippet: str
    relevance_score: float

    @property
    def anchor_keyword(self) -> str:
        """Keyword that will be wrapped in the inserted anchor."""
        return self.matched_keywords[0]

    @property
    def tier(self) -> RelevanceTier:
        return RelevanceTier.for_score(self.relevance_score)

    @property
    def relevance_percent(self) -> int:
        """Relevance score as a rounded percentage for display."""
        return round(self.relevance_score * 100)

    def to_dict(self) -> dict[str, Any]:
        return {
            "source_post": self.source_post.to_dict(),
            "target_post": self.target_post.to_dict(),
            "matched_keywords": list(self.matched_keywords),
            "context_snippet": self.context_snippet,
            "relevance_score": self.relevance_score,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "LinkOpportunity":
        return cls(
            source_post=Post.from_dict(data["source_post"]),
            target_post=Post.from_dict(data["target_post"]),
            matched_keywords=list(data["matched_keywords"]),
            context_snippet=data.get("context_snippet", ""),
            relevance_score=float(data["relevance_score"]),
        )


@dataclass
class ScanStats:
    """Counters reported after a scan."""
    total_posts: int = 0
    posts_analyzed: int = 0
    opportunities_found: int = 0

    @property
    def avg_links_per_post(self) -> float:
        """Average number of opportunities per post."""
        if self.total_posts == 0:
            return 0.0
        return self.opportunities_found / self.total_posts


@dataclass
class ApprovalItemResult:
    """Outcome of approving a single opportunity."""
    index: int
    opportunity: LinkOpportunity
    outcome: ApprovalOutcome
    error: Optional[str] = None


@dataclass
class ApprovalResult:
    """Aggregated outcome of an approval batch."""
    success_count: int = 0
    no_match_count: int = 0
    error_count: int = 0
    remaining_opportunities: list[LinkOpportunity] = field(default_factory=list)
    items: list[ApprovalItemResult] = field(default_factory=list)

    @property
    def processed_count(self) -> int:
        return self.success_count + self.no_match_count + self.error_count

    def summary_messages(self) -> list[tuple[str, str]]:
        """
        User-facing summary lines as (level, message) pairs.

        Levels are "success", "warning" and "error". Only non-zero counts
        produce a message.
        """
        messages = []
        if self.success_count > 0:
            plural = "s" if self.success_count > 1 else ""
            messages.append(("success", f"Successfully added {self.success_count} internal link{plural}"))
        if self.no_match_count > 0:
            plural = "s" if self.no_match_count > 1 else ""
            messages.append((
                "warning",
                f"{self.no_match_count} link{plural} skipped - keyword not found in content",
            ))
        if self.error_count > 0:
            plural = "s" if self.error_count > 1 else ""
            messages.append(("error", f"Failed to add {self.error_count} link{plural}"))
        return messages
