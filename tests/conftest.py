"""
Pytest fixtures and configuration for SEO Internal Linker tests.
"""

import json
from pathlib import Path

import pytest

from seo_internal_linker.models import Category, LinkOpportunity, Post
from seo_internal_linker.post_store import InMemoryPostStore


SLEEP = Category(name="Sleep", slug="sleep")
FEEDING = Category(name="Feeding", slug="feeding")


@pytest.fixture
def sleep_category() -> Category:
    return SLEEP


@pytest.fixture
def feeding_category() -> Category:
    return FEEDING


@pytest.fixture
def sample_posts() -> list[Post]:
    """A small corpus mixing HTML and Markdown bodies across two categories."""
    return [
        Post(
            id="1",
            title="Sleep Training Basics",
            slug="sleep-training-basics",
            content=(
                "<p>Sleep training helps babies learn to fall asleep. "
                "Sleep training takes patience and a steady bedtime routine.</p>"
            ),
            excerpt="Sleep training basics for new parents.",
            category=SLEEP,
        ),
        Post(
            id="2",
            title="Sleep Training Schedule",
            slug="sleep-training-schedule",
            content="<p>A schedule keeps sleep training consistent from night to night.</p>",
            excerpt="A sleep training schedule by age.",
            category=SLEEP,
        ),
        Post(
            id="3",
            title="Picky Eating Guide",
            slug="picky-eating-guide",
            content=(
                "## Picky eating\n\n"
                "**Picky eating** is common in toddlers. Offer new foods alongside "
                "safe foods and keep mealtime calm."
            ),
            excerpt="How to handle picky eating at mealtime.",
            category=FEEDING,
        ),
        Post(
            id="4",
            title="Toddler Bedtime Routine",
            slug="toddler-bedtime-routine",
            content=(
                "<p>A calm bedtime routine helps toddlers sleep. Keep the bedtime "
                "routine short and predictable.</p>"
            ),
            excerpt="Build a bedtime routine that supports sleep training.",
            category=SLEEP,
        ),
    ]


@pytest.fixture
def memory_store(sample_posts: list[Post]) -> InMemoryPostStore:
    return InMemoryPostStore(sample_posts)


@pytest.fixture
def make_opportunity():
    """Factory for hand-built opportunities."""
    def _make(
        source: Post,
        target: Post,
        keywords: list[str],
        score: float = 0.45,
        snippet: str = "",
    ) -> LinkOpportunity:
        return LinkOpportunity(
            source_post=source,
            target_post=target,
            matched_keywords=keywords,
            context_snippet=snippet,
            relevance_score=score,
        )
    return _make


@pytest.fixture
def posts_json_file(tmp_path: Path, sample_posts: list[Post]) -> Path:
    """Write the sample corpus to a JSON export with one extra draft post."""
    rows = []
    for i, post in enumerate(sample_posts):
        row = post.to_dict()
        row["status"] = "published"
        row["published_at"] = f"2024-0{i + 1}-01T00:00:00Z"
        rows.append(row)
    rows.append({
        "id": "99",
        "title": "Unfinished Draft About Sleep Training",
        "slug": "draft",
        "content": "<p>Sleep training draft.</p>",
        "excerpt": "Draft",
        "category": SLEEP.to_dict(),
        "status": "draft",
        "published_at": None,
    })
    path = tmp_path / "posts.json"
    path.write_text(json.dumps(rows, indent=2), encoding="utf-8")
    return path


@pytest.fixture
def posts_csv_file(tmp_path: Path) -> Path:
    """A CSV export with spreadsheet-style column names."""
    csv_path = tmp_path / "posts.csv"
    csv_content = """ID,Title,Slug,Body,Excerpt,Category Name,Category Slug
10,Widget Care,widget-care,<p>Clean your widget weekly.</p>,Widget care tips,Widgets,widgets
11,Widget Buying Guide,widget-buying-guide,<p>Compare every widget before buying.</p>,How to buy a widget,Widgets,widgets
"""
    csv_path.write_text(csv_content, encoding="utf-8")
    return csv_path
