"""
SEO Internal Linker

Discovers internal linking opportunities between published posts and
safely applies approved links:
- Extracts keywords and phrases from each post
- Scores every ordered pair of posts for keyword overlap and category affinity
- Inserts a single Markdown or HTML anchor without double-linking
"""

__version__ = "1.0.0"
__author__ = "SEO Internal Linker Team"

from .config import DEFAULT_STOPWORDS, LinkerConfig

from .models import (
    ApprovalItemResult,
    ApprovalOutcome,
    ApprovalResult,
    Category,
    LinkOpportunity,
    Post,
    RelevanceTier,
    ScanStats,
)

from .keyword_extractor import (
    KeywordExtractor,
    extract_keywords,
    extract_phrases,
    strip_markup,
)

from .opportunity_matcher import (
    OpportunityMatcher,
    build_context_snippet,
    find_matches,
    scan,
)

from .link_inserter import (
    LinkInserter,
    build_anchor,
    build_eligibility_pattern,
    detect_format,
    find_eligible_match,
    insert_link,
)

from .approval import (
    ApprovalBatchRunner,
    approve,
)

# Post stores
from .post_store import (
    InMemoryPostStore,
    PostStore,
    PostStoreError,
)
from .file_store import FilePostStore, PostLoadError
from .supabase_store import SupabasePostStore

from .report import ReportWriteError, write_opportunity_report

__all__ = [
    # Configuration
    "LinkerConfig",
    "DEFAULT_STOPWORDS",
    # Models
    "ApprovalItemResult",
    "ApprovalOutcome",
    "ApprovalResult",
    "Category",
    "LinkOpportunity",
    "Post",
    "RelevanceTier",
    "ScanStats",
    # Keyword extraction
    "KeywordExtractor",
    "extract_keywords",
    "extract_phrases",
    "strip_markup",
    # Opportunity discovery
    "OpportunityMatcher",
    "build_context_snippet",
    "find_matches",
    "scan",
    # Link insertion
    "LinkInserter",
    "build_anchor",
    "build_eligibility_pattern",
    "detect_format",
    "find_eligible_match",
    "insert_link",
    # Approval
    "ApprovalBatchRunner",
    "approve",
    # Post stores
    "InMemoryPostStore",
    "PostStore",
    "PostStoreError",
    "FilePostStore",
    "PostLoadError",
    "SupabasePostStore",
    # Reports
    "ReportWriteError",
    "write_opportunity_report",
]
