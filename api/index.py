"""
FastAPI wrapper for SEO Internal Linker - Vercel Serverless Function.

This module exposes link discovery and link approval as a REST API.
The API keeps no state between requests: the client holds the scanned
opportunity list and sends it back with the indices to approve.
"""

import logging
import os
from typing import Callable, Optional

from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field

# Add src to path for imports
import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from seo_internal_linker import __version__
from seo_internal_linker.approval import ApprovalBatchRunner
from seo_internal_linker.file_store import FilePostStore
from seo_internal_linker.models import LinkOpportunity, Post
from seo_internal_linker.opportunity_matcher import OpportunityMatcher
from seo_internal_linker.post_store import PostStore, PostStoreError
from seo_internal_linker.supabase_store import SUPABASE_URL_ENV, SupabasePostStore

logger = logging.getLogger(__name__)

POSTS_FILE_ENV = "LINKER_POSTS_FILE"

app = FastAPI(
    title="SEO Internal Linker API",
    description="Discovers internal linking opportunities between blog posts and applies approved links",
    version=__version__,
)

# Enable CORS for all origins
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


class CategoryModel(BaseModel):
    """Post category."""
    name: str
    slug: str


class PostModel(BaseModel):
    """Published post snapshot."""
    id: str
    title: str
    slug: str
    content: str
    excerpt: str = ""
    category: Optional[CategoryModel] = None


class OpportunityModel(BaseModel):
    """A proposed link from source_post to target_post."""
    source_post: PostModel
    target_post: PostModel
    matched_keywords: list[str] = Field(..., min_length=1)
    context_snippet: str = ""
    relevance_score: float
    tier: Optional[str] = Field(None, description="Relevance tier: high, medium or low (ignored on input)")


class ScanRequest(BaseModel):
    """Request model for scanning. Omit posts to scan the configured store."""
    posts: Optional[list[PostModel]] = Field(None, description="Posts to scan instead of the store's published posts")


class ScanStatsModel(BaseModel):
    total_posts: int
    posts_analyzed: int
    opportunities_found: int
    avg_links_per_post: float


class ScanResponse(BaseModel):
    """Response model for scan results."""
    opportunities: list[OpportunityModel]
    stats: ScanStatsModel


class ApproveRequest(BaseModel):
    """Request model for approving opportunities."""
    opportunities: list[OpportunityModel] = Field(..., description="The client's current opportunity list")
    indices: list[int] = Field(..., description="Positions in opportunities to apply, in order")


class ApproveResponse(BaseModel):
    """Response model for approval results."""
    success_count: int
    no_match_count: int
    error_count: int
    remaining_opportunities: list[OpportunityModel]
    messages: list[str] = Field(default_factory=list)


class HealthResponse(BaseModel):
    """Health check response."""
    status: str
    version: str


def get_store() -> PostStore:
    """
    Resolve the configured post store.

    Uses Supabase when SUPABASE_URL is set, otherwise the file named by
    LINKER_POSTS_FILE.
    """
    try:
        if os.environ.get(SUPABASE_URL_ENV):
            return SupabasePostStore.from_env()
        posts_file = os.environ.get(POSTS_FILE_ENV)
        if posts_file:
            return FilePostStore(posts_file)
    except PostStoreError as e:
        raise HTTPException(status_code=503, detail=f"Post store unavailable: {e}")
    raise HTTPException(
        status_code=503,
        detail=f"No post store configured. Set {SUPABASE_URL_ENV} or {POSTS_FILE_ENV}.",
    )


def get_store_loader(request: Request) -> Callable[[], PostStore]:
    """
    Return a callable that resolves the post store on demand.

    Scans with posts in the body never touch the store. Overrides of
    get_store apply here too.
    """
    return request.app.dependency_overrides.get(get_store, get_store)


def _to_post(model: PostModel) -> Post:
    return Post.from_dict(model.model_dump())


def _to_opportunity(model: OpportunityModel) -> LinkOpportunity:
    return LinkOpportunity.from_dict(model.model_dump())


def _to_model(opportunity: LinkOpportunity) -> OpportunityModel:
    data = opportunity.to_dict()
    data["tier"] = opportunity.tier.value
    return OpportunityModel(**data)


@app.get("/api/health", response_model=HealthResponse)
def health_check():
    """Health check endpoint."""
    return HealthResponse(status="healthy", version=__version__)


@app.post("/api/scan", response_model=ScanResponse)
def scan_posts(request: ScanRequest, load_store: Callable[[], PostStore] = Depends(get_store_loader)):
    """Scan posts for internal linking opportunities."""
    if request.posts is not None:
        posts = [_to_post(p) for p in request.posts]
    else:
        store = load_store()
        try:
            posts = store.list_published()
        except PostStoreError as e:
            raise HTTPException(status_code=502, detail=f"Failed to load posts: {e}")

    if len(posts) < 2:
        raise HTTPException(status_code=400, detail="Need at least 2 published posts to analyze")

    opportunities, stats = OpportunityMatcher().scan_with_stats(posts)
    return ScanResponse(
        opportunities=[_to_model(opp) for opp in opportunities],
        stats=ScanStatsModel(
            total_posts=stats.total_posts,
            posts_analyzed=stats.posts_analyzed,
            opportunities_found=stats.opportunities_found,
            avg_links_per_post=stats.avg_links_per_post,
        ),
    )


@app.post("/api/approve", response_model=ApproveResponse)
def approve_opportunities(request: ApproveRequest, store: PostStore = Depends(get_store)):
    """Insert links for the selected opportunities."""
    if not request.indices:
        raise HTTPException(status_code=400, detail="No opportunities selected")

    opportunities = [_to_opportunity(o) for o in request.opportunities]
    try:
        result = ApprovalBatchRunner(store).approve(opportunities, request.indices)
    except IndexError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return ApproveResponse(
        success_count=result.success_count,
        no_match_count=result.no_match_count,
        error_count=result.error_count,
        remaining_opportunities=[_to_model(opp) for opp in result.remaining_opportunities],
        messages=[message for _, message in result.summary_messages()],
    )


@app.get("/api/info")
def api_info():
    """Get API information and usage instructions."""
    return {
        "name": "SEO Internal Linker API",
        "version": __version__,
        "description": "Internal link discovery and insertion for blog posts",
        "endpoints": {
            "GET /api/health": "Health check",
            "POST /api/scan": "Scan posts (from the request body or the configured store) for link opportunities",
            "POST /api/approve": "Insert links for selected opportunities",
            "GET /api/info": "This endpoint",
        },
        "documentation": "/docs",
        "openapi": "/openapi.json",
    }
