"""
PostgREST (Supabase) post store.

Reads published posts from the ``blog_posts`` table, joined with their
``blog_categories`` row, and reads/writes post content one row at a time.
Every request failure is reported as a PostStoreError.
"""

import logging
import os
from typing import Any, Optional

import requests

from .models import Post
from .post_store import PostStore, PostStoreError

logger = logging.getLogger(__name__)

DEFAULT_TABLE = "blog_posts"
DEFAULT_CATEGORY_TABLE = "blog_categories"
DEFAULT_TIMEOUT = 30

SUPABASE_URL_ENV = "SUPABASE_URL"
SUPABASE_KEY_ENV = "SUPABASE_SERVICE_ROLE_KEY"


class SupabasePostStore(PostStore):
    """
    PostStore talking to a Supabase project's REST endpoint.

    Args:
        base_url: Project URL, e.g. https://xyz.supabase.co
        api_key: Service role (or anon) key used for both apikey and bearer auth.
        table: Posts table name.
        category_table: Categories table joined into each post.
        timeout: Per-request timeout in seconds.
    """

    def __init__(
        self,
        base_url: str,
        api_key: str,
        table: str = DEFAULT_TABLE,
        category_table: str = DEFAULT_CATEGORY_TABLE,
        timeout: float = DEFAULT_TIMEOUT,
    ):
        if not base_url:
            raise PostStoreError("Supabase URL is required")
        if not api_key:
            raise PostStoreError("Supabase API key is required")

        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.table = table
        self.category_table = category_table
        self.timeout = timeout
        self.session = requests.Session()
        self.session.headers.update({
            "apikey": api_key,
            "Authorization": f"Bearer {api_key}",
            "Content-Type": "application/json",
        })

    @classmethod
    def from_env(cls, **kwargs: Any) -> "SupabasePostStore":
        """Create a store from SUPABASE_URL and SUPABASE_SERVICE_ROLE_KEY."""
        return cls(
            base_url=os.environ.get(SUPABASE_URL_ENV, ""),
            api_key=os.environ.get(SUPABASE_KEY_ENV, ""),
            **kwargs,
        )

    @property
    def table_url(self) -> str:
        return f"{self.base_url}/rest/v1/{self.table}"

    def _request(
        self,
        method: str,
        params: dict[str, str],
        json_body: Optional[dict[str, Any]] = None,
        headers: Optional[dict[str, str]] = None,
    ) -> Any:
        try:
            response = self.session.request(
                method,
                self.table_url,
                params=params,
                json=json_body,
                headers=headers,
                timeout=self.timeout,
            )
            response.raise_for_status()
        except requests.RequestException as e:
            raise PostStoreError(f"{method} {self.table} failed: {e}")

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            raise PostStoreError(f"Invalid JSON from {self.table}: {e}")

    def list_published(self) -> list[Post]:
        rows = self._request("GET", {
            "select": f"id,title,slug,content,excerpt,category:{self.category_table}(name,slug)",
            "status": "eq.published",
            "order": "published_at.desc",
        })
        posts = [Post.from_dict(row) for row in rows or []]
        logger.info(f"Fetched {len(posts)} published posts from {self.table}")
        return posts

    def get_content(self, post_id: str) -> str:
        rows = self._request("GET", {"select": "content", "id": f"eq.{post_id}"})
        if not rows:
            raise PostStoreError(f"Post not found: {post_id}")
        return rows[0].get("content") or ""

    def update_content(self, post_id: str, new_content: str) -> None:
        rows = self._request(
            "PATCH",
            {"id": f"eq.{post_id}"},
            json_body={"content": new_content},
            headers={"Prefer": "return=representation"},
        )
        if not rows:
            raise PostStoreError(f"Update matched no rows for post {post_id}")
        logger.debug(f"Updated content of post {post_id} in {self.table}")
