"""
Post storage interface.

The engine never owns post persistence. It talks to a PostStore, which
lists published posts for scanning and reads/writes post content during
approval. Adapters raise PostStoreError for any fetch or update failure.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import replace
from typing import Iterable, Optional

from .models import Post

logger = logging.getLogger(__name__)


class PostStoreError(Exception):
    """Raised when a post store fetch or update fails."""
    pass


class PostStore(ABC):
    """Abstract collaborator that owns post persistence."""

    @abstractmethod
    def list_published(self) -> list[Post]:
        """Return snapshots of all published posts."""

    @abstractmethod
    def get_content(self, post_id: str) -> str:
        """
        Return the current persisted content of a post.

        Raises:
            PostStoreError: If the post cannot be fetched.
        """

    @abstractmethod
    def update_content(self, post_id: str, new_content: str) -> None:
        """
        Persist new content for a post.

        Raises:
            PostStoreError: If the update fails.
        """


class InMemoryPostStore(PostStore):
    """
    Dictionary-backed store, useful for embedding and tests.

    Args:
        posts: Initial posts. Stored as copies; later mutation of the
            originals does not leak into the store.
        fail_on_fetch: Post IDs whose get_content calls should fail.
        fail_on_update: Post IDs whose update_content calls should fail.
    """

    def __init__(
        self,
        posts: Iterable[Post] = (),
        fail_on_fetch: Optional[set[str]] = None,
        fail_on_update: Optional[set[str]] = None,
    ):
        self._posts: dict[str, Post] = {}
        for post in posts:
            self._posts[post.id] = replace(post)
        self.fail_on_fetch = set(fail_on_fetch or ())
        self.fail_on_update = set(fail_on_update or ())
        self.update_log: list[tuple[str, str]] = []

    def list_published(self) -> list[Post]:
        return [replace(post) for post in self._posts.values()]

    def get_content(self, post_id: str) -> str:
        if post_id in self.fail_on_fetch:
            raise PostStoreError(f"Fetch failed for post {post_id}")
        try:
            return self._posts[post_id].content
        except KeyError:
            raise PostStoreError(f"Post not found: {post_id}")

    def update_content(self, post_id: str, new_content: str) -> None:
        if post_id in self.fail_on_update:
            raise PostStoreError(f"Update failed for post {post_id}")
        if post_id not in self._posts:
            raise PostStoreError(f"Post not found: {post_id}")
        self._posts[post_id].content = new_content
        self.update_log.append((post_id, new_content))
        logger.debug(f"Updated content of post {post_id} ({len(new_content)} chars)")
