"""
Sequential application of approved link opportunities.

Each selected opportunity is applied exactly once:
1. Re-read the source post's current content from the store
2. Insert a link for the opportunity's anchor keyword
3. Persist the new content if it changed

Items are processed strictly in the given order so that two opportunities
sharing a source post see each other's edits. A failing item is counted
and logged; it never aborts the rest of the batch.
"""

import logging
from typing import Optional, Sequence

from .config import DEFAULT_CONFIG, LinkerConfig
from .link_inserter import insert_link
from .models import ApprovalItemResult, ApprovalOutcome, ApprovalResult, LinkOpportunity
from .post_store import PostStore, PostStoreError

logger = logging.getLogger(__name__)


def _unique_indices(indices: Sequence[int], count: int) -> list[int]:
    """Validate indices and drop repeats, keeping first occurrences in order."""
    unique = []
    seen = set()
    for index in indices:
        if not 0 <= index < count:
            raise IndexError(f"Opportunity index out of range: {index} (have {count})")
        if index not in seen:
            seen.add(index)
            unique.append(index)
    return unique


class ApprovalBatchRunner:
    """Applies a caller-selected subset of opportunities through a PostStore."""

    def __init__(self, store: PostStore, config: Optional[LinkerConfig] = None):
        self.store = store
        self.config = config or DEFAULT_CONFIG

    def apply_one(self, index: int, opportunity: LinkOpportunity) -> ApprovalItemResult:
        """Apply a single opportunity and report its terminal outcome."""
        source = opportunity.source_post
        target = opportunity.target_post
        keyword = opportunity.anchor_keyword

        logger.info(f"Processing opportunity {index}: {source.title!r} -> {target.title!r} (keyword: {keyword!r})")

        try:
            current_content = self.store.get_content(source.id)
            updated_content = insert_link(
                current_content,
                keyword,
                target.slug,
                target.title,
                self.config,
            )

            if updated_content == current_content:
                logger.warning(f"No changes made to post {source.id} - keyword {keyword!r} not found in content")
                return ApprovalItemResult(index, opportunity, ApprovalOutcome.NO_MATCH)

            self.store.update_content(source.id, updated_content)
        except PostStoreError as e:
            logger.error(f"Error approving opportunity {index}: {e}")
            return ApprovalItemResult(index, opportunity, ApprovalOutcome.ERRORED, error=str(e))
        except Exception as e:
            logger.exception(f"Unexpected error approving opportunity {index}")
            return ApprovalItemResult(index, opportunity, ApprovalOutcome.ERRORED, error=str(e))

        logger.info(f"Linked post {source.id} to /{target.slug}")
        return ApprovalItemResult(index, opportunity, ApprovalOutcome.APPLIED)

    def approve(self, opportunities: Sequence[LinkOpportunity], indices: Sequence[int]) -> ApprovalResult:
        """
        Apply the opportunities at the given indices, in order.

        Args:
            opportunities: The caller's current working set.
            indices: Positions in ``opportunities`` to apply. Repeated
                indices are applied once.

        Returns:
            ApprovalResult with per-outcome counts and the opportunities
            that were not processed, in their original order.

        Raises:
            IndexError: If any index is out of range. Raised before any
                store access.
        """
        selected = _unique_indices(indices, len(opportunities))
        result = ApprovalResult()

        if not selected:
            logger.warning("No opportunities selected")
            result.remaining_opportunities = list(opportunities)
            return result

        logger.info(f"Starting approval for {len(selected)} opportunities")

        for index in selected:
            item = self.apply_one(index, opportunities[index])
            result.items.append(item)
            if item.outcome is ApprovalOutcome.APPLIED:
                result.success_count += 1
            elif item.outcome is ApprovalOutcome.NO_MATCH:
                result.no_match_count += 1
            else:
                result.error_count += 1

        processed = set(selected)
        result.remaining_opportunities = [
            opportunity for i, opportunity in enumerate(opportunities) if i not in processed
        ]

        logger.info(
            f"Approval complete: {result.success_count} success, "
            f"{result.error_count} errors, {result.no_match_count} no match"
        )
        return result


def approve(
    store: PostStore,
    opportunities: Sequence[LinkOpportunity],
    indices: Sequence[int],
    config: Optional[LinkerConfig] = None,
) -> ApprovalResult:
    """Convenience wrapper around ApprovalBatchRunner.approve."""
    return ApprovalBatchRunner(store, config).approve(opportunities, indices)
