"""
Safe single-occurrence link insertion for Markdown and HTML content.

Given a post body and a keyword, wraps the first eligible occurrence of
the keyword in an anchor pointing at the target post. An occurrence is
eligible when it sits on word boundaries and is not already part of a
link:

- not immediately preceded by "[" or followed by "]"
- not followed by "</a>" before any other tag
- not inside an <a>...</a> element, a tag's own markup, or a Markdown
  link/image ([text](url "title"))

This is a regex heuristic, not a document parser. Keywords inside code
blocks, headings or HTML comments are still eligible, and malformed
markup (unbalanced brackets, unclosed tags) can defeat the span checks.

Returning the content unchanged is the "no eligible occurrence" signal.
"""

import logging
import re
from typing import Literal, Optional

from .config import DEFAULT_CONFIG, LinkerConfig

logger = logging.getLogger(__name__)

ContentFormat = Literal["markdown", "html"]

_MARKDOWN_LINK_DETECT_RE = re.compile(r"\[.*\]\(.*\)")
_HTML_ANCHOR_RE = re.compile(r"<a\b[^>]*>.*?</a\s*>", re.IGNORECASE | re.DOTALL)
_HTML_TAG_RE = re.compile(r"<[^>]*>")
# A quoted title may contain ")"; an unterminated quote falls back to the first ")".
_MARKDOWN_LINK_RE = re.compile(r'!?\[[^\]\n]*\]\((?:[^)"\n]|"[^"\n]*"|")*\)')
_OPEN_ANCHOR_BEFORE_RE = re.compile(r"<a\b[^>]*>$", re.IGNORECASE)


def detect_format(content: str) -> ContentFormat:
    """
    Classify content as Markdown or HTML.

    Markdown when the content contains "##", "**" or a [text](url) link;
    HTML otherwise.
    """
    if "##" in content or "**" in content or _MARKDOWN_LINK_DETECT_RE.search(content):
        return "markdown"
    return "html"


def build_eligibility_pattern(keyword: str) -> re.Pattern:
    """
    Compile the case-insensitive, word-bounded pattern for a keyword.

    The keyword is escaped so regex metacharacters match literally.
    """
    escaped = re.escape(keyword.strip())
    return re.compile(
        rf"(?<!\[)\b({escaped})\b(?![^<]*</a>)(?!\])",
        re.IGNORECASE,
    )


def _protected_spans(content: str) -> list[tuple[int, int]]:
    """Character ranges that already belong to a link or to tag markup."""
    spans = []
    for pattern in (_HTML_ANCHOR_RE, _HTML_TAG_RE, _MARKDOWN_LINK_RE):
        spans.extend(m.span() for m in pattern.finditer(content))
    return spans


def _overlaps(start: int, end: int, spans: list[tuple[int, int]]) -> bool:
    return any(start < span_end and end > span_start for span_start, span_end in spans)


def find_eligible_match(content: str, keyword: str) -> Optional[re.Match]:
    """
    Find the first occurrence of keyword that can safely become a link.

    Returns:
        The regex match, or None when no eligible occurrence exists.
    """
    if not keyword or not keyword.strip():
        return None

    pattern = build_eligibility_pattern(keyword)
    spans = None

    for match in pattern.finditer(content):
        if spans is None:
            spans = _protected_spans(content)
        if _overlaps(match.start(), match.end(), spans):
            continue
        if _OPEN_ANCHOR_BEFORE_RE.search(content, 0, match.start()):
            continue
        return match

    return None


def build_anchor(
    text: str,
    target_slug: str,
    target_title: str,
    content_format: ContentFormat,
    config: Optional[LinkerConfig] = None,
) -> str:
    """Build the anchor markup wrapping text for the given format."""
    config = config or DEFAULT_CONFIG
    href = config.link_href(target_slug)
    if content_format == "markdown":
        return f'[{text}]({href} "{target_title}")'
    escaped_title = target_title.replace('"', "&quot;")
    return f'<a href="{href}" title="{escaped_title}">{text}</a>'


def insert_link(
    content: str,
    keyword: str,
    target_slug: str,
    target_title: str,
    config: Optional[LinkerConfig] = None,
) -> str:
    """
    Insert one anchor for keyword into content.

    Only the first eligible occurrence is replaced, keeping its original
    casing. All other bytes of the content are preserved.

    Args:
        content: Post body (Markdown or HTML).
        keyword: Text to turn into a link.
        target_slug: Slug of the post being linked to.
        target_title: Title of the post being linked to.
        config: Optional configuration (link path prefix).

    Returns:
        The updated content, or content unchanged when no eligible
        occurrence exists.
    """
    match = find_eligible_match(content, keyword)
    if match is None:
        logger.debug(f"No eligible occurrence for keyword: {keyword.strip()!r}")
        return content

    content_format = detect_format(content)
    anchor = build_anchor(match.group(0), target_slug, target_title, content_format, config)
    logger.debug(f"Inserting {content_format} link for {match.group(0)!r} -> {target_slug}")
    return content[:match.start()] + anchor + content[match.end():]


class LinkInserter:
    """Link inserter bound to a configuration."""

    def __init__(self, config: Optional[LinkerConfig] = None):
        self.config = config or DEFAULT_CONFIG

    def insert(self, content: str, keyword: str, target_slug: str, target_title: str) -> str:
        return insert_link(content, keyword, target_slug, target_title, self.config)
