"""
File-backed post store for JSON, CSV and Excel exports.

This module lets the engine run against a content export instead of a
live database:
- JSON files (a list of post objects, optionally with nested categories)
- CSV files
- Excel files (.xlsx, .xls)

The file is re-read on every content fetch and rewritten on every
update, so the file on disk is always the authoritative copy.
"""

import json
import logging
import re
from pathlib import Path
from typing import Any, Optional, Union

import pandas as pd

from .models import Post
from .post_store import PostStore, PostStoreError

logger = logging.getLogger(__name__)


class PostLoadError(PostStoreError):
    """Raised when a post file cannot be read, parsed or written."""
    pass


SUPPORTED_EXTENSIONS = {".json", ".csv", ".xlsx", ".xls"}

# Common column name variations for post exports
ID_COLUMN_VARIANTS = ["id", "post_id", "uuid"]
TITLE_COLUMN_VARIANTS = ["title", "post_title", "headline"]
SLUG_COLUMN_VARIANTS = ["slug", "post_slug", "permalink"]
CONTENT_COLUMN_VARIANTS = ["content", "body", "post_content", "html", "markdown"]
EXCERPT_COLUMN_VARIANTS = ["excerpt", "summary", "description", "meta_description"]
CATEGORY_SLUG_COLUMN_VARIANTS = ["category_slug", "category"]
CATEGORY_NAME_COLUMN_VARIANTS = ["category_name"]
STATUS_COLUMN_VARIANTS = ["status", "post_status", "state"]
PUBLISHED_AT_COLUMN_VARIANTS = ["published_at", "publish_date", "date_published", "date"]


def _normalize_column_name(name: str) -> str:
    """Normalize column name for matching."""
    return str(name).lower().strip().replace(" ", "_").replace("-", "_")


def _find_column(df: pd.DataFrame, variants: list[str]) -> Optional[str]:
    """
    Find a column in the DataFrame matching one of the variant names.

    Args:
        df: The DataFrame to search.
        variants: List of possible column name variants.

    Returns:
        The actual column name if found, None otherwise.
    """
    normalized_columns = {_normalize_column_name(col): col for col in df.columns}

    for variant in variants:
        normalized = _normalize_column_name(variant)
        if normalized in normalized_columns:
            return normalized_columns[normalized]

    return None


def _cell_text(value: Any) -> str:
    """Convert a cell to text, mapping missing values to an empty string."""
    if isinstance(value, (dict, list)):
        return ""
    if value is None or (isinstance(value, float) and pd.isna(value)):
        return ""
    return str(value)


def _slugify(name: str) -> str:
    return re.sub(r"[^a-z0-9]+", "-", name.lower()).strip("-")


class FilePostStore(PostStore):
    """
    PostStore backed by a JSON, CSV or Excel file.

    Args:
        file_path: Path to the export file.
        sheet_name: Optional Excel sheet name. Defaults to the first sheet.
    """

    def __init__(self, file_path: Union[str, Path], sheet_name: Optional[str] = None):
        self.path = Path(file_path)
        self.sheet_name = sheet_name

        if not self.path.exists():
            raise PostLoadError(f"File not found: {file_path}")

        if self.path.suffix.lower() not in SUPPORTED_EXTENSIONS:
            raise PostLoadError(
                f"Unsupported file format: {self.path.suffix}. "
                f"Supported formats: {', '.join(sorted(SUPPORTED_EXTENSIONS))}"
            )

    @property
    def suffix(self) -> str:
        return self.path.suffix.lower()

    def _read_frame(self) -> pd.DataFrame:
        """Read the whole file into a DataFrame of raw cells."""
        try:
            if self.suffix == ".json":
                with open(self.path, encoding="utf-8") as f:
                    data = json.load(f)
                if isinstance(data, dict):
                    data = data.get("posts", [])
                df = pd.DataFrame.from_records(data)
            elif self.suffix == ".csv":
                try:
                    df = pd.read_csv(self.path, encoding="utf-8", dtype=str, keep_default_na=False)
                except UnicodeDecodeError:
                    df = pd.read_csv(self.path, encoding="latin-1", dtype=str, keep_default_na=False)
            else:
                if self.sheet_name:
                    df = pd.read_excel(self.path, sheet_name=self.sheet_name, dtype=str)
                else:
                    df = pd.read_excel(self.path, dtype=str)
                df = df.fillna("")
        except PostLoadError:
            raise
        except Exception as e:
            raise PostLoadError(f"Failed to read post file {self.path}: {e}")

        if df.empty:
            raise PostLoadError("Post file is empty")

        return df

    def _write_frame(self, df: pd.DataFrame) -> None:
        try:
            if self.suffix == ".json":
                df.to_json(self.path, orient="records", indent=2, force_ascii=False)
            elif self.suffix == ".csv":
                df.to_csv(self.path, index=False, encoding="utf-8")
            else:
                df.to_excel(self.path, index=False, sheet_name=self.sheet_name or "Sheet1")
        except Exception as e:
            raise PostLoadError(f"Failed to write post file {self.path}: {e}")

    def _require_column(self, df: pd.DataFrame, variants: list[str], label: str) -> str:
        column = _find_column(df, variants)
        if column is None:
            raise PostLoadError(
                f"No {label} column found. Expected one of: {', '.join(variants)}. "
                f"Found columns: {', '.join(str(c) for c in df.columns)}"
            )
        return column

    def _row_index(self, df: pd.DataFrame, post_id: str) -> Any:
        id_col = self._require_column(df, ID_COLUMN_VARIANTS, "id")
        matches = df.index[df[id_col].map(_cell_text) == str(post_id)]
        if len(matches) == 0:
            raise PostStoreError(f"Post not found: {post_id}")
        return matches[0]

    def _row_to_post(self, row: pd.Series, columns: dict[str, Optional[str]]) -> Post:
        def _get(key: str) -> Any:
            column = columns.get(key)
            return row[column] if column is not None else None

        data: dict[str, Any] = {
            "id": _cell_text(_get("id")),
            "title": _cell_text(_get("title")),
            "slug": _cell_text(_get("slug")),
            "content": _cell_text(_get("content")),
            "excerpt": _cell_text(_get("excerpt")),
        }

        category = _get("category_slug")
        category_name = _cell_text(_get("category_name"))
        if isinstance(category, dict):
            data["category"] = category
        elif _cell_text(category):
            data["category_slug"] = _cell_text(category)
            data["category_name"] = category_name
        elif category_name:
            data["category_slug"] = _slugify(category_name)
            data["category_name"] = category_name

        return Post.from_dict(data)

    def list_published(self) -> list[Post]:
        """
        Return published posts, newest first when a publish date exists.

        Rows are treated as published when the file has no status column.
        """
        df = self._read_frame()

        columns = {
            "id": self._require_column(df, ID_COLUMN_VARIANTS, "id"),
            "content": self._require_column(df, CONTENT_COLUMN_VARIANTS, "content"),
            "title": _find_column(df, TITLE_COLUMN_VARIANTS),
            "slug": _find_column(df, SLUG_COLUMN_VARIANTS),
            "excerpt": _find_column(df, EXCERPT_COLUMN_VARIANTS),
            "category_slug": _find_column(df, CATEGORY_SLUG_COLUMN_VARIANTS),
            "category_name": _find_column(df, CATEGORY_NAME_COLUMN_VARIANTS),
        }

        status_col = _find_column(df, STATUS_COLUMN_VARIANTS)
        if status_col is not None:
            df = df[df[status_col].map(_cell_text).str.strip().str.lower() == "published"]

        published_col = _find_column(df, PUBLISHED_AT_COLUMN_VARIANTS)
        if published_col is not None:
            published_at = pd.to_datetime(df[published_col].map(_cell_text), errors="coerce", utc=True)
            df = df.assign(_published_at=published_at).sort_values(
                "_published_at", ascending=False, kind="stable", na_position="last"
            )

        posts = [self._row_to_post(row, columns) for _, row in df.iterrows()]
        logger.info(f"Loaded {len(posts)} published posts from {self.path}")
        return posts

    def get_content(self, post_id: str) -> str:
        df = self._read_frame()
        content_col = self._require_column(df, CONTENT_COLUMN_VARIANTS, "content")
        return _cell_text(df.at[self._row_index(df, post_id), content_col])

    def update_content(self, post_id: str, new_content: str) -> None:
        df = self._read_frame()
        content_col = self._require_column(df, CONTENT_COLUMN_VARIANTS, "content")
        row_index = self._row_index(df, post_id)
        df[content_col] = df[content_col].astype(object)
        df.at[row_index, content_col] = new_content
        self._write_frame(df)
        logger.debug(f"Wrote updated content for post {post_id} to {self.path}")
