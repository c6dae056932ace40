"""Tests for the in-memory and file-backed post stores."""

import json

import pandas as pd
import pytest

from seo_internal_linker.file_store import FilePostStore, PostLoadError
from seo_internal_linker.models import Post
from seo_internal_linker.post_store import InMemoryPostStore, PostStoreError


class TestInMemoryPostStore:
    """Tests for the dictionary-backed store."""

    def test_list_published_returns_copies(self, sample_posts):
        """Test that callers cannot mutate stored posts through snapshots."""
        store = InMemoryPostStore(sample_posts)
        snapshot = store.list_published()
        snapshot[0].content = "changed"
        assert store.get_content("1") == sample_posts[0].content

    def test_originals_not_shared(self, sample_posts):
        """Test that updates do not leak into the caller's posts."""
        store = InMemoryPostStore(sample_posts)
        store.update_content("1", "<p>new</p>")
        assert sample_posts[0].content != "<p>new</p>"
        assert store.get_content("1") == "<p>new</p>"
        assert store.update_log == [("1", "<p>new</p>")]

    def test_missing_post(self, memory_store):
        """Test that unknown IDs raise PostStoreError."""
        with pytest.raises(PostStoreError, match="Post not found"):
            memory_store.get_content("nope")
        with pytest.raises(PostStoreError, match="Post not found"):
            memory_store.update_content("nope", "x")

    def test_failure_hooks(self, sample_posts):
        """Test the configurable fetch and update failures."""
        store = InMemoryPostStore(sample_posts, fail_on_fetch={"1"}, fail_on_update={"2"})
        with pytest.raises(PostStoreError, match="Fetch failed"):
            store.get_content("1")
        with pytest.raises(PostStoreError, match="Update failed"):
            store.update_content("2", "x")


class TestFilePostStoreJson:
    """Tests for JSON exports."""

    def test_lists_published_newest_first(self, posts_json_file):
        """Test status filtering and publish-date ordering."""
        posts = FilePostStore(posts_json_file).list_published()
        assert [post.id for post in posts] == ["4", "3", "2", "1"]

    def test_nested_category(self, posts_json_file):
        """Test that nested category objects are parsed."""
        posts = {post.id: post for post in FilePostStore(posts_json_file).list_published()}
        assert posts["3"].category_slug == "feeding"
        assert posts["3"].category_name == "Feeding"
        assert posts["1"].title == "Sleep Training Basics"

    def test_dict_root_with_posts_key(self, tmp_path):
        """Test a JSON object wrapping the post list."""
        path = tmp_path / "export.json"
        path.write_text(json.dumps({"posts": [
            {"id": 1, "title": "A", "slug": "a", "content": "alpha"},
            {"id": 2, "title": "B", "slug": "b", "content": "beta"},
        ]}), encoding="utf-8")

        posts = FilePostStore(path).list_published()

        assert [post.id for post in posts] == ["1", "2"]
        assert posts[0].category is None

    def test_update_round_trip(self, posts_json_file):
        """Test that updates are persisted and re-read from disk."""
        store = FilePostStore(posts_json_file)
        store.update_content("2", '<p><a href="/blog/x" title="X">A schedule</a></p>')

        assert FilePostStore(posts_json_file).get_content("2") == (
            '<p><a href="/blog/x" title="X">A schedule</a></p>'
        )
        rows = json.loads(posts_json_file.read_text(encoding="utf-8"))
        assert len(rows) == 5
        assert rows[0]["category"] == {"name": "Sleep", "slug": "sleep"}

    def test_missing_post(self, posts_json_file):
        """Test that unknown IDs raise PostStoreError."""
        with pytest.raises(PostStoreError, match="Post not found"):
            FilePostStore(posts_json_file).get_content("12345")


class TestFilePostStoreCsv:
    """Tests for CSV exports with spreadsheet-style headers."""

    def test_column_variants(self, posts_csv_file):
        """Test that "ID", "Body" and "Category Slug" headers are recognized."""
        posts = FilePostStore(posts_csv_file).list_published()

        assert [post.id for post in posts] == ["10", "11"]
        assert posts[0].content == "<p>Clean your widget weekly.</p>"
        assert posts[0].category_slug == "widgets"
        assert posts[0].category_name == "Widgets"

    def test_update_csv(self, posts_csv_file):
        """Test that CSV updates keep other rows intact."""
        store = FilePostStore(posts_csv_file)
        store.update_content("10", '<p>Clean your <a href="/blog/w" title="W">widget</a> weekly.</p>')

        assert store.get_content("10") == '<p>Clean your <a href="/blog/w" title="W">widget</a> weekly.</p>'
        assert store.get_content("11") == "<p>Compare every widget before buying.</p>"

    def test_category_name_only(self, tmp_path):
        """Test that a category name alone produces a slug."""
        path = tmp_path / "posts.csv"
        path.write_text("id,title,content,category_name\n1,A,alpha,Baby Sleep\n", encoding="utf-8")

        post = FilePostStore(path).list_published()[0]

        assert post.category_slug == "baby-sleep"
        assert post.category_name == "Baby Sleep"

    def test_status_column_filters(self, tmp_path):
        """Test that non-published rows are excluded."""
        path = tmp_path / "posts.csv"
        path.write_text(
            "id,content,status\n1,alpha,Published\n2,beta,draft\n3,gamma,published\n",
            encoding="utf-8",
        )
        assert [post.id for post in FilePostStore(path).list_published()] == ["1", "3"]


class TestFilePostStoreExcel:
    """Tests for Excel exports."""

    def test_read_and_update_xlsx(self, tmp_path):
        """Test listing and updating an Excel workbook."""
        path = tmp_path / "posts.xlsx"
        pd.DataFrame([
            {"Post ID": "a1", "Title": "Widget Care", "Content": "<p>widget</p>", "Excerpt": "Care"},
            {"Post ID": "a2", "Title": "Widget Guide", "Content": "<p>guide</p>", "Excerpt": ""},
        ]).to_excel(path, index=False)

        store = FilePostStore(path)
        posts = store.list_published()
        store.update_content("a1", "<p>updated</p>")

        assert [post.id for post in posts] == ["a1", "a2"]
        assert posts[1].excerpt == ""
        assert FilePostStore(path).get_content("a1") == "<p>updated</p>"


class TestFilePostStoreErrors:
    """Tests for load failures."""

    def test_file_not_found(self, tmp_path):
        """Test FileNotFound handling."""
        with pytest.raises(PostLoadError, match="File not found"):
            FilePostStore(tmp_path / "missing.json")

    def test_unsupported_format(self, tmp_path):
        """Test unsupported extension handling."""
        path = tmp_path / "posts.txt"
        path.write_text("hello", encoding="utf-8")
        with pytest.raises(PostLoadError, match="Unsupported file format"):
            FilePostStore(path)

    def test_missing_content_column(self, tmp_path):
        """Test that a required column must be present."""
        path = tmp_path / "posts.csv"
        path.write_text("id,title\n1,A\n", encoding="utf-8")
        with pytest.raises(PostLoadError, match="No content column found"):
            FilePostStore(path).list_published()

    def test_invalid_json(self, tmp_path):
        """Test that unparsable files raise PostLoadError."""
        path = tmp_path / "posts.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(PostLoadError, match="Failed to read"):
            FilePostStore(path).list_published()

    def test_empty_file(self, tmp_path):
        """Test that an empty post list is rejected."""
        path = tmp_path / "posts.json"
        path.write_text("[]", encoding="utf-8")
        with pytest.raises(PostLoadError, match="empty"):
            FilePostStore(path).list_published()

    def test_load_error_is_store_error(self):
        """Test that callers can catch every adapter failure as PostStoreError."""
        assert issubclass(PostLoadError, PostStoreError)


def test_posts_from_store_are_posts(posts_json_file):
    """Test that adapters return Post instances."""
    assert all(isinstance(post, Post) for post in FilePostStore(posts_json_file).list_published())
