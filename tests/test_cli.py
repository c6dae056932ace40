"""Tests for the command-line interface."""

import json

from click.testing import CliRunner

from seo_internal_linker.cli import main


def _contents(path) -> dict:
    return {row["id"]: row["content"] for row in json.loads(path.read_text(encoding="utf-8"))}


class TestScanCommand:
    """Tests for `seo-linker scan`."""

    def test_scan_file(self, posts_json_file):
        """Test scanning a JSON export."""
        result = CliRunner().invoke(main, ["scan", "--posts", str(posts_json_file)])

        assert result.exit_code == 0, result.output
        assert "internal linking opportunities" in result.output
        assert "Found" in result.output

    def test_scan_writes_report(self, posts_json_file, tmp_path):
        """Test the --report option."""
        report = tmp_path / "opportunities.csv"
        result = CliRunner().invoke(
            main, ["scan", "--posts", str(posts_json_file), "--report", str(report)]
        )

        assert result.exit_code == 0, result.output
        assert report.exists()

    def test_scan_does_not_modify_posts(self, posts_json_file):
        """Test that scanning is read-only."""
        before = posts_json_file.read_text(encoding="utf-8")
        CliRunner().invoke(main, ["scan", "--posts", str(posts_json_file), "--tier", "high"])
        assert posts_json_file.read_text(encoding="utf-8") == before

    def test_requires_a_store(self):
        """Test that a store option is mandatory."""
        result = CliRunner().invoke(main, ["scan"])
        assert result.exit_code == 2

    def test_both_stores_rejected(self, posts_json_file):
        """Test that --posts and --supabase are mutually exclusive."""
        result = CliRunner().invoke(main, ["scan", "--posts", str(posts_json_file), "--supabase"])
        assert result.exit_code == 2

    def test_supabase_without_credentials(self, monkeypatch):
        """Test that missing Supabase credentials exit with an error."""
        monkeypatch.delenv("SUPABASE_URL", raising=False)
        monkeypatch.delenv("SUPABASE_SERVICE_ROLE_KEY", raising=False)
        result = CliRunner().invoke(main, ["scan", "--supabase"])
        assert result.exit_code == 1
        assert "Supabase URL is required" in result.output

    def test_unsupported_report_format(self, posts_json_file, tmp_path):
        """Test that report errors exit with status 1."""
        result = CliRunner().invoke(
            main, ["scan", "--posts", str(posts_json_file), "--report", str(tmp_path / "r.pdf")]
        )
        assert result.exit_code == 1


class TestApplyCommand:
    """Tests for `seo-linker apply`."""

    def test_apply_all(self, posts_json_file):
        """Test applying every opportunity to a JSON export."""
        result = CliRunner().invoke(main, ["apply", "--posts", str(posts_json_file), "--all"])

        assert result.exit_code == 0, result.output
        assert "Successfully added" in result.output
        assert "opportunities remaining" in result.output
        assert any("/blog/" in content for content in _contents(posts_json_file).values())

    def test_apply_single_index(self, posts_json_file):
        """Test applying one opportunity by index."""
        result = CliRunner().invoke(main, ["apply", "--posts", str(posts_json_file), "-i", "0"])

        assert result.exit_code == 0, result.output
        linked = [content for content in _contents(posts_json_file).values() if "/blog/" in content]
        assert len(linked) <= 1

    def test_apply_requires_selection(self, posts_json_file):
        """Test that a selection option is mandatory."""
        result = CliRunner().invoke(main, ["apply", "--posts", str(posts_json_file)])
        assert result.exit_code == 2

    def test_apply_out_of_range(self, posts_json_file):
        """Test that an invalid index exits with status 1 and changes nothing."""
        before = posts_json_file.read_text(encoding="utf-8")
        result = CliRunner().invoke(main, ["apply", "--posts", str(posts_json_file), "--index", "99"])

        assert result.exit_code == 1
        assert "out of range" in result.output
        assert posts_json_file.read_text(encoding="utf-8") == before
