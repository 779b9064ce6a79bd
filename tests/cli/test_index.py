"""Tests for tpl index command."""

from __future__ import annotations

import json
from pathlib import Path

from click.testing import CliRunner

from tableplane.cli.main import cli
from tests.helpers import MarkdownRepo

runner = CliRunner()


class TestIndexCommand:
    """tpl index."""

    def test_given_fresh_store_when_indexed_then_full_rebuild(self, config_file: Path) -> None:
        result = runner.invoke(cli, ["--config", str(config_file), "index", "--json"])

        assert result.exit_code == 0, result.output
        stats = json.loads(result.output)
        assert stats["full_rebuild"] is True
        assert stats["files_indexed"] == 4

    def test_given_indexed_store_when_rerun_then_up_to_date(self, config_file: Path) -> None:
        runner.invoke(cli, ["--config", str(config_file), "index"])

        result = runner.invoke(cli, ["--config", str(config_file), "index"])

        assert result.exit_code == 0
        assert "Up to date" in result.output

    def test_given_full_flag_when_indexed_then_summary_printed(self, config_file: Path) -> None:
        runner.invoke(cli, ["--config", str(config_file), "index"])

        result = runner.invoke(cli, ["--config", str(config_file), "index", "--full"])

        assert result.exit_code == 0
        assert "4 files indexed" in result.output

    def test_given_failing_file_when_indexed_then_non_zero_exit(
        self, config_file: Path, books_repo: MarkdownRepo
    ) -> None:
        (books_repo.root / "books" / "bad.md").write_bytes(b"# \xff\xfe\n")
        books_repo.commit("bad bytes")

        result = runner.invoke(cli, ["--config", str(config_file), "index"])

        assert result.exit_code == 1
        assert "books/bad.md" in result.output
        assert "1 file failed to index" in result.output

    def test_given_missing_config_when_indexed_then_error(self, tmp_path: Path) -> None:
        result = runner.invoke(cli, ["--config", str(tmp_path / "nope.yaml"), "index"])

        assert result.exit_code == 1
        assert "does not exist" in result.output

    def test_given_non_repository_when_indexed_then_error(self, tmp_path: Path) -> None:
        config = tmp_path / "tableplane.yaml"
        config.write_text(
            f"logging:\n  level: ERROR\nrepository:\n  path: {tmp_path / 'empty'}\n"
            f"database:\n  path: {tmp_path / 'db' / 'index.db'}\n"
        )
        (tmp_path / "empty").mkdir()

        result = runner.invoke(cli, ["--config", str(config), "index"])

        assert result.exit_code == 1
        assert "Error" in result.output
