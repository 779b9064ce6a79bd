"""Shared fixtures for CLI tests."""

from __future__ import annotations

from pathlib import Path

import pytest
import yaml

from tests.helpers import MarkdownRepo


@pytest.fixture
def config_file(books_repo: MarkdownRepo, tmp_path: Path) -> Path:
    """tableplane.yaml for the sample library; the database lives outside the repository."""
    path = tmp_path / "tableplane.yaml"
    path.write_text(
        yaml.safe_dump(
            {
                "logging": {"level": "ERROR"},
                "repository": {"path": str(books_repo.path), "sub_path": books_repo.sub_path},
                "database": {"path": str(tmp_path / "cli-store" / "index.db")},
            }
        )
    )
    return path
