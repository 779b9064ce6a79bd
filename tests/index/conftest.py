"""Shared fixtures for index tests."""

from __future__ import annotations

import pytest

from tableplane.git import GitOps
from tableplane.index.ops import IndexEngine
from tableplane.index.store import DocumentStore
from tests.helpers import MarkdownRepo


@pytest.fixture
def engine(books_repo: MarkdownRepo, store: DocumentStore) -> IndexEngine:
    """Engine over the sample library with default settings."""
    return IndexEngine(store, GitOps(books_repo.path, books_repo.sub_path))
