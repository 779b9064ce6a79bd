"""Repository client - revision, diff and file facts for the indexer."""

from __future__ import annotations

from pathlib import Path

import pygit2

from tableplane.config.constants import MARKDOWN_SUFFIX
from tableplane.core.errors import NotFoundError
from tableplane.git.errors import GitError, NotARepositoryError, RefNotFoundError


class GitOps:
    """Owns pygit2.Repository and answers the questions indexing asks.

    Paths handed out and accepted are relative to the configured sub-path,
    so a markdown document always reads as ``<table>/<file>``.
    """

    def __init__(self, repo_path: Path | str, sub_path: str = "") -> None:
        self._path = Path(repo_path)
        try:
            self._repo = pygit2.Repository(str(self._path))
        except pygit2.GitError as e:
            raise NotARepositoryError(str(self._path)) from e
        if self._repo.workdir is None:
            raise NotARepositoryError(f"{self._path} (bare repository)")
        self._sub_path = sub_path.strip("/")

    @property
    def repo(self) -> pygit2.Repository:
        return self._repo

    @property
    def path(self) -> Path:
        return Path(self._repo.workdir)

    @property
    def root(self) -> Path:
        """Directory whose subdirectories are tables."""
        return self.path / self._sub_path if self._sub_path else self.path

    def current_revision(self) -> str:
        if self._repo.head_is_unborn:
            raise RefNotFoundError("HEAD")
        return str(self._repo.head.peel(pygit2.Commit).id)

    def _commit(self, rev: str) -> pygit2.Commit:
        try:
            obj = self._repo.revparse_single(rev)
        except (KeyError, ValueError, pygit2.GitError) as e:
            raise RefNotFoundError(rev) from e
        try:
            return obj.peel(pygit2.Commit)
        except (ValueError, pygit2.GitError) as e:
            raise RefNotFoundError(rev) from e

    def changed_paths(
        self,
        since: str,
        until: str = "HEAD",
        *,
        include_deleted: bool = False,
    ) -> list[str]:
        """Markdown paths that differ between two revisions.

        Paths outside the sub-path are dropped and the rest are returned
        relative to it. Deletions are left out unless asked for; renames
        appear as their new path.
        """
        changed, deleted = self.diff_paths(since, until)
        if include_deleted:
            return sorted(set(changed) | set(deleted))
        return changed

    def diff_paths(self, since: str, until: str = "HEAD") -> tuple[list[str], list[str]]:
        """Markdown paths between two revisions, split into (present, deleted)."""
        old = self._commit(since)
        new = self._commit(until)
        try:
            diff = self._repo.diff(old.tree, new.tree)
        except pygit2.GitError as e:
            raise GitError(f"Cannot diff {since}..{until}: {e}") from e

        prefix = f"{self._sub_path}/" if self._sub_path else ""
        changed: set[str] = set()
        deleted: set[str] = set()
        for delta in diff.deltas:
            is_delete = delta.status_char() == "D"
            path = delta.old_file.path if is_delete else delta.new_file.path
            if not path.endswith(MARKDOWN_SUFFIX) or not path.startswith(prefix):
                continue
            (deleted if is_delete else changed).add(path[len(prefix) :])
        return sorted(changed), sorted(deleted - changed)

    def file_path(self, table: str, file: str) -> Path:
        return self.root / table / file

    def file_bytes(self, table: str, file: str) -> bytes:
        path = self.file_path(table, file)
        try:
            return path.read_bytes()
        except (FileNotFoundError, IsADirectoryError, NotADirectoryError) as e:
            raise NotFoundError.file_missing(table, file) from e

    def blob_hash(self, table: str, file: str) -> str:
        """Git blob id of the working-tree file, as ``git hash-object`` reports it."""
        return self.hash_bytes(self.file_bytes(table, file))

    @staticmethod
    def hash_bytes(data: bytes) -> str:
        return str(pygit2.hash(data))
