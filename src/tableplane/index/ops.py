"""Indexing runs: change determination, per-file indexing and pruning.

Concurrency model:
- run_lock: only ONE run per engine at a time (in-process)
- index_lock row: only ONE run per store across processes (advisory, TTL'd)
- per-file work is independent and may fan out to a thread pool
"""

from __future__ import annotations

import hashlib
import os
import threading
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from typing import Any
from uuid import uuid4

import structlog

from tableplane.config.constants import INDEX_LOCK_NAME
from tableplane.core.errors import ConfigError, StoreError
from tableplane.git.ops import GitOps
from tableplane.index.flatten import flatten
from tableplane.index.layout import TableLayout, is_data_file
from tableplane.index.models import ChangedFile
from tableplane.index.parser import MarkdownParser
from tableplane.index.store import DocumentStore

logger = structlog.get_logger()


def split_path(path: str) -> tuple[str, str]:
    """Split ``<table>/<file>``; any other shape is a fatal layout error."""
    parts = path.split("/")
    if len(parts) != 2 or not all(parts):
        raise ConfigError.malformed_path(path)
    return parts[0], parts[1]


@dataclass
class IndexPlan:
    """Files one run will (re)index."""

    revision: str
    files: list[tuple[str, str]]
    full_rebuild: bool = False
    previous_revision: str | None = None
    retried: list[str] = field(default_factory=list)
    deleted: list[str] = field(default_factory=list)

    @property
    def no_op(self) -> bool:
        return not self.full_rebuild and not self.files and not self.deleted


@dataclass
class FileFailure:
    """A file whose indexing raised; re-queued on the next run."""

    table: str
    file: str
    error: str

    @property
    def key(self) -> str:
        return f"{self.table}/{self.file}"


@dataclass
class FileOutcome:
    """Result of indexing one file."""

    table: str
    file: str
    changed: ChangedFile | None = None
    nodes_written: int = 0
    skipped: bool = False
    failure: FileFailure | None = None


@dataclass
class IndexStats:
    """Statistics from an indexing run."""

    revision: str
    no_op: bool = False
    full_rebuild: bool = False
    files_indexed: int = 0
    files_skipped: int = 0
    files_failed: int = 0
    nodes_written: int = 0
    files_pruned: int = 0
    duration_seconds: float = 0.0
    failures: list[FileFailure] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["duration_seconds"] = round(self.duration_seconds, 3)
        return data


class IndexEngine:
    """Incrementally indexes a git-backed markdown database into a DocumentStore.

    A run diffs the tracker revision against HEAD, indexes each changed
    ``<table>/<file>``, prunes rows for tables and files that no longer
    exist, then advances the tracker. With ``isolate_failures`` a failing
    file is logged, recorded on the tracker and retried by the next run
    instead of aborting the batch.
    """

    def __init__(
        self,
        store: DocumentStore,
        repo: GitOps,
        layout: TableLayout | None = None,
        parser: MarkdownParser | None = None,
        *,
        max_workers: int = 1,
        isolate_failures: bool = True,
        skip_unchanged: bool = False,
        lock_ttl_sec: float = 600.0,
    ) -> None:
        self.store = store
        self.repo = repo
        self.layout = layout or TableLayout(repo.root)
        self.parser = parser or MarkdownParser()
        self._max_workers = max(1, max_workers)
        self._isolate_failures = isolate_failures
        self._skip_unchanged = skip_unchanged
        self._lock_ttl_sec = lock_ttl_sec
        self._owner = f"{os.getpid()}-{uuid4().hex[:8]}"
        self._run_lock = threading.Lock()

    # =========================================================================
    # Change determination
    # =========================================================================

    def plan(self, *, full: bool = False) -> IndexPlan:
        """Work out which files this run must index. Performs no writes."""
        revision = self.repo.current_revision()
        tracker = None if full else self.store.get_tracker()

        if tracker is None:
            files = [
                (table, file)
                for table in self.layout.tables()
                for file in self.layout.table_files(table)
            ]
            return IndexPlan(revision=revision, files=files, full_rebuild=True)

        paths: list[str] = []
        deleted: list[str] = []
        if tracker.git_hash != revision:
            paths, deleted = self.repo.diff_paths(tracker.git_hash, revision)
        keys = [split_path(path) for path in paths]

        retried = [key for key in tracker.failed if key not in paths]
        for key in retried:
            table, file = split_path(key)
            if self.repo.file_path(table, file).is_file():
                keys.append((table, file))

        files = []
        for table, file in keys:
            if table.startswith(".") or file.startswith("."):
                logger.debug("hidden_path_skipped", table=table, file=file)
                continue
            files.append((table, file))
        return IndexPlan(
            revision=revision,
            files=files,
            previous_revision=tracker.git_hash,
            retried=retried,
            deleted=deleted,
        )

    # =========================================================================
    # Runs
    # =========================================================================

    def run(self, *, full: bool = False) -> IndexStats:
        """Run one indexing pass.

        Raises:
            StoreError: If another run holds the lock.
            ConfigError: If a changed path is not ``<table>/<file>``.
        """
        if not self._run_lock.acquire(blocking=False):
            raise StoreError.lock_held(INDEX_LOCK_NAME, self._owner)
        try:
            plan = self.plan(full=full)
            if plan.no_op:
                logger.info("index_up_to_date", revision=plan.revision)
                return IndexStats(revision=plan.revision, no_op=True)

            self.store.acquire_lock(INDEX_LOCK_NAME, self._owner, self._lock_ttl_sec)
            try:
                # Another process may have finished a run while we waited.
                plan = self.plan(full=full)
                if plan.no_op:
                    return IndexStats(revision=plan.revision, no_op=True)
                return self._execute(plan)
            finally:
                self.store.release_lock(INDEX_LOCK_NAME, self._owner)
        finally:
            self._run_lock.release()

    def _execute(self, plan: IndexPlan) -> IndexStats:
        start = time.monotonic()
        logger.info(
            "index_run_started",
            revision=plan.revision,
            previous_revision=plan.previous_revision,
            files=len(plan.files),
            full_rebuild=plan.full_rebuild,
            retried=len(plan.retried),
            deleted=len(plan.deleted),
        )
        if plan.full_rebuild:
            removed = self.store.delete_other_versions()
            if removed:
                logger.info("other_versions_pruned", files=removed)

        outcomes = self._index_files(plan.files)
        pruned = self.prune()

        stats = IndexStats(
            revision=plan.revision,
            full_rebuild=plan.full_rebuild,
            files_pruned=pruned,
        )
        changes: list[ChangedFile] = []
        for outcome in outcomes:
            if outcome.failure is not None:
                stats.files_failed += 1
                stats.failures.append(outcome.failure)
                continue
            if outcome.changed is not None:
                changes.append(outcome.changed)
            if outcome.skipped:
                stats.files_skipped += 1
            else:
                stats.files_indexed += 1
                stats.nodes_written += outcome.nodes_written

        self.store.save_tracker(
            plan.revision,
            changes,
            failed=[failure.key for failure in stats.failures],
        )
        stats.duration_seconds = time.monotonic() - start
        logger.info(
            "index_run_completed",
            revision=plan.revision,
            indexed=stats.files_indexed,
            skipped=stats.files_skipped,
            failed=stats.files_failed,
            pruned=stats.files_pruned,
            nodes=stats.nodes_written,
            duration_sec=round(stats.duration_seconds, 3),
        )
        return stats

    def _index_files(self, files: list[tuple[str, str]]) -> list[FileOutcome]:
        worker = self._index_isolated if self._isolate_failures else self._index_pair
        if self._max_workers == 1 or len(files) < 2:
            return [worker(pair) for pair in files]
        with ThreadPoolExecutor(
            max_workers=self._max_workers,
            thread_name_prefix="tableplane-indexer",
        ) as pool:
            return list(pool.map(worker, files))

    def _index_pair(self, pair: tuple[str, str]) -> FileOutcome:
        return self.index_file(*pair)

    def _index_isolated(self, pair: tuple[str, str]) -> FileOutcome:
        table, file = pair
        try:
            return self.index_file(table, file)
        except Exception as e:
            logger.error("index_file_failed", table=table, file=file, error=str(e))
            return FileOutcome(table, file, failure=FileFailure(table, file, str(e)))

    def index_file(self, table: str, file: str) -> FileOutcome:
        """Hash, parse and store one file, replacing its facts wholesale."""
        data = self.repo.file_bytes(table, file)
        changed = ChangedFile(
            table=table,
            file=file,
            git_hash=GitOps.hash_bytes(data),
            sha256=hashlib.sha256(data).hexdigest(),
        )

        if self._skip_unchanged:
            existing = self.store.get_file_index(table, file)
            if (
                existing is not None
                and existing.sha256 == changed.sha256
                and existing.git_hash == changed.git_hash
            ):
                logger.debug("index_file_unchanged", table=table, file=file)
                return FileOutcome(table, file, changed=changed, skipped=True)

        record = self.parser.parse_bytes(data)
        is_data = is_data_file(file)
        nodes = flatten(self.parser.tree(record)) if is_data else []
        written = self.store.write_file(
            changed,
            data=is_data,
            record=record,
            nodes=nodes,
            date=datetime.now(timezone.utc),
        )
        logger.debug("index_file_written", table=table, file=file, data=is_data, nodes=written)
        return FileOutcome(table, file, changed=changed, nodes_written=written)

    # =========================================================================
    # Pruning
    # =========================================================================

    def prune(self) -> int:
        """Delete rows for tables and files missing from the working tree."""
        live_tables = self.layout.tables()
        removed = self.store.delete_tables_except(live_tables)
        for table in sorted(set(live_tables) & set(self.store.tables())):
            removed += self.store.delete_files_except(table, self.layout.table_files(table))
        if removed:
            logger.info("index_pruned", files=removed)
        return removed
