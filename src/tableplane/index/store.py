"""Document store over the SQLite index.

The store is bound to one indexing version; every read and write is
scoped to it except the explicit cross-version prune.
"""

from __future__ import annotations

import time
from collections.abc import Collection, Generator, Iterable
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Any

import structlog
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import col, select

from tableplane.config.constants import INDEXING_VERSION
from tableplane.core.errors import StoreError
from tableplane.index._internal.db import Database
from tableplane.index.models import ChangedFile, FileIndex, FileNode, IndexLock, IndexTracker

logger = structlog.get_logger()


@contextmanager
def _guard(operation: str) -> Generator[None, None, None]:
    try:
        yield
    except SQLAlchemyError as e:
        logger.error("store_operation_failed", operation=operation, error=str(e))
        raise StoreError.operation_failed(operation, str(e)) from e


class DocumentStore:
    """FileIndex, FileNode and IndexTracker collections for one indexing version."""

    def __init__(self, db: Database, indexing_version: str = INDEXING_VERSION) -> None:
        self.db = db
        self.indexing_version = indexing_version

    def create_all(self) -> None:
        with _guard("create_all"):
            self.db.create_all()

    # =========================================================================
    # Tracker
    # =========================================================================

    def get_tracker(self) -> IndexTracker | None:
        with _guard("get_tracker"), self.db.session() as session:
            return session.get(IndexTracker, self.indexing_version)

    def save_tracker(
        self,
        revision: str,
        changes: list[ChangedFile],
        failed: list[str] | None = None,
        date: datetime | None = None,
    ) -> None:
        with _guard("save_tracker"), self.db.immediate_transaction() as session:
            session.merge(
                IndexTracker(
                    indexing_version=self.indexing_version,
                    git_hash=revision,
                    changes=[c.to_dict() for c in changes],
                    failed=list(failed or []),
                    date=date or datetime.now(timezone.utc),
                )
            )

    # =========================================================================
    # Writes
    # =========================================================================

    def write_file(
        self,
        changed: ChangedFile,
        *,
        data: bool,
        record: dict[str, Any],
        nodes: list[tuple[str, str | None]],
        date: datetime | None = None,
    ) -> int:
        """Upsert the FileIndex and replace its FileNode set in one transaction.

        Returns the number of FileNode rows written.
        """
        date = date or datetime.now(timezone.utc)
        key = {
            "table_name": changed.table,
            "file": changed.file,
            "indexing_version": self.indexing_version,
        }
        with _guard("write_file"), self.db.bulk_writer() as writer:
            writer.upsert_many(
                FileIndex,
                [
                    {
                        **key,
                        "data": data,
                        "git_hash": changed.git_hash,
                        "sha256": changed.sha256,
                        "record": record,
                        "date": date,
                    }
                ],
                conflict_columns=["table_name", "file", "indexing_version"],
                update_columns=["data", "git_hash", "sha256", "record", "date"],
            )
            writer.delete_where(
                FileNode,
                col(FileNode.table_name) == changed.table,
                col(FileNode.file) == changed.file,
                col(FileNode.indexing_version) == self.indexing_version,
            )
            return writer.insert_many(
                FileNode,
                [{**key, "path": path, "value": value, "date": date} for path, value in nodes],
            )

    def delete_tables_except(self, tables: Collection[str]) -> int:
        """Delete rows of every table not in ``tables``; returns FileIndex rows removed."""
        with _guard("delete_tables_except"), self.db.bulk_writer() as writer:
            writer.delete_where(
                FileNode,
                col(FileNode.indexing_version) == self.indexing_version,
                col(FileNode.table_name).not_in(list(tables)),
            )
            return writer.delete_where(
                FileIndex,
                col(FileIndex.indexing_version) == self.indexing_version,
                col(FileIndex.table_name).not_in(list(tables)),
            )

    def delete_files_except(self, table: str, files: Collection[str]) -> int:
        """Delete rows of ``table`` whose file is not in ``files``."""
        with _guard("delete_files_except"), self.db.bulk_writer() as writer:
            writer.delete_where(
                FileNode,
                col(FileNode.indexing_version) == self.indexing_version,
                col(FileNode.table_name) == table,
                col(FileNode.file).not_in(list(files)),
            )
            return writer.delete_where(
                FileIndex,
                col(FileIndex.indexing_version) == self.indexing_version,
                col(FileIndex.table_name) == table,
                col(FileIndex.file).not_in(list(files)),
            )

    def delete_other_versions(self) -> int:
        """Drop records stamped with any other indexing version."""
        with _guard("delete_other_versions"), self.db.bulk_writer() as writer:
            writer.delete_where(FileNode, col(FileNode.indexing_version) != self.indexing_version)
            writer.delete_where(
                IndexTracker, col(IndexTracker.indexing_version) != self.indexing_version
            )
            return writer.delete_where(
                FileIndex, col(FileIndex.indexing_version) != self.indexing_version
            )

    def clear(self, table: str | None = None, file: str | None = None) -> int:
        """Delete indexed rows, optionally narrowed to a table or one file.

        Clearing everything also drops the tracker so the next run rebuilds.
        """
        if file is not None and table is None:
            raise ValueError("file requires table")
        index_filter = [col(FileIndex.indexing_version) == self.indexing_version]
        node_filter = [col(FileNode.indexing_version) == self.indexing_version]
        if table is not None:
            index_filter.append(col(FileIndex.table_name) == table)
            node_filter.append(col(FileNode.table_name) == table)
        if file is not None:
            index_filter.append(col(FileIndex.file) == file)
            node_filter.append(col(FileNode.file) == file)

        with _guard("clear"), self.db.bulk_writer() as writer:
            writer.delete_where(FileNode, *node_filter)
            removed = writer.delete_where(FileIndex, *index_filter)
            if table is None:
                writer.delete_where(
                    IndexTracker, col(IndexTracker.indexing_version) == self.indexing_version
                )
        logger.info("index_cleared", table=table, file=file, removed=removed)
        return removed

    # =========================================================================
    # Reads
    # =========================================================================

    def get_file_index(self, table: str, file: str) -> FileIndex | None:
        stmt = select(FileIndex).where(
            FileIndex.table_name == table,
            FileIndex.file == file,
            FileIndex.indexing_version == self.indexing_version,
        )
        with _guard("get_file_index"), self.db.session() as session:
            return session.exec(stmt).first()

    def find_file_indices(self, table: str, *, data_only: bool = False) -> list[FileIndex]:
        stmt = select(FileIndex).where(
            FileIndex.table_name == table,
            FileIndex.indexing_version == self.indexing_version,
        )
        if data_only:
            stmt = stmt.where(col(FileIndex.data).is_(True))
        with _guard("find_file_indices"), self.db.session() as session:
            return list(session.exec(stmt.order_by(col(FileIndex.file))).all())

    def tables(self) -> list[str]:
        stmt = (
            select(FileIndex.table_name)
            .where(FileIndex.indexing_version == self.indexing_version)
            .distinct()
            .order_by(col(FileIndex.table_name))
        )
        with _guard("tables"), self.db.session() as session:
            return list(session.exec(stmt).all())

    def files(self, table: str, *, data_only: bool = False) -> list[str]:
        stmt = select(FileIndex.file).where(
            FileIndex.table_name == table,
            FileIndex.indexing_version == self.indexing_version,
        )
        if data_only:
            stmt = stmt.where(col(FileIndex.data).is_(True))
        with _guard("files"), self.db.session() as session:
            return list(session.exec(stmt.distinct().order_by(col(FileIndex.file))).all())

    def paths(self, table: str) -> list[str]:
        stmt = (
            select(FileNode.path)
            .where(
                FileNode.table_name == table,
                FileNode.indexing_version == self.indexing_version,
            )
            .distinct()
            .order_by(col(FileNode.path))
        )
        with _guard("paths"), self.db.session() as session:
            return list(session.exec(stmt).all())

    def find_file_nodes(
        self,
        table: str,
        paths: Iterable[str] | None = None,
        *,
        value_exists: bool = True,
    ) -> list[FileNode]:
        stmt = select(FileNode).where(
            FileNode.table_name == table,
            FileNode.indexing_version == self.indexing_version,
        )
        if paths is not None:
            stmt = stmt.where(col(FileNode.path).in_(list(paths)))
        if value_exists:
            stmt = stmt.where(col(FileNode.value).is_not(None))
        stmt = stmt.order_by(col(FileNode.file), col(FileNode.path))
        with _guard("find_file_nodes"), self.db.session() as session:
            return list(session.exec(stmt).all())

    # =========================================================================
    # Advisory lock
    # =========================================================================

    def acquire_lock(self, name: str, owner: str, ttl_sec: float) -> None:
        """Take the named lock, or raise StoreError.lock_held if another owner has it.

        A lock older than ``ttl_sec`` is considered abandoned and taken over.
        """
        now = time.time()
        with _guard("acquire_lock"), self.db.immediate_transaction() as session:
            current = session.get(IndexLock, name)
            if current is not None and current.owner != owner:
                if now - current.acquired_at < ttl_sec:
                    raise StoreError.lock_held(name, current.owner)
                logger.warning("stale_lock_taken_over", name=name, previous_owner=current.owner)
            session.merge(IndexLock(name=name, owner=owner, acquired_at=now))

    def release_lock(self, name: str, owner: str) -> None:
        with _guard("release_lock"), self.db.immediate_transaction() as session:
            current = session.get(IndexLock, name)
            if current is not None and current.owner == owner:
                session.delete(current)
