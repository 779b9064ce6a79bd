"""Wiring: one explicitly constructed object graph per process."""

from __future__ import annotations

from dataclasses import dataclass

import structlog

from tableplane.config.models import TablePlaneConfig
from tableplane.git.ops import GitOps
from tableplane.index._internal.db import Database
from tableplane.index.layout import TableLayout
from tableplane.index.ops import IndexEngine
from tableplane.index.parser import MarkdownParser
from tableplane.index.store import DocumentStore
from tableplane.query.ops import QueryService

logger = structlog.get_logger()


@dataclass
class Runtime:
    """Store, repository client, engine and queries built from one config."""

    config: TablePlaneConfig
    db: Database
    store: DocumentStore
    repo: GitOps
    layout: TableLayout
    engine: IndexEngine
    queries: QueryService

    @classmethod
    def from_config(cls, config: TablePlaneConfig) -> Runtime:
        db = Database(
            config.db_path,
            max_retries=config.database.max_retries,
            retry_base_delay=config.database.retry_base_delay_sec,
            busy_timeout_ms=config.database.busy_timeout_ms,
        )
        store = DocumentStore(db, config.indexer.indexing_version)
        store.create_all()

        repo = GitOps(config.repo_root, config.repository.sub_path)
        layout = TableLayout(repo.root)
        parser = MarkdownParser()
        engine = IndexEngine(
            store,
            repo,
            layout,
            parser,
            max_workers=config.indexer.max_workers,
            isolate_failures=config.indexer.isolate_failures,
            skip_unchanged=config.indexer.skip_unchanged,
            lock_ttl_sec=config.indexer.lock_ttl_sec,
        )
        logger.debug(
            "runtime_ready",
            repo=str(repo.path),
            root=str(layout.root),
            db=str(config.db_path),
            indexing_version=store.indexing_version,
        )
        return cls(
            config=config,
            db=db,
            store=store,
            repo=repo,
            layout=layout,
            engine=engine,
            queries=QueryService(store, layout, parser),
        )

    def close(self) -> None:
        """Checkpoint the WAL and release pooled connections."""
        self.db.checkpoint()
        self.db.engine.dispose()
