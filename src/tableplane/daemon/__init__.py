"""HTTP service: Starlette app, background indexer and uvicorn lifecycle."""

from tableplane.daemon.app import create_app
from tableplane.daemon.indexer import BackgroundIndexer, IndexerState, IndexerStatus
from tableplane.daemon.lifecycle import build_server, run_server, serve

__all__ = [
    "BackgroundIndexer",
    "IndexerState",
    "IndexerStatus",
    "build_server",
    "create_app",
    "run_server",
    "serve",
]
