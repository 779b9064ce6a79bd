"""Starlette application factory."""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

from starlette.applications import Starlette

from tableplane.core.errors import TablePlaneError
from tableplane.daemon.indexer import BackgroundIndexer
from tableplane.daemon.middleware import RequestIdMiddleware, handle_tableplane_error
from tableplane.daemon.routes import create_routes

if TYPE_CHECKING:
    from tableplane.runtime import Runtime


def create_app(runtime: Runtime, indexer: BackgroundIndexer | None = None) -> Starlette:
    """Create the Starlette application; the lifespan owns the background indexer."""
    if indexer is None:
        indexer = BackgroundIndexer(
            runtime.engine,
            interval_seconds=runtime.config.indexer.interval_sec,
        )

    @asynccontextmanager
    async def lifespan(_app: Starlette) -> AsyncIterator[None]:
        indexer.start()
        if runtime.config.server.index_on_start:
            indexer.trigger()
        try:
            yield
        finally:
            await indexer.stop()

    app = Starlette(
        routes=create_routes(runtime, indexer),
        lifespan=lifespan,
        exception_handlers={TablePlaneError: handle_tableplane_error},
    )
    app.state.runtime = runtime
    app.state.indexer = indexer

    app.add_middleware(RequestIdMiddleware)

    return app
