"""Service lifecycle: build the app and hand it to uvicorn."""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

import structlog
import uvicorn

from tableplane.daemon.app import create_app

if TYPE_CHECKING:
    from tableplane.runtime import Runtime

logger = structlog.get_logger()


def build_server(
    runtime: Runtime, *, host: str | None = None, port: int | None = None
) -> uvicorn.Server:
    """Uvicorn server for the runtime; host and port default to the config."""
    server_config = runtime.config.server
    uvicorn_config = uvicorn.Config(
        create_app(runtime),
        host=host or server_config.host,
        port=port or server_config.port,
        log_level="warning",  # Use structlog instead
        ws="none",
    )
    return uvicorn.Server(uvicorn_config)


async def run_server(runtime: Runtime, *, host: str | None = None, port: int | None = None) -> None:
    """Serve until uvicorn receives a shutdown signal."""
    server = build_server(runtime, host=host, port=port)
    logger.info(
        "server_starting",
        host=server.config.host,
        port=server.config.port,
        repo=str(runtime.repo.path),
    )
    try:
        await server.serve()
    finally:
        runtime.close()
        logger.info("server_stopped")


def serve(runtime: Runtime, *, host: str | None = None, port: int | None = None) -> None:
    asyncio.run(run_server(runtime, host=host, port=port))
