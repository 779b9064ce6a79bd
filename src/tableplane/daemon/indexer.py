"""Background indexer: index runs off the event loop, optionally on a schedule."""

from __future__ import annotations

import asyncio
import contextlib
from collections.abc import Coroutine
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from enum import Enum
from functools import partial
from typing import TYPE_CHECKING, Any

import structlog

if TYPE_CHECKING:
    from tableplane.index.ops import IndexEngine, IndexStats

logger = structlog.get_logger()


class IndexerState(Enum):
    """Background indexer state."""

    IDLE = "idle"
    INDEXING = "indexing"
    STOPPING = "stopping"
    STOPPED = "stopped"


@dataclass
class IndexerStatus:
    """Current indexer status."""

    state: IndexerState
    runs: int
    last_stats: IndexStats | None = None
    last_error: str | None = None


@dataclass
class BackgroundIndexer:
    """
    Runs IndexEngine passes in a single worker thread.

    Design:
    - HTTP server runs in main asyncio loop
    - Each run is submitted to a one-thread executor, so runs never overlap
    - With interval_seconds > 0 a loop triggers a run periodically
    """

    engine: IndexEngine
    interval_seconds: float = 0.0

    _state: IndexerState = field(default=IndexerState.IDLE, init=False)
    _executor: ThreadPoolExecutor | None = field(default=None, init=False)
    _tasks: set[asyncio.Task[None]] = field(default_factory=set, init=False)
    _runs: int = field(default=0, init=False)
    _last_stats: IndexStats | None = field(default=None, init=False)
    _last_error: str | None = field(default=None, init=False)

    def start(self) -> None:
        """Start the worker, and the periodic loop when an interval is set."""
        if self._executor is not None:
            return
        self._executor = ThreadPoolExecutor(
            max_workers=1,
            thread_name_prefix="tableplane-indexer",
        )
        self._state = IndexerState.IDLE
        if self.interval_seconds > 0:
            self._spawn(self._periodic())
        logger.info("background_indexer_started", interval_sec=self.interval_seconds)

    async def stop(self) -> None:
        """Stop the background indexer gracefully."""
        self._state = IndexerState.STOPPING

        for task in list(self._tasks):
            task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await task

        if self._executor is not None:
            self._executor.shutdown(wait=True)
            self._executor = None

        self._state = IndexerState.STOPPED
        logger.info("background_indexer_stopped")

    def trigger(self, *, full: bool = False) -> None:
        """Start a run without waiting for it; failures are logged."""
        self._spawn(self._run_logged(full=full))

    async def run_once(self, *, full: bool = False) -> IndexStats:
        """Run one pass and return its stats; errors propagate to the caller."""
        loop = asyncio.get_running_loop()
        self._state = IndexerState.INDEXING
        try:
            stats = await loop.run_in_executor(self._executor, partial(self.engine.run, full=full))
        except Exception as e:
            self._last_error = str(e)
            raise
        finally:
            if self._state is IndexerState.INDEXING:
                self._state = IndexerState.IDLE
        self._runs += 1
        self._last_stats = stats
        self._last_error = None
        return stats

    async def _run_logged(self, *, full: bool = False) -> None:
        try:
            await self.run_once(full=full)
        except Exception as e:
            logger.error("indexing_failed", error=str(e))

    async def _periodic(self) -> None:
        while True:
            await asyncio.sleep(self.interval_seconds)
            await self._run_logged()

    def _spawn(self, coro: Coroutine[Any, Any, None]) -> None:
        task = asyncio.get_running_loop().create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    @property
    def status(self) -> IndexerStatus:
        """Get current indexer status."""
        return IndexerStatus(
            state=self._state,
            runs=self._runs,
            last_stats=self._last_stats,
            last_error=self._last_error,
        )
