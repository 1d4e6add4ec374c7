"""Periodic pool refresh.

Runs PoolCache.refresh_all() on a fixed interval in one background task.
A failing cycle is logged and the loop keeps going; the previous snapshot
stays published until a later cycle succeeds.
"""

from __future__ import annotations

import asyncio

import structlog

from aggregator.constants import DEFAULT_REFRESH_INTERVAL
from aggregator.pools.cache import PoolCache

logger = structlog.get_logger()


class RefreshScheduler:
    """Background task calling refresh_all() every `interval` seconds."""

    def __init__(self, cache: PoolCache, interval: float = DEFAULT_REFRESH_INTERVAL) -> None:
        if interval <= 0:
            raise ValueError("Refresh interval must be positive")
        self._cache = cache
        self._interval = interval
        self._task: asyncio.Task[None] | None = None
        self._cycles = 0

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    @property
    def cycles(self) -> int:
        """Completed refresh cycles, successful or not."""
        return self._cycles

    async def _run_loop(self) -> None:
        logger.info("refresh_scheduler_started", interval=self._interval)
        while True:
            await asyncio.sleep(self._interval)
            try:
                await self._cache.refresh_all()
            except Exception:
                logger.exception("scheduled_refresh_failed")
            self._cycles += 1

    def start(self) -> None:
        """Start the loop on the running event loop. No-op if already running."""
        if self.is_running:
            return
        self._task = asyncio.create_task(self._run_loop(), name="pool-refresh")

    async def stop(self) -> None:
        """Cancel the loop and wait for it to finish."""
        task = self._task
        if task is None:
            return
        self._task = None
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
        logger.info("refresh_scheduler_stopped", cycles=self._cycles)


__all__ = ["RefreshScheduler"]
