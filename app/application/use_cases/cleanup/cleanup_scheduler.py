"""Periodic eviction of inactive files.

One sweep runs immediately on start(), then one per interval. A tick that
fires while a sweep is still running is skipped with a warning: at most
one sweep is in flight at any time and ticks are never queued.
"""

from __future__ import annotations

import asyncio
import logging
import time
from enum import Enum
from typing import TYPE_CHECKING

from app.application.dtos.storage import CleanupResult

if TYPE_CHECKING:
    from app.application.services.file_service import FileService

logger = logging.getLogger(__name__)


class SchedulerState(str, Enum):
    """Sweep state of the scheduler."""

    IDLE = "idle"
    RUNNING = "running"


class CleanupScheduler:
    """Recurring, non-overlapping timer around FileService.cleanup_inactive_files."""

    def __init__(
        self,
        file_service: "FileService",
        interval_seconds: float,
        inactivity_period: str,
    ) -> None:
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be positive")
        self._file_service = file_service
        self.interval_seconds = interval_seconds
        self.inactivity_period = inactivity_period
        self.state = SchedulerState.IDLE
        self._timer: asyncio.Task[None] | None = None
        self._sweeps: set[asyncio.Task[CleanupResult | None]] = set()

    @property
    def is_running(self) -> bool:
        """True while a sweep is in flight."""
        return self.state is SchedulerState.RUNNING

    @property
    def is_armed(self) -> bool:
        """True while the recurring timer is active."""
        return self._timer is not None and not self._timer.done()

    async def start(self) -> None:
        """Run one sweep now, then arm the recurring timer (replacing any existing one)."""
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
        await self.run_cleanup()
        self._timer = asyncio.create_task(self._tick_loop(), name="cleanup-timer")
        logger.info("Cleanup scheduler started (every %ss)", self.interval_seconds)

    def stop(self) -> None:
        """Cancel the timer. A sweep already in progress runs to completion."""
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
            logger.info("Cleanup scheduler stopped")

    async def wait_for_sweeps(self) -> None:
        """Wait for sweeps started by the timer to finish."""
        if self._sweeps:
            await asyncio.gather(*self._sweeps, return_exceptions=True)

    async def _tick_loop(self) -> None:
        while True:
            await asyncio.sleep(self.interval_seconds)
            self.tick()

    def tick(self) -> None:
        """Timer callback: start a sweep in the background unless one is running."""
        if self.is_running:
            logger.warning("Previous cleanup job still running - skipping this interval")
            return
        task = asyncio.create_task(self.run_cleanup(), name="cleanup-sweep")
        self._sweeps.add(task)
        task.add_done_callback(self._sweeps.discard)

    async def run_cleanup(self) -> CleanupResult | None:
        """Run one sweep. Returns None if skipped (already running) or failed."""
        if self.is_running:
            logger.warning("Cleanup already in progress")
            return None

        self.state = SchedulerState.RUNNING
        started = time.perf_counter()
        try:
            logger.info("Starting cleanup job...")
            result = await self._file_service.cleanup_inactive_files(self.inactivity_period)
            duration = time.perf_counter() - started
            logger.info(
                "Cleanup job completed in %.3fs: deleted=%s errors=%s",
                duration,
                result.deleted_count,
                result.error_count,
            )
            if result.errors:
                logger.debug("Cleanup errors: %s", result.to_dict()["errors"])
            return result
        except Exception as e:
            logger.exception(
                "Cleanup job failed after %.3fs: %s", time.perf_counter() - started, e
            )
            return None
        finally:
            self.state = SchedulerState.IDLE
