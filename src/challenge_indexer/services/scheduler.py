"""Periodic, single-flight driver for ingestion cycles.

The scheduler runs one cycle at startup and then fires at a fixed interval.
A fire that lands while a cycle is still running is skipped, so at most one
cycle is ever active and cycle-scoped state (the dedup window) needs no lock.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from enum import Enum
from typing import Any

# Configure logger for this module
logger = logging.getLogger(__name__)

Cycle = Callable[[], Awaitable[Any]]


class SchedulerState(Enum):
    """Scheduler states."""

    IDLE = "idle"
    CYCLING = "cycling"


class IngestionScheduler:
    """Drives ``cycle`` at startup and every ``interval_seconds`` afterwards.

    An interval of zero or less selects one-shot mode: :meth:`start` runs a
    single cycle and arms no timer.
    """

    def __init__(self, cycle: Cycle, interval_seconds: float) -> None:
        """Initialize the scheduler.

        Args:
            cycle: Coroutine function performing one fetch-and-project pass.
            interval_seconds: Delay between timer fires.
        """
        self._cycle = cycle
        self.interval_seconds = interval_seconds
        self.state = SchedulerState.IDLE
        self.completed_cycles = 0
        self.skipped_triggers = 0
        self.last_result: Any = None
        self._timer: asyncio.Task[None] | None = None
        self._in_flight: set[asyncio.Task[bool]] = set()
        self._stopping = asyncio.Event()

    @property
    def timer_armed(self) -> bool:
        return self._timer is not None and not self._timer.done()

    async def start(self) -> None:
        """Run the startup cycle, then arm the repeating timer if configured."""
        if self.timer_armed:
            return

        self._stopping.clear()
        await self.run_cycle()

        if self.interval_seconds <= 0:
            logger.info("Polling interval <= 0; ingestion runs once")
            return
        if not self._stopping.is_set():
            self._timer = asyncio.create_task(self._run_timer())

    async def stop(self) -> None:
        """Cancel the timer and wait for any in-flight cycle to finish."""
        self._stopping.set()
        if self._timer is not None:
            self._timer.cancel()
            try:
                await self._timer
            except asyncio.CancelledError:
                pass
            self._timer = None

        if self._in_flight:
            await asyncio.gather(*self._in_flight, return_exceptions=True)

    def trigger(self) -> asyncio.Task[bool] | None:
        """Start a cycle in the background unless one is already running."""
        if self.state is SchedulerState.CYCLING:
            self.skipped_triggers += 1
            logger.debug("Ingestion cycle still running; skipping trigger")
            return None

        task = asyncio.create_task(self.run_cycle())
        self._in_flight.add(task)
        task.add_done_callback(self._in_flight.discard)
        return task

    async def run_cycle(self) -> bool:
        """Run one cycle now; return False if another cycle was active."""
        if self.state is SchedulerState.CYCLING:
            self.skipped_triggers += 1
            logger.debug("Ingestion cycle still running; skipping")
            return False

        self.state = SchedulerState.CYCLING
        try:
            self.last_result = await self._cycle()
            self.completed_cycles += 1
        except Exception as exc:
            logger.error("Ingestion cycle failed: %s", exc, exc_info=True)
        finally:
            self.state = SchedulerState.IDLE
        return True

    async def _run_timer(self) -> None:
        while not self._stopping.is_set():
            try:
                await asyncio.wait_for(self._stopping.wait(), timeout=self.interval_seconds)
            except TimeoutError:
                self.trigger()
