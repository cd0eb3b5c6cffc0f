"""Tests for the single-flight ingestion scheduler."""

from __future__ import annotations

import asyncio
from unittest.mock import AsyncMock

import pytest

from challenge_indexer.services.scheduler import IngestionScheduler, SchedulerState


class BlockingCycle:
    """Cycle that parks until released, counting entries."""

    def __init__(self) -> None:
        self.started = asyncio.Event()
        self.release = asyncio.Event()
        self.calls = 0
        self.active = 0
        self.max_active = 0

    async def __call__(self) -> str:
        self.calls += 1
        self.active += 1
        self.max_active = max(self.max_active, self.active)
        self.started.set()
        try:
            await self.release.wait()
        finally:
            self.active -= 1
        return "done"


@pytest.mark.asyncio
async def test_start_runs_startup_cycle_and_arms_timer() -> None:
    cycle = AsyncMock(return_value="report")
    scheduler = IngestionScheduler(cycle, interval_seconds=60)

    await scheduler.start()
    try:
        cycle.assert_awaited_once()
        assert scheduler.completed_cycles == 1
        assert scheduler.last_result == "report"
        assert scheduler.timer_armed is True
        assert scheduler.state is SchedulerState.IDLE
    finally:
        await scheduler.stop()

    assert scheduler.timer_armed is False


@pytest.mark.asyncio
@pytest.mark.parametrize("interval", [0, -5])
async def test_non_positive_interval_runs_once(interval: float) -> None:
    cycle = AsyncMock()
    scheduler = IngestionScheduler(cycle, interval_seconds=interval)

    await scheduler.start()

    cycle.assert_awaited_once()
    assert scheduler.timer_armed is False
    await scheduler.stop()


@pytest.mark.asyncio
async def test_start_twice_does_not_rearm() -> None:
    cycle = AsyncMock()
    scheduler = IngestionScheduler(cycle, interval_seconds=60)

    await scheduler.start()
    await scheduler.start()
    try:
        assert cycle.await_count == 1
    finally:
        await scheduler.stop()


@pytest.mark.asyncio
async def test_timer_fires_repeatedly() -> None:
    cycle = AsyncMock()
    scheduler = IngestionScheduler(cycle, interval_seconds=0.01)

    await scheduler.start()
    try:
        for _ in range(200):
            if scheduler.completed_cycles >= 3:
                break
            await asyncio.sleep(0.01)
    finally:
        await scheduler.stop()

    assert scheduler.completed_cycles >= 3


@pytest.mark.asyncio
async def test_trigger_while_cycling_is_skipped() -> None:
    cycle = BlockingCycle()
    scheduler = IngestionScheduler(cycle, interval_seconds=0)

    task = scheduler.trigger()
    assert task is not None
    await cycle.started.wait()
    assert scheduler.state is SchedulerState.CYCLING

    assert scheduler.trigger() is None
    assert scheduler.trigger() is None
    assert scheduler.skipped_triggers == 2

    cycle.release.set()
    assert await task is True
    assert cycle.calls == 1
    assert cycle.max_active == 1
    assert scheduler.state is SchedulerState.IDLE


@pytest.mark.asyncio
async def test_run_cycle_refuses_to_overlap() -> None:
    cycle = BlockingCycle()
    scheduler = IngestionScheduler(cycle, interval_seconds=0)

    first = asyncio.create_task(scheduler.run_cycle())
    await cycle.started.wait()

    assert await scheduler.run_cycle() is False

    cycle.release.set()
    assert await first is True
    assert cycle.calls == 1


@pytest.mark.asyncio
async def test_stop_waits_for_in_flight_cycle() -> None:
    cycle = BlockingCycle()
    scheduler = IngestionScheduler(cycle, interval_seconds=0)

    task = scheduler.trigger()
    await cycle.started.wait()

    stopper = asyncio.create_task(scheduler.stop())
    await asyncio.sleep(0)
    assert not stopper.done()

    cycle.release.set()
    await stopper
    assert task.done()
    assert scheduler.completed_cycles == 1


@pytest.mark.asyncio
async def test_failing_cycle_returns_to_idle() -> None:
    cycle = AsyncMock(side_effect=[RuntimeError("boom"), "ok"])
    scheduler = IngestionScheduler(cycle, interval_seconds=0)

    assert await scheduler.run_cycle() is True
    assert scheduler.state is SchedulerState.IDLE
    assert scheduler.completed_cycles == 0

    assert await scheduler.run_cycle() is True
    assert scheduler.completed_cycles == 1
    assert scheduler.last_result == "ok"


@pytest.mark.asyncio
async def test_no_timer_fires_after_stop() -> None:
    cycle = AsyncMock()
    scheduler = IngestionScheduler(cycle, interval_seconds=0.01)

    await scheduler.start()
    await scheduler.stop()
    calls = cycle.await_count

    await asyncio.sleep(0.05)

    assert cycle.await_count == calls
