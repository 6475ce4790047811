"""Tests for the recurring simulation tick scheduler."""

from __future__ import annotations

import asyncio

import pytest

from hexconquest.domain.errors import StoreFailure
from hexconquest.domain.tick import TickResult
from hexconquest.services.tick_service import SimulationClock


class CountingTick:
    def __init__(self, fail: bool = False) -> None:
        self.calls = 0
        self.fail = fail

    async def __call__(self) -> TickResult:
        self.calls += 1
        if self.fail:
            raise StoreFailure("zones unavailable")
        return TickResult()


def test_interval_honours_debug_multiplier(clock):
    ticker = SimulationClock(CountingTick(), base_interval_seconds=60, debug_multiplier=0.5, clock=clock)
    assert ticker.interval_seconds == 30

    ticker.set_base_interval(1)
    ticker.set_debug_multiplier(0.001)
    assert ticker.debug_multiplier == 0.01
    assert ticker.interval_seconds == SimulationClock.MIN_INTERVAL_SECONDS


@pytest.mark.asyncio
async def test_tick_now_runs_requested_ticks(clock):
    tick = CountingTick()
    ticker = SimulationClock(tick, clock=clock)

    results = await ticker.tick_now(3)
    assert len(results) == 3
    assert tick.calls == 3
    assert ticker.tick_count == 3
    assert ticker.last_tick_at == clock.now
    assert await ticker.tick_now(0) == []


@pytest.mark.asyncio
async def test_tick_now_propagates_failures(clock):
    ticker = SimulationClock(CountingTick(fail=True), clock=clock)
    with pytest.raises(StoreFailure):
        await ticker.tick_now()
    assert ticker.tick_count == 0


@pytest.mark.asyncio
async def test_loop_runs_until_stopped(clock):
    tick = CountingTick()
    ticker = SimulationClock(tick, base_interval_seconds=0.1, clock=clock)

    ticker.start()
    ticker.start()
    assert ticker.running
    await asyncio.sleep(0.35)
    await ticker.stop()

    assert not ticker.running
    assert tick.calls >= 2
    await ticker.stop()


@pytest.mark.asyncio
async def test_loop_survives_failing_ticks(clock):
    tick = CountingTick(fail=True)
    ticker = SimulationClock(tick, base_interval_seconds=0.1, clock=clock)

    ticker.start()
    await asyncio.sleep(0.35)
    assert ticker.running
    await ticker.stop()
    assert tick.calls >= 2
    assert ticker.tick_count == 0


@pytest.mark.asyncio
async def test_loop_survives_unexpected_errors(clock):
    calls = []

    async def broken_tick() -> TickResult:
        calls.append(clock.now)
        raise ValueError("bad zone payload")

    ticker = SimulationClock(broken_tick, base_interval_seconds=0.1, clock=clock)
    ticker.start()
    await asyncio.sleep(0.35)
    assert ticker.running
    await ticker.stop()
    assert len(calls) >= 2
