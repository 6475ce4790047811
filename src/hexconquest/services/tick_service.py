"""Recurring simulation tick scheduler."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from datetime import datetime

from hexconquest.domain.tick import TickResult
from hexconquest.models.base import utc_now

logger = logging.getLogger(__name__)


class SimulationClock:
    """Background scheduler that runs one economy tick per interval.

    The tick itself (zone regeneration plus base maintenance) is supplied as
    an async callable, normally ``GameSession.run_tick``.  ``start`` and
    ``stop`` are idempotent; ``tick_now`` advances manually and shares the
    same lock as the loop so ticks never overlap.
    """

    MIN_INTERVAL_SECONDS = 0.1

    def __init__(
        self,
        tick: Callable[[], Awaitable[TickResult]],
        *,
        base_interval_seconds: float = 60.0,
        debug_multiplier: float = 1.0,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._tick = tick
        self._base_interval = max(base_interval_seconds, self.MIN_INTERVAL_SECONDS)
        self._debug_multiplier = max(debug_multiplier, 0.01)
        self._clock = clock
        self._task: asyncio.Task[None] | None = None
        self._stop_event = asyncio.Event()
        self._advance_lock = asyncio.Lock()
        self.tick_count = 0
        self.last_tick_at: datetime | None = None

    @property
    def interval_seconds(self) -> float:
        return max(self.MIN_INTERVAL_SECONDS, self._base_interval * self._debug_multiplier)

    @property
    def base_interval_seconds(self) -> float:
        return self._base_interval

    @property
    def debug_multiplier(self) -> float:
        return self._debug_multiplier

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def set_base_interval(self, seconds: float) -> None:
        self._base_interval = max(seconds, self.MIN_INTERVAL_SECONDS)

    def set_debug_multiplier(self, multiplier: float) -> None:
        self._debug_multiplier = max(multiplier, 0.01)

    def start(self) -> None:
        if self.running:
            return
        self._stop_event = asyncio.Event()
        loop = asyncio.get_running_loop()
        self._task = loop.create_task(self._run_loop(), name="hexconquest-tick-loop")

    async def stop(self) -> None:
        task = self._task
        if task is None:
            return
        self._stop_event.set()
        await task
        self._task = None

    async def tick_now(self, count: int = 1) -> list[TickResult]:
        """Run ``count`` ticks immediately.

        Raises:
            StoreFailure: If a tick cannot read the state it needs
        """
        results: list[TickResult] = []
        if count <= 0:
            return results
        async with self._advance_lock:
            for _ in range(count):
                results.append(await self._run_one())
        return results

    async def _run_loop(self) -> None:
        try:
            while not self._stop_event.is_set():
                try:
                    await asyncio.wait_for(self._stop_event.wait(), timeout=self.interval_seconds)
                    break
                except TimeoutError:
                    pass
                await self._run_cycle()
        finally:
            self._task = None

    async def _run_cycle(self) -> None:
        async with self._advance_lock:
            try:
                await self._run_one()
            except Exception:
                logger.exception("simulation tick failed; retrying next interval")

    async def _run_one(self) -> TickResult:
        result = await self._tick()
        self.tick_count += 1
        self.last_tick_at = self._clock()
        return result
