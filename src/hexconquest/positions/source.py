"""In-process position source fed by pushed fixes."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from dataclasses import replace
from datetime import datetime, timedelta

from hexconquest.domain.errors import PositionTimeout, PositionUnavailable
from hexconquest.domain.models import PositionFix
from hexconquest.interfaces.position import ErrorCallback, PositionCallback
from hexconquest.models.base import as_utc, utc_now

logger = logging.getLogger(__name__)


class PushPositionSource:
    """Position source for clients that report their own location.

    The HTTP layer calls :meth:`publish` with every fix the device reports
    (and :meth:`fail` with geolocation errors).  ``get_once`` answers from a
    cached fix while it is younger than ``maximum_age``, otherwise waits for
    the next published fix up to ``timeout_seconds``.
    """

    def __init__(
        self,
        *,
        timeout_seconds: float = 10.0,
        maximum_age: timedelta = timedelta(seconds=60),
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._timeout = timeout_seconds
        self._maximum_age = maximum_age
        self._clock = clock
        self._latest: PositionFix | None = None
        self._subscribers: dict[int, tuple[PositionCallback, ErrorCallback]] = {}
        self._next_handle = 1
        self._waiters: list[asyncio.Future[PositionFix]] = []

    @property
    def latest(self) -> PositionFix | None:
        return self._latest

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    async def get_once(self) -> PositionFix:
        latest = self._latest
        if latest is not None and self._clock() - latest.timestamp <= self._maximum_age:
            return latest

        waiter: asyncio.Future[PositionFix] = asyncio.get_running_loop().create_future()
        self._waiters.append(waiter)
        try:
            return await asyncio.wait_for(waiter, timeout=self._timeout)
        except TimeoutError as exc:
            raise PositionTimeout("Location request timed out. Please try again.") from exc
        finally:
            if waiter in self._waiters:
                self._waiters.remove(waiter)

    def watch(self, on_update: PositionCallback, on_error: ErrorCallback) -> int:
        handle = self._next_handle
        self._next_handle += 1
        self._subscribers[handle] = (on_update, on_error)
        return handle

    def cancel(self, handle: int) -> None:
        self._subscribers.pop(handle, None)

    async def publish(self, fix: PositionFix) -> None:
        """Deliver a fix to pending ``get_once`` calls and every watcher.

        A fix without a timezone is taken to be in UTC.
        """
        if fix.timestamp.tzinfo is None:
            fix = replace(fix, timestamp=as_utc(fix.timestamp))
        self._latest = fix
        for waiter in self._waiters:
            if not waiter.done():
                waiter.set_result(fix)
        for handle, (on_update, _) in list(self._subscribers.items()):
            try:
                await on_update(fix)
            except Exception:
                logger.exception("position watcher %s failed to handle fix", handle)

    async def fail(self, error: PositionUnavailable) -> None:
        """Report a source failure to pending requests and watchers."""

        for waiter in self._waiters:
            if not waiter.done():
                waiter.set_exception(error)
        for handle, (_, on_error) in list(self._subscribers.items()):
            try:
                await on_error(error)
            except Exception:
                logger.exception("position watcher %s failed to handle error", handle)
