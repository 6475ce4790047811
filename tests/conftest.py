"""Pytest configuration to ensure the `src` package layout is importable.

This adds the `src/` directory to `sys.path` so tests can import the
`hexconquest` package (e.g., `from hexconquest.api.app import create_app`)
without requiring an editable install in CI.  It also provides the
protocol-based fakes shared by the unit and integration tests.
"""

import random
import sys
from datetime import UTC, datetime, timedelta
from pathlib import Path

import pytest

SRC_PATH = Path(__file__).resolve().parents[1] / "src"
if str(SRC_PATH) not in sys.path:
    sys.path.insert(0, str(SRC_PATH))

from hexconquest.domain.errors import PositionUnavailable, StoreFailure  # noqa: E402
from hexconquest.domain.models import PositionFix  # noqa: E402

MADRID = (40.4168, -3.7038)
START = datetime(2024, 5, 1, 12, 0, tzinfo=UTC)


class FixedClock:
    """Manually advanced clock returning timezone-aware datetimes."""

    def __init__(self, now: datetime = START) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> datetime:
        self.now = self.now + timedelta(**kwargs)
        return self.now


class FakeStore:
    """In-memory IStore with per-collection failure injection.

    ``fail_writes`` and ``fail_reads`` hold collection names whose writes or
    reads raise ``StoreFailure``.
    """

    def __init__(self) -> None:
        self.data: dict[str, dict[str, dict]] = {}
        self.opened = False
        self.fail_writes: set[str] = set()
        self.fail_reads: set[str] = set()
        self.put_count = 0

    async def open(self) -> None:
        self.opened = True

    async def close(self) -> None:
        self.opened = False

    async def healthy(self) -> bool:
        return self.opened

    def _read(self, collection: str) -> dict[str, dict]:
        if collection in self.fail_reads:
            raise StoreFailure(f"read of {collection} failed")
        return self.data.get(collection, {})

    def _write(self, collection: str) -> dict[str, dict]:
        if collection in self.fail_writes:
            raise StoreFailure(f"write to {collection} failed")
        return self.data.setdefault(collection, {})

    async def get(self, collection, key):
        value = self._read(collection).get(key)
        return dict(value) if value is not None else None

    async def put(self, collection, key, value):
        self._write(collection)[key] = dict(value)
        self.put_count += 1

    async def delete(self, collection, key):
        self._write(collection).pop(key, None)

    async def get_all(self, collection):
        rows = self._read(collection)
        return {key: dict(rows[key]) for key in sorted(rows)}

    async def get_all_where(self, collection, field, value):
        rows = await self.get_all(collection)
        return {key: row for key, row in rows.items() if row.get(field) == value}

    async def count(self, collection):
        return len(self._read(collection))

    async def clear(self, collection):
        self._write(collection).clear()


class FakePositionSource:
    """Position source returning a preset fix or raising a preset error."""

    def __init__(self, fix: PositionFix | None = None) -> None:
        self.fix = fix
        self.error: PositionUnavailable | None = None
        self.subscribers: dict[int, tuple] = {}
        self._next = 1

    async def get_once(self) -> PositionFix:
        if self.error is not None:
            raise self.error
        if self.fix is None:
            raise PositionUnavailable("no fix")
        return self.fix

    def watch(self, on_update, on_error) -> int:
        handle = self._next
        self._next += 1
        self.subscribers[handle] = (on_update, on_error)
        return handle

    def cancel(self, handle: int) -> None:
        self.subscribers.pop(handle, None)


def make_fix(lat: float = MADRID[0], lng: float = MADRID[1], at: datetime = START) -> PositionFix:
    return PositionFix(latitude=lat, longitude=lng, timestamp=at)


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock()


@pytest.fixture
def store() -> FakeStore:
    return FakeStore()


@pytest.fixture
def rng() -> random.Random:
    return random.Random(1234)
