"""Territory ledger service.

Owns the ``territories`` collection: lookups with explicit default records,
conquest writes serialized per cell, visited-cell bookkeeping and stats.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator, Callable
from contextlib import asynccontextmanager
from datetime import datetime

from hexconquest.domain import territory as territory_rules
from hexconquest.domain.models import (
    CellID,
    Coordinate,
    Existing,
    PlayerID,
    ResourceInventory,
    TerritoryLookup,
    TerritoryRecord,
    TerritoryStats,
)
from hexconquest.domain.rules_config import DEFAULT_RULES, RulesConfig
from hexconquest.domain.territory import ConquestOutcome
from hexconquest.interfaces.store import IStore
from hexconquest.models.base import utc_now
from hexconquest.repository.codec import TERRITORIES, TERRITORY_CODEC

logger = logging.getLogger(__name__)


class TerritoryLedger:
    """Per-cell conquest state backed by the store.

    Each cell has its own ``asyncio.Lock`` so the check-then-write of a
    conquest runs as a unit: two concurrent conquests of the same cell can
    never both pass the ``already_conquered`` check.  A cell's lock lives
    only while some task holds or awaits it.
    """

    def __init__(
        self,
        store: IStore,
        *,
        rules: RulesConfig = DEFAULT_RULES,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._store = store
        self._rules = rules
        self._clock = clock
        self._locks: dict[CellID, tuple[asyncio.Lock, int]] = {}

    @property
    def lock_count(self) -> int:
        return len(self._locks)

    @asynccontextmanager
    async def cell_lock(self, cell: CellID) -> AsyncIterator[None]:
        entry = self._locks.get(cell)
        lock, users = entry if entry is not None else (asyncio.Lock(), 0)
        self._locks[cell] = (lock, users + 1)
        try:
            async with lock:
                yield
        finally:
            lock, users = self._locks[cell]
            if users == 1:
                del self._locks[cell]
            else:
                self._locks[cell] = (lock, users - 1)

    async def query(self, cell: CellID) -> TerritoryLookup:
        """Return ``Existing`` for stored cells, ``DefaultFor`` otherwise.

        Raises:
            StoreFailure: If the store cannot be read
        """
        payload = await self._store.get(TERRITORIES, cell)
        if payload is None:
            return territory_rules.default_lookup(cell, self._rules.territory)
        return Existing(record=TERRITORY_CODEC.load(payload))

    async def conquer(
        self,
        cell: CellID,
        player_id: PlayerID,
        owner_coordinate: Coordinate,
        inventory: ResourceInventory,
    ) -> ConquestOutcome:
        """Claim ``cell`` and persist the conquered record.

        The returned inventory has the conquest cost debited; persisting it is
        the caller's job.

        Raises:
            PreconditionFailed: ``already_conquered``
            InsufficientResources: When the cost cannot be paid
            StoreFailure: If the record cannot be read or written
        """
        async with self.cell_lock(cell):
            lookup = await self.query(cell)
            outcome = territory_rules.conquer(
                lookup, player_id, owner_coordinate, inventory, now=self._clock()
            )
            await self.save(outcome.record)
        logger.info("cell %s conquered by %s", cell, player_id)
        return outcome

    async def revert(self, lookup: TerritoryLookup) -> None:
        """Restore a cell to what ``lookup`` described before a failed command."""
        if lookup.is_default:
            await self._store.delete(TERRITORIES, lookup.record.cell)
        else:
            await self.save(lookup.record)

    async def record_visit(self, cell: CellID, center: Coordinate | None = None) -> bool:
        """Write an unconquered record for a never-seen cell.

        Returns:
            True when a record was created
        """
        async with self.cell_lock(cell):
            lookup = await self.query(cell)
            if not lookup.is_default:
                return False
            record = lookup.record
            record.center = center
            await self.save(record)
        return True

    async def save(self, record: TerritoryRecord) -> None:
        await self._store.put(TERRITORIES, record.cell, TERRITORY_CODEC.dump(record))

    async def stats(self) -> TerritoryStats:
        """Count visited and conquered cells."""
        total = await self._store.count(TERRITORIES)
        conquered = await self._store.get_all_where(TERRITORIES, "conquered", True)
        return TerritoryStats(total=total, conquered=len(conquered))

