"""Resource zone manager service.

Persists zones in the ``resource_zones`` collection and applies the pure
placement, collection and regeneration rules from
:mod:`hexconquest.domain.zones`.
"""

from __future__ import annotations

import logging
import random
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from datetime import datetime

from hexconquest.domain import zones as zone_rules
from hexconquest.domain.errors import StoreFailure
from hexconquest.domain.models import CellID, ResourceInventory, ResourceZone
from hexconquest.domain.rules_config import DEFAULT_RULES, RulesConfig
from hexconquest.domain.zones import CollectOutcome
from hexconquest.interfaces.store import IStore
from hexconquest.models.base import utc_now
from hexconquest.repository.codec import RESOURCE_ZONES, ZONE_CODEC

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class RegenerationReport:
    """Outcome of regenerating every known zone."""

    updated: list[ResourceZone] = field(default_factory=list)
    failed: list[CellID] = field(default_factory=list)


class ResourceZoneManager:
    """Placement, harvesting and regeneration of resource deposits."""

    def __init__(
        self,
        store: IStore,
        *,
        rules: RulesConfig = DEFAULT_RULES,
        clock: Callable[[], datetime] = utc_now,
        rng: random.Random | None = None,
    ) -> None:
        self._store = store
        self._rules = rules
        self._clock = clock
        self._rng = rng or random.Random()

    async def list_zones(self) -> list[ResourceZone]:
        """Every stored zone; an unreadable record is logged and skipped."""

        rows = await self._store.get_all(RESOURCE_ZONES)
        zones = []
        for key, payload in rows.items():
            try:
                zones.append(ZONE_CODEC.load(payload))
            except StoreFailure:
                logger.warning("skipping resource zone %s", key, exc_info=True)
        return zones

    async def get(self, cell: CellID) -> ResourceZone | None:
        payload = await self._store.get(RESOURCE_ZONES, cell)
        return ZONE_CODEC.load(payload) if payload is not None else None

    async def save(self, zone: ResourceZone) -> None:
        await self._store.put(RESOURCE_ZONES, zone.cell, ZONE_CODEC.dump(zone))

    async def place(
        self,
        candidates: Sequence[CellID],
        count: int,
        *,
        ensure_each_type: bool = False,
    ) -> list[ResourceZone]:
        """Create and persist ``count`` zones on random candidate cells."""

        zones = zone_rules.place_zones(
            candidates,
            count,
            now=self._clock(),
            rng=self._rng,
            rules=self._rules.zones,
            ensure_each_type=ensure_each_type,
        )
        for zone in zones:
            await self.save(zone)
        return zones

    async def clear_all(self) -> None:
        await self._store.clear(RESOURCE_ZONES)

    async def reseed(
        self,
        candidates: Sequence[CellID],
        count: int,
        *,
        ensure_each_type: bool = False,
    ) -> list[ResourceZone]:
        """Clear every zone and place a fresh batch."""

        await self.clear_all()
        zones = await self.place(candidates, count, ensure_each_type=ensure_each_type)
        logger.info("reseeded %d resource zones from %d candidates", len(zones), len(candidates))
        return zones

    async def harvest(self, zone: ResourceZone, inventory: ResourceInventory) -> CollectOutcome:
        """Apply one collection to an already loaded zone and persist it."""

        outcome = zone_rules.collect(
            zone, inventory, now=self._clock(), rng=self._rng, rules=self._rules.zones
        )
        if outcome.success:
            await self.save(outcome.zone)
        return outcome

    async def save_regenerated(self, zones: Sequence[ResourceZone]) -> RegenerationReport:
        """Write back regenerated zones one by one; a failed write skips only that zone."""

        report = RegenerationReport()
        for zone in zones:
            try:
                await self.save(zone)
            except StoreFailure:
                logger.exception("failed to persist regeneration of zone %s", zone.cell)
                report.failed.append(zone.cell)
                continue
            report.updated.append(zone)
        return report
