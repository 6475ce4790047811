"""Base manager service backed by the ``bases`` collection."""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime

from hexconquest.domain import bases as base_rules
from hexconquest.domain.bases import BaseOutcome
from hexconquest.domain.enums import MaintenanceOutcome
from hexconquest.domain.models import CellID, PlayerBase, PlayerID, ResourceInventory
from hexconquest.domain.rules_config import DEFAULT_RULES, RulesConfig
from hexconquest.interfaces.store import IStore
from hexconquest.models.base import utc_now
from hexconquest.repository.codec import BASE_CODEC, BASES
from hexconquest.services.territory_service import TerritoryLedger

logger = logging.getLogger(__name__)


class BaseManager:
    """Establishes, upgrades and maintains player bases."""

    def __init__(
        self,
        store: IStore,
        ledger: TerritoryLedger,
        *,
        rules: RulesConfig = DEFAULT_RULES,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._store = store
        self._ledger = ledger
        self._rules = rules
        self._clock = clock

    async def get(self, cell: CellID) -> PlayerBase | None:
        payload = await self._store.get(BASES, cell)
        return BASE_CODEC.load(payload) if payload is not None else None

    async def base_for_player(self, player_id: PlayerID) -> PlayerBase | None:
        """Return the player's base, if any (a player owns at most one)."""

        rows = await self._store.get_all_where(BASES, "player_id", player_id)
        for payload in rows.values():
            return BASE_CODEC.load(payload)
        return None

    async def save(self, base: PlayerBase) -> None:
        await self._store.put(BASES, base.cell, BASE_CODEC.dump(base))

    async def remove(self, cell: CellID) -> None:
        await self._store.delete(BASES, cell)

    async def establish(
        self,
        player_id: PlayerID,
        cell: CellID,
        current_base_cell: CellID | None,
        inventory: ResourceInventory,
    ) -> BaseOutcome:
        """Found a level-1 base on a conquered cell and persist it.

        Args:
            player_id: Player founding the base
            cell: Target cell, which must already be conquered
            current_base_cell: The player's existing base cell, if any
            inventory: Inventory paying the establishment cost

        Returns:
            The new base and the debited inventory

        Raises:
            PreconditionFailed: ``not_conquered`` or ``already_has_base``
            InsufficientResources: When the cost cannot be paid
            StoreFailure: If the territory read or base write fails
        """
        lookup = await self._ledger.query(cell)
        outcome = base_rules.establish(
            player_id,
            lookup,
            current_base_cell,
            inventory,
            now=self._clock(),
            rules=self._rules.bases,
        )
        await self.save(outcome.base)
        logger.info("player %s established a base at %s", player_id, cell)
        return outcome

    async def upgrade(
        self, player_id: PlayerID, cell: CellID, inventory: ResourceInventory
    ) -> BaseOutcome:
        """Raise the base on ``cell`` one level.

        A missing base is reported as ``not_owner``.

        Raises:
            PreconditionFailed: ``not_owner`` or ``already_max_level``
            InsufficientResources: When the cost cannot be paid
            StoreFailure: If the base cannot be read or written
        """
        base = await self.get(cell)
        outcome = base_rules.upgrade(player_id, base, inventory, rules=self._rules.bases)
        await self.save(outcome.base)
        logger.info("player %s upgraded base at %s to level %d", player_id, cell, outcome.base.level)
        return outcome

    async def persist_cycle(
        self,
        before: PlayerBase,
        after: PlayerBase | None,
        outcome: MaintenanceOutcome,
    ) -> None:
        """Write back the base state produced by a maintenance cycle.

        ``after`` is None when the base was lost; its record is deleted.
        """
        if after is None:
            await self.remove(before.cell)
            logger.warning(
                "base at %s of player %s was lost to starvation", before.cell, before.player_id
            )
            return
        if after != before:
            await self.save(after)
        if outcome == MaintenanceOutcome.STARVED:
            logger.warning(
                "base at %s starved: health %d -> %d", before.cell, before.health, after.health
            )
