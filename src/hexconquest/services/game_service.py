"""Game session facade.

``GameSession`` is the single writer of the local player's state.  Position
updates, simulation ticks and player commands all pass through one
``asyncio.Lock`` so every read-modify-write of ``PlayerState`` is
serialized.  Commands never raise engine errors; they return a
``CommandResult`` carrying the failure reason instead.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field, replace
from datetime import datetime, timedelta
from typing import TypeVar

from hexconquest.domain import players as player_rules
from hexconquest.domain import tick as tick_rules
from hexconquest.domain.enums import ConnectionStatus, FailureReason
from hexconquest.domain.errors import (
    HexConquestError,
    InvalidCell,
    NotFound,
    PositionUnavailable,
    PreconditionFailed,
    StoreFailure,
)
from hexconquest.domain.models import (
    CellID,
    Coordinate,
    HomeBase,
    PlayerBase,
    PlayerID,
    PlayerState,
    PositionFix,
    ResourceInventory,
    ResourceZone,
    TerritoryLookup,
    TerritoryRecord,
    TerritoryStats,
)
from hexconquest.domain.rules_config import DEFAULT_RULES, RulesConfig
from hexconquest.domain.tick import TickResult
from hexconquest.interfaces.position import IPositionSource
from hexconquest.models.base import utc_now
from hexconquest.services.base_service import BaseManager
from hexconquest.services.home_service import HomeTracker
from hexconquest.services.player_service import PlayerService
from hexconquest.services.results import CommandResult
from hexconquest.services.territory_service import TerritoryLedger
from hexconquest.services.zone_service import ResourceZoneManager
from hexconquest.utils.hex_grid import HexGrid

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(slots=True)
class SessionSnapshot:
    """Everything the presentation layer renders at once."""

    player: PlayerState | None
    position: PositionFix | None
    current_cell: CellID | None
    territory: TerritoryRecord | None
    territory_is_default: bool
    stats: TerritoryStats | None
    home: HomeBase | None
    away_from_home: bool
    connection: ConnectionStatus
    base: PlayerBase | None
    zones: list[ResourceZone] = field(default_factory=list)


@dataclass(slots=True)
class SessionLimits:
    """Tunables the session reads from settings."""

    max_radius: int = 5
    max_hexagons: int = 200
    zone_count: int = 8
    stale_after: timedelta = timedelta(seconds=60)


class GameSession:
    """Coordinates the ledger, zones, bases and home tracker for one player."""

    def __init__(
        self,
        player_id: PlayerID,
        *,
        grid: HexGrid,
        players: PlayerService,
        ledger: TerritoryLedger,
        zones: ResourceZoneManager,
        bases: BaseManager,
        homes: HomeTracker,
        position_source: IPositionSource | None = None,
        rules: RulesConfig = DEFAULT_RULES,
        limits: SessionLimits | None = None,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self.player_id = player_id
        self.grid = grid
        self.players = players
        self.ledger = ledger
        self.zones = zones
        self.bases = bases
        self.homes = homes
        self.position_source = position_source
        self.rules = rules
        self.limits = limits or SessionLimits()
        self._clock = clock
        self._lock = asyncio.Lock()
        self._player: PlayerState | None = None
        self._position: PositionFix | None = None
        self._current_cell: CellID | None = None
        self._last_fix_at: datetime | None = None
        self._away_from_home = False
        self.last_position_error: PositionUnavailable | None = None

    # ------------------------------------------------------------------
    # State accessors

    @property
    def player(self) -> PlayerState | None:
        return self._player

    @property
    def position(self) -> PositionFix | None:
        return self._position

    @property
    def current_cell(self) -> CellID | None:
        return self._current_cell

    @property
    def away_from_home(self) -> bool:
        return self._away_from_home

    def connection_status(self) -> ConnectionStatus:
        """Online while the last accepted fix is younger than ``stale_after``."""

        if self._last_fix_at is None:
            return ConnectionStatus.OFFLINE
        if self._clock() - self._last_fix_at > self.limits.stale_after:
            return ConnectionStatus.OFFLINE
        return ConnectionStatus.ONLINE

    # ------------------------------------------------------------------
    # Startup

    async def bootstrap(self, fix: PositionFix | None = None) -> PlayerState:
        """Load or create the player and, given a fix, seed zones if none exist.

        Raises:
            StoreFailure: If the player cannot be loaded or created
        """
        async with self._lock:
            player = await self.players.load_or_create(self.player_id)
            base = await self.bases.base_for_player(player.id)
            actual_cell = base.cell if base is not None else None
            if player.base_cell != actual_cell:
                player = replace(player, base_cell=actual_cell)
                await self.players.save(player)
            self._player = player
            if player.last_known_position is not None and fix is None:
                self._position = player.last_known_position
                self._current_cell = self.grid.cell_for(player.last_known_position.coordinate)
            if fix is not None:
                await self._accept_fix(fix)
            if self._current_cell is not None and not await self.zones.list_zones():
                await self._seed_zones(self._current_cell)
            return self._require_player()

    # ------------------------------------------------------------------
    # Position handling

    async def apply_position(self, fix: PositionFix) -> CommandResult[CellID]:
        """Accept a fix: update the current cell, history and visited cells."""

        async def operation() -> CellID:
            return await self._accept_fix(fix)

        return await self._execute("apply_position", operation, require_player=False)

    async def on_position_update(self, fix: PositionFix) -> None:
        """Watch callback for the position source."""

        result = await self.apply_position(fix)
        if not result.ok:
            logger.warning("ignored position update: %s", result.message)

    async def on_position_error(self, error: PositionUnavailable) -> None:
        """Watch error callback; remembers the failure for the snapshot."""

        self.last_position_error = error
        logger.warning("position source error: %s", error)

    async def refresh_position(self) -> CommandResult[CellID]:
        """Ask the position source for one fresh fix and apply it."""

        if self.position_source is None:
            return CommandResult.failure(
                FailureReason.POSITION_UNAVAILABLE, "no position source configured"
            )
        try:
            fix = await self.position_source.get_once()
        except PositionUnavailable as exc:
            self.last_position_error = exc
            return CommandResult.from_error(exc)
        return await self.apply_position(fix)

    async def _accept_fix(self, fix: PositionFix) -> CellID:
        cell = self.grid.cell_for(fix.coordinate)
        self._position = fix
        self._current_cell = cell
        self._last_fix_at = self._clock()
        self.last_position_error = None

        await self.players.record_position(fix)
        try:
            await self.ledger.record_visit(cell, self.grid.center(cell))
        except StoreFailure:
            logger.warning("could not record visit to cell %s", cell, exc_info=True)

        if self._player is not None:
            self._player = replace(self._player, last_known_position=fix)
            try:
                await self.players.save(self._player)
            except StoreFailure:
                logger.warning("could not persist last known position", exc_info=True)
            self._away_from_home = await self.homes.is_away_from_home(
                self._player.id, fix.coordinate
            )
        return cell

    # ------------------------------------------------------------------
    # Commands

    async def conquer_current_cell(self) -> CommandResult[TerritoryRecord]:
        """Conquer the cell the player stands in and award score."""

        async def operation() -> TerritoryRecord:
            player = self._require_player()
            cell, position = self._require_position()
            prior = await self.ledger.query(cell)
            outcome = await self.ledger.conquer(
                cell, player.id, position.coordinate, player.resources
            )
            updated = player_rules.update_score(
                replace(player, resources=outcome.inventory), self.rules.player.conquest_score
            )
            await self._commit_player(updated, rollback=lambda: self.ledger.revert(prior))
            return outcome.record

        return await self._execute("conquer_current_cell", operation)

    async def collect_from(self, cell: CellID) -> CommandResult[int]:
        """Harvest the zone on ``cell``; the value is the amount collected."""

        async def operation() -> int:
            player = self._require_player()
            zone = await self.zones.get(cell)
            if zone is None:
                raise NotFound(f"no resource zone on cell {cell}")
            outcome = await self.zones.harvest(zone, player.resources)
            if not outcome.success:
                raise PreconditionFailed(FailureReason.NO_RESOURCES, f"zone {cell} is depleted")
            await self._commit_player(
                replace(player, resources=outcome.inventory),
                rollback=lambda: self.zones.save(zone),
            )
            return outcome.collected

        return await self._execute("collect_from", operation)

    async def establish_base(self, cell: CellID | None = None) -> CommandResult[PlayerBase]:
        """Found a base on ``cell`` (default: the current cell)."""

        async def operation() -> PlayerBase:
            player = self._require_player()
            target = cell if cell is not None else self._require_position()[0]
            outcome = await self.bases.establish(
                player.id, target, player.base_cell, player.resources
            )
            await self._commit_player(
                replace(player, resources=outcome.inventory, base_cell=outcome.base.cell),
                rollback=lambda: self.bases.remove(outcome.base.cell),
            )
            return outcome.base

        return await self._execute("establish_base", operation)

    async def upgrade_base(self, cell: CellID | None = None) -> CommandResult[PlayerBase]:
        """Upgrade the base on ``cell`` (default: the player's own base)."""

        async def operation() -> PlayerBase:
            player = self._require_player()
            target = cell if cell is not None else player.base_cell
            if target is None:
                raise PreconditionFailed(FailureReason.NOT_OWNER, "player has no base")
            previous = await self.bases.get(target)
            outcome = await self.bases.upgrade(player.id, target, player.resources)
            await self._commit_player(
                replace(player, resources=outcome.inventory),
                rollback=lambda: self.bases.save(previous),
            )
            return outcome.base

        return await self._execute("upgrade_base", operation)

    async def set_home(self, coordinate: Coordinate | None = None) -> CommandResult[HomeBase]:
        """Remember ``coordinate`` (default: the current position) as home."""

        async def operation() -> HomeBase:
            player = self._require_player()
            target = coordinate if coordinate is not None else self._require_position()[1].coordinate
            self.grid.cell_for(target)  # rejects non-finite coordinates
            home = await self.homes.set_home(player.id, target)
            if self._position is not None:
                self._away_from_home = await self.homes.is_away_from_home(
                    player.id, self._position.coordinate
                )
            return home

        return await self._execute("set_home", operation)

    async def return_to_home(self) -> CommandResult[CellID]:
        """Move the simulated position back to the saved home coordinate."""

        async def operation() -> CellID:
            player = self._require_player()
            home = await self.homes.get_home(player.id)
            if home is None:
                raise NotFound("no home base has been set")
            fix = PositionFix(
                latitude=home.position.latitude,
                longitude=home.position.longitude,
                timestamp=self._clock(),
            )
            cell = self.grid.cell_for(fix.coordinate)
            self._position = fix
            self._current_cell = cell
            self._away_from_home = False
            return cell

        return await self._execute("return_to_home", operation)

    async def seed_resource_zones(self) -> CommandResult[list[ResourceZone]]:
        """Replace every zone with a fresh batch around the current cell."""

        async def operation() -> list[ResourceZone]:
            cell, _ = self._require_position()
            return await self._seed_zones(cell)

        return await self._execute("seed_resource_zones", operation, require_player=False)

    async def update_health(self, delta: int) -> CommandResult[PlayerState]:
        async def operation() -> PlayerState:
            updated = player_rules.update_health(self._require_player(), delta, self.rules.player)
            await self._commit_player(updated)
            return updated

        return await self._execute("update_health", operation)

    async def update_score(self, delta: int) -> CommandResult[PlayerState]:
        async def operation() -> PlayerState:
            updated = player_rules.update_score(self._require_player(), delta)
            await self._commit_player(updated)
            return updated

        return await self._execute("update_score", operation)

    # ------------------------------------------------------------------
    # Simulation tick

    async def run_tick(self) -> TickResult:
        """Regenerate zones and run base maintenance once.

        Zone writes are isolated per zone.  A failed maintenance write is
        logged and leaves the in-memory player unchanged.

        Raises:
            StoreFailure: If the zones or the base cannot be read
        """
        async with self._lock:
            zones = await self.zones.list_zones()
            player = self._player
            base = await self.bases.base_for_player(player.id) if player is not None else None
            inventory = player.resources if player is not None else ResourceInventory()
            result = tick_rules.run_tick(zones, base, inventory, now=self._clock(), rules=self.rules)

            report = await self.zones.save_regenerated(result.regenerated)
            if report.failed:
                logger.warning("regeneration skipped for %d zones", len(report.failed))

            if player is None or base is None or result.maintenance is None:
                return result
            try:
                await self.bases.persist_cycle(base, result.base, result.maintenance)
                updated = replace(
                    player,
                    resources=result.inventory,
                    base_cell=None if result.base_destroyed else player.base_cell,
                )
                await self.players.save(updated)
            except StoreFailure:
                logger.exception("maintenance of base %s could not be saved", base.cell)
                return result
            self._player = updated
            return result

    # ------------------------------------------------------------------
    # Queries

    async def territory(self, cell: CellID) -> CommandResult[TerritoryLookup]:
        """Stored record of any cell, or its default when never visited."""

        async def operation() -> TerritoryLookup:
            if not self.grid.is_valid(cell):
                raise InvalidCell(f"Invalid cell identifier: {cell!r}")
            return await self.ledger.query(cell)

        return await self._execute("territory", operation, require_player=False, locked=False)

    async def stats(self) -> TerritoryStats | None:
        """Visited and conquered counts, or None when the store cannot answer."""

        try:
            return await self.ledger.stats()
        except StoreFailure:
            logger.warning("could not read territory stats", exc_info=True)
            return None

    def visible_cells(self) -> list[CellID]:
        """Cells around the current cell shown on the map, closest first."""

        if self._current_cell is None:
            return []
        return self.grid.neighborhood(
            self._current_cell, self.limits.max_radius, self.limits.max_hexagons
        )

    async def snapshot(self) -> SessionSnapshot:
        """Collect the full presentation state; store failures degrade to absent values."""

        territory: TerritoryRecord | None = None
        is_default = False
        if self._current_cell is not None:
            try:
                lookup = await self.ledger.query(self._current_cell)
            except StoreFailure:
                logger.warning("could not read current territory", exc_info=True)
            else:
                territory, is_default = lookup.record, lookup.is_default

        home = None
        base = None
        zones: list[ResourceZone] = []
        if self._player is not None:
            home = await self.homes.get_home(self._player.id)
            try:
                base = await self.bases.base_for_player(self._player.id)
                zones = await self.zones.list_zones()
            except StoreFailure:
                logger.warning("could not read base or zones for snapshot", exc_info=True)

        return SessionSnapshot(
            player=self._player,
            position=self._position,
            current_cell=self._current_cell,
            territory=territory,
            territory_is_default=is_default,
            stats=await self.stats(),
            home=home,
            away_from_home=self._away_from_home,
            connection=self.connection_status(),
            base=base,
            zones=zones,
        )

    # ------------------------------------------------------------------
    # Internals

    async def _execute(
        self,
        name: str,
        operation: Callable[[], Awaitable[T]],
        *,
        require_player: bool = True,
        locked: bool = True,
    ) -> CommandResult[T]:
        if require_player and self._player is None:
            return CommandResult.failure(FailureReason.NOT_FOUND, "player is not loaded")
        try:
            if locked:
                async with self._lock:
                    value = await operation()
            else:
                value = await operation()
        except StoreFailure as exc:
            logger.error("%s failed: %s", name, exc)
            return CommandResult.from_error(exc)
        except HexConquestError as exc:
            logger.info("%s rejected: %s", name, exc.reason)
            return CommandResult.from_error(exc)
        return CommandResult.success(value)

    async def _commit_player(
        self,
        player: PlayerState,
        *,
        rollback: Callable[[], Awaitable[object]] | None = None,
    ) -> None:
        """Persist ``player`` and adopt it; on failure undo the paired write."""

        try:
            await self.players.save(player)
        except StoreFailure:
            if rollback is not None:
                try:
                    await rollback()
                except StoreFailure:
                    logger.exception("rollback after failed player save also failed")
            raise
        self._player = player

    async def _seed_zones(self, center: CellID) -> list[ResourceZone]:
        candidates = self.grid.neighborhood(
            center, self.limits.max_radius, self.limits.max_hexagons
        )
        return await self.zones.reseed(
            candidates, self.limits.zone_count, ensure_each_type=True
        )

    def _require_player(self) -> PlayerState:
        if self._player is None:
            raise NotFound("player is not loaded")
        return self._player

    def _require_position(self) -> tuple[CellID, PositionFix]:
        if self._current_cell is None or self._position is None:
            raise PreconditionFailed(FailureReason.NO_POSITION, "no position fix yet")
        return self._current_cell, self._position
