"""Dataclasses describing every HexConquest entity.

These are the in-memory shapes the rules layer operates on.  The store
adapter serializes them with pydantic ``TypeAdapter`` so the rules never
touch persistence directly.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import NewType

from .enums import ResourceType

# --- Strongly typed identifiers -------------------------------------------------

CellID = NewType("CellID", str)
PlayerID = NewType("PlayerID", str)


# --- Value objects --------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class Coordinate:
    """Geographic point in decimal degrees."""

    latitude: float
    longitude: float


@dataclass(frozen=True, slots=True)
class PositionFix:
    """A coordinate delivered by the position source."""

    latitude: float
    longitude: float
    timestamp: datetime
    accuracy: float | None = None

    @property
    def coordinate(self) -> Coordinate:
        return Coordinate(latitude=self.latitude, longitude=self.longitude)


@dataclass(frozen=True, slots=True)
class ResourceInventory:
    """Counters for the three resources held by a player."""

    wood: int = 0
    iron: int = 0
    stone: int = 0

    def amount(self, resource_type: ResourceType) -> int:
        return getattr(self, resource_type.value)

    def as_cost(self) -> ResourceCost:
        return ResourceCost(wood=self.wood, iron=self.iron, stone=self.stone)


@dataclass(frozen=True, slots=True)
class ResourceCost:
    """Partial inventory used for prices; absent fields cost nothing."""

    wood: int | None = None
    iron: int | None = None
    stone: int | None = None

    def amount(self, resource_type: ResourceType) -> int:
        value = getattr(self, resource_type.value)
        return value or 0

    @classmethod
    def of(cls, resource_type: ResourceType, amount: int) -> ResourceCost:
        return cls(**{resource_type.value: amount})


# --- Records --------------------------------------------------------------------


@dataclass(slots=True)
class TerritoryRecord:
    """Conquest state of one cell."""

    cell: CellID
    conquest_cost: ResourceCost
    maintenance_cost: ResourceCost
    conquered: bool = False
    conquered_by: PlayerID | None = None
    conquered_at: datetime | None = None
    center: Coordinate | None = None


@dataclass(slots=True)
class ResourceZone:
    """Harvestable deposit anchored to a cell."""

    cell: CellID
    resource_type: ResourceType
    amount: int
    regeneration_rate: int
    last_regeneration: datetime


@dataclass(slots=True)
class PlayerBase:
    """Player-owned structure producing and consuming resources each tick."""

    cell: CellID
    player_id: PlayerID
    level: int
    health: int
    max_health: int
    last_maintenance: datetime
    resource_generation: ResourceInventory
    maintenance_cost: ResourceInventory


@dataclass(slots=True)
class PlayerState:
    """Everything the engine tracks about the local player."""

    id: PlayerID
    resources: ResourceInventory
    last_known_position: PositionFix | None = None
    health: int = 100
    score: int = 0
    level: int = 1
    base_cell: CellID | None = None


@dataclass(slots=True)
class HomeBase:
    """Remembered home coordinate of a player."""

    player_id: PlayerID
    position: Coordinate
    saved_at: datetime


@dataclass(slots=True)
class TerritoryStats:
    """Aggregate conquest counters."""

    total: int = 0
    conquered: int = 0

    @property
    def unconquered(self) -> int:
        return self.total - self.conquered


# --- Tagged lookup results ------------------------------------------------------


@dataclass(frozen=True, slots=True)
class Existing:
    """A record read back from the store."""

    record: TerritoryRecord

    @property
    def is_default(self) -> bool:
        return False


@dataclass(frozen=True, slots=True)
class DefaultFor:
    """A synthetic record for a cell that was never written."""

    cell: CellID
    record: TerritoryRecord = field(compare=False)

    @property
    def is_default(self) -> bool:
        return True


TerritoryLookup = Existing | DefaultFor
