"""Translation between domain dataclasses and store payloads."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Generic, TypeVar

from pydantic import TypeAdapter, ValidationError

from hexconquest.domain import models as dm
from hexconquest.domain.errors import StoreFailure

T = TypeVar("T")

# Collection names shared by every store implementation
PLAYERS = "players"
TERRITORIES = "territories"
RESOURCE_ZONES = "resource_zones"
BASES = "bases"
POSITIONS = "positions"
SETTINGS = "settings"


class Codec(Generic[T]):
    """Dump and load one dataclass type as JSON-compatible dictionaries."""

    def __init__(self, kind: type[T]) -> None:
        self._adapter: TypeAdapter[T] = TypeAdapter(kind)
        self._name = kind.__name__

    def dump(self, value: T) -> dict[str, Any]:
        return self._adapter.dump_python(value, mode="json")

    def load(self, payload: dict[str, Any]) -> T:
        """Rebuild the dataclass; a payload that does not fit raises ``StoreFailure``."""
        try:
            return self._adapter.validate_python(payload)
        except ValidationError as exc:
            raise StoreFailure(f"corrupt {self._name} record: {exc.error_count()} errors") from exc


PLAYER_CODEC: Codec[dm.PlayerState] = Codec(dm.PlayerState)
TERRITORY_CODEC: Codec[dm.TerritoryRecord] = Codec(dm.TerritoryRecord)
ZONE_CODEC: Codec[dm.ResourceZone] = Codec(dm.ResourceZone)
BASE_CODEC: Codec[dm.PlayerBase] = Codec(dm.PlayerBase)
POSITION_CODEC: Codec[dm.PositionFix] = Codec(dm.PositionFix)
HOME_CODEC: Codec[dm.HomeBase] = Codec(dm.HomeBase)


def position_key(timestamp: datetime, sequence: int = 0) -> str:
    """Key that sorts lexically in chronological order.

    ``sequence`` breaks ties between fixes stamped in the same millisecond.
    """

    return f"{int(timestamp.timestamp() * 1000):015d}-{sequence % 1_000_000:06d}"


def home_key(player_id: str) -> str:
    return f"home_base:{player_id}"
