"""Territory conquest rules on the domain models."""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime

from .economy import spend
from .enums import FailureReason
from .errors import PreconditionFailed
from .models import (
    CellID,
    Coordinate,
    DefaultFor,
    PlayerID,
    ResourceInventory,
    TerritoryLookup,
    TerritoryRecord,
)
from .rules_config import DEFAULT_RULES, TerritoryRules


@dataclass(slots=True)
class ConquestOutcome:
    """Return type for a successful conquest."""

    record: TerritoryRecord
    inventory: ResourceInventory


def default_record(cell: CellID, rules: TerritoryRules = DEFAULT_RULES.territory) -> TerritoryRecord:
    """Unconquered record used for cells that were never written."""

    return TerritoryRecord(
        cell=cell,
        conquest_cost=rules.conquest_cost,
        maintenance_cost=rules.maintenance_cost,
    )


def default_lookup(cell: CellID, rules: TerritoryRules = DEFAULT_RULES.territory) -> DefaultFor:
    return DefaultFor(cell=cell, record=default_record(cell, rules))


def conquer(
    lookup: TerritoryLookup,
    player_id: PlayerID,
    owner_coordinate: Coordinate,
    inventory: ResourceInventory,
    *,
    now: datetime,
) -> ConquestOutcome:
    """Claim the looked-up cell for ``player_id``.

    Raises:
        PreconditionFailed: ``already_conquered`` when the cell has an owner
        InsufficientResources: When the conquest cost cannot be paid
    """

    record = lookup.record
    if record.conquered:
        raise PreconditionFailed(
            FailureReason.ALREADY_CONQUERED, f"cell {record.cell} is already conquered"
        )
    remaining = spend(inventory, record.conquest_cost, purpose=f"conquest of {record.cell}")
    conquered = replace(
        record,
        conquered=True,
        conquered_by=player_id,
        conquered_at=now,
        center=owner_coordinate,
    )
    return ConquestOutcome(record=conquered, inventory=remaining)
