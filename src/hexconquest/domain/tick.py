"""Simulation tick orchestration on in-memory state."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import datetime

from . import bases as base_rules
from . import zones as zone_rules
from .enums import MaintenanceOutcome
from .models import PlayerBase, ResourceInventory, ResourceZone
from .rules_config import DEFAULT_RULES, RulesConfig


@dataclass(slots=True)
class TickResult:
    """Everything a single tick changed.

    ``regenerated`` lists only zones whose amount or timestamp moved, so the
    caller writes back exactly what changed.
    """

    regenerated: list[ResourceZone] = field(default_factory=list)
    inventory: ResourceInventory | None = None
    base: PlayerBase | None = None
    maintenance: MaintenanceOutcome | None = None
    base_destroyed: bool = False


def run_tick(
    zones: Iterable[ResourceZone],
    base: PlayerBase | None,
    inventory: ResourceInventory,
    *,
    now: datetime,
    rules: RulesConfig = DEFAULT_RULES,
) -> TickResult:
    """Regenerate every zone, then run one maintenance cycle if a base exists."""

    result = TickResult(inventory=inventory)
    for zone in zones:
        updated = zone_rules.regenerate(zone, now, rules=rules.zones)
        if updated is not zone:
            result.regenerated.append(updated)

    if base is not None:
        cycle = base_rules.run_maintenance_cycle(base, inventory, now=now, rules=rules.bases)
        result.inventory = cycle.inventory
        result.base = cycle.base
        result.maintenance = cycle.outcome
        result.base_destroyed = cycle.destroyed

    return result
