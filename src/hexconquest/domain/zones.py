"""Resource zone rules: placement, regeneration and collection."""

from __future__ import annotations

import math
import random
from collections.abc import Sequence
from dataclasses import dataclass, replace
from datetime import datetime

from .economy import credit
from .enums import ResourceType
from .models import CellID, ResourceCost, ResourceInventory, ResourceZone
from .rules_config import DEFAULT_RULES, ZoneRules

RESOURCE_TYPES: tuple[ResourceType, ...] = tuple(ResourceType)


@dataclass(slots=True)
class CollectOutcome:
    """Return type for a collection attempt."""

    zone: ResourceZone
    inventory: ResourceInventory
    collected: int

    @property
    def success(self) -> bool:
        return self.collected > 0


def place_zones(
    candidates: Sequence[CellID],
    count: int,
    *,
    now: datetime,
    rng: random.Random | None = None,
    rules: ZoneRules = DEFAULT_RULES.zones,
    ensure_each_type: bool = False,
) -> list[ResourceZone]:
    """Create ``count`` zones on distinct random cells drawn from ``candidates``.

    Each zone gets a uniformly random type and an initial amount in
    ``[base, 2 * base)``.  With ``ensure_each_type`` the first zones cycle
    through every resource type so a fresh area always offers all three.
    """

    rng = rng or random.Random()
    unique = list(dict.fromkeys(candidates))
    chosen = rng.sample(unique, min(max(count, 0), len(unique)))

    zones: list[ResourceZone] = []
    for position, cell in enumerate(chosen):
        if ensure_each_type and position < len(RESOURCE_TYPES):
            resource_type = RESOURCE_TYPES[position]
        else:
            resource_type = rng.choice(RESOURCE_TYPES)
        base = rules.base_amount(resource_type)
        zones.append(
            ResourceZone(
                cell=cell,
                resource_type=resource_type,
                amount=base + rng.randrange(base),
                regeneration_rate=rules.regeneration_rate(resource_type),
                last_regeneration=now,
            )
        )
    return zones


def regenerate(
    zone: ResourceZone,
    now: datetime,
    *,
    rules: ZoneRules = DEFAULT_RULES.zones,
) -> ResourceZone:
    """Apply whole-hour regeneration since ``zone.last_regeneration``.

    Less than one elapsed hour returns the zone untouched; the partial hour is
    not carried over.
    """

    hours = (now - zone.last_regeneration).total_seconds() / rules.regeneration_window_seconds
    if hours < 1:
        return zone

    regenerated = math.floor(zone.regeneration_rate * hours)
    amount = min(zone.amount + regenerated, rules.cap(zone.resource_type))
    return replace(zone, amount=amount, last_regeneration=now)


def collect(
    zone: ResourceZone,
    inventory: ResourceInventory,
    *,
    now: datetime,
    rng: random.Random | None = None,
    rules: ZoneRules = DEFAULT_RULES.zones,
) -> CollectOutcome:
    """Harvest 10-30% of the zone into the inventory.

    Collection restarts the regeneration window, so any partially accrued
    hour is lost.
    """

    if zone.amount <= 0:
        return CollectOutcome(zone=zone, inventory=inventory, collected=0)

    rng = rng or random.Random()
    span = rules.collect_fraction_max - rules.collect_fraction_min
    fraction = rules.collect_fraction_min + rng.random() * span
    collected = math.floor(zone.amount * fraction)
    if collected <= 0:
        return CollectOutcome(zone=zone, inventory=inventory, collected=0)

    updated_zone = replace(zone, amount=zone.amount - collected, last_regeneration=now)
    updated_inventory = credit(inventory, ResourceCost.of(zone.resource_type, collected))
    return CollectOutcome(zone=updated_zone, inventory=updated_inventory, collected=collected)
