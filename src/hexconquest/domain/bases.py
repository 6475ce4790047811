"""Player base rules: establishment, upgrades and per-tick maintenance."""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime

from .economy import can_afford, credit, debit, spend
from .enums import FailureReason, MaintenanceOutcome, StarvationPolicy
from .errors import PreconditionFailed
from .models import (
    CellID,
    PlayerBase,
    PlayerID,
    ResourceInventory,
    TerritoryLookup,
)
from .rules_config import DEFAULT_RULES, BaseRules

# ---------------------------------------------------------------------------
# Data structures returned by the base subsystem


@dataclass(slots=True)
class BaseOutcome:
    """Return type for establish and upgrade."""

    base: PlayerBase
    inventory: ResourceInventory


@dataclass(slots=True)
class MaintenanceResult:
    """Return type for one maintenance cycle.

    ``base`` is None when the starvation policy destroyed the base.
    """

    base: PlayerBase | None
    inventory: ResourceInventory
    outcome: MaintenanceOutcome

    @property
    def destroyed(self) -> bool:
        return self.base is None


# ---------------------------------------------------------------------------
# Transitions


def build_base(
    player_id: PlayerID,
    cell: CellID,
    level: int,
    *,
    now: datetime,
    rules: BaseRules = DEFAULT_RULES.bases,
) -> PlayerBase:
    """Instantiate a full-health base at ``level``."""

    table = rules.level(level)
    return PlayerBase(
        cell=cell,
        player_id=player_id,
        level=level,
        health=table.max_health,
        max_health=table.max_health,
        last_maintenance=now,
        resource_generation=table.resource_generation,
        maintenance_cost=table.maintenance_cost,
    )


def establish(
    player_id: PlayerID,
    territory: TerritoryLookup,
    current_base_cell: CellID | None,
    inventory: ResourceInventory,
    *,
    now: datetime,
    rules: BaseRules = DEFAULT_RULES.bases,
) -> BaseOutcome:
    """Found a level-1 base on a conquered cell.

    Raises:
        PreconditionFailed: ``not_conquered`` or ``already_has_base``
        InsufficientResources: When the establishment cost cannot be paid
    """

    record = territory.record
    if not record.conquered:
        raise PreconditionFailed(
            FailureReason.NOT_CONQUERED, f"cell {record.cell} has not been conquered"
        )
    if current_base_cell is not None:
        raise PreconditionFailed(
            FailureReason.ALREADY_HAS_BASE,
            f"player {player_id} already has a base at {current_base_cell}",
        )
    remaining = spend(inventory, rules.establish_cost, purpose="base establishment")
    base = build_base(player_id, record.cell, 1, now=now, rules=rules)
    return BaseOutcome(base=base, inventory=remaining)


def upgrade(
    player_id: PlayerID,
    base: PlayerBase | None,
    inventory: ResourceInventory,
    *,
    rules: BaseRules = DEFAULT_RULES.bases,
) -> BaseOutcome:
    """Raise an owned base one level, keeping its maintenance clock.

    Raises:
        PreconditionFailed: ``not_owner`` or ``already_max_level``
        InsufficientResources: When the upgrade cost cannot be paid
    """

    if base is None or base.player_id != player_id:
        raise PreconditionFailed(FailureReason.NOT_OWNER, "base does not belong to the player")
    if base.level >= rules.max_level:
        raise PreconditionFailed(
            FailureReason.ALREADY_MAX_LEVEL, f"base at {base.cell} is already at max level"
        )
    remaining = spend(inventory, rules.upgrade_cost, purpose="base upgrade")
    table = rules.level(base.level + 1)
    upgraded = replace(
        base,
        level=base.level + 1,
        max_health=table.max_health,
        health=table.max_health,
        resource_generation=table.resource_generation,
        maintenance_cost=table.maintenance_cost,
    )
    return BaseOutcome(base=upgraded, inventory=remaining)


def run_maintenance_cycle(
    base: PlayerBase,
    inventory: ResourceInventory,
    *,
    now: datetime,
    rules: BaseRules = DEFAULT_RULES.bases,
) -> MaintenanceResult:
    """Pay upkeep then collect production, or starve.

    A starved cycle grants nothing and leaves the inventory untouched; what
    happens to the base is decided by ``rules.starvation_policy``.
    """

    maintenance = base.maintenance_cost.as_cost()
    if can_afford(inventory, maintenance):
        paid = debit(inventory, maintenance)
        produced = credit(paid, base.resource_generation.as_cost())
        return MaintenanceResult(
            base=replace(base, last_maintenance=now),
            inventory=produced,
            outcome=MaintenanceOutcome.SUSTAINED,
        )

    return MaintenanceResult(
        base=apply_starvation(base, rules),
        inventory=inventory,
        outcome=MaintenanceOutcome.STARVED,
    )


def apply_starvation(base: PlayerBase, rules: BaseRules = DEFAULT_RULES.bases) -> PlayerBase | None:
    """Return the base after an unpaid cycle, or None if it is lost."""

    policy = rules.starvation_policy
    if policy == StarvationPolicy.DESTROY:
        return None
    if policy == StarvationPolicy.DEGRADE_HEALTH:
        health = base.health - rules.starvation_health_loss
        if health <= 0:
            return None
        return replace(base, health=health)
    return base
