"""Resource inventory arithmetic.

All functions are pure and return new inventories.  ``debit`` does not
re-validate: callers check ``can_afford`` first or go through ``spend``.
"""

from __future__ import annotations

from .enums import ResourceType
from .errors import InsufficientResources
from .models import ResourceCost, ResourceInventory


def can_afford(inventory: ResourceInventory, cost: ResourceCost) -> bool:
    """Return True when every present field of ``cost`` fits in ``inventory``."""

    return all(inventory.amount(rt) >= cost.amount(rt) for rt in ResourceType)


def debit(inventory: ResourceInventory, cost: ResourceCost) -> ResourceInventory:
    """Subtract every present field of ``cost`` from ``inventory``."""

    return ResourceInventory(
        wood=inventory.wood - cost.amount(ResourceType.WOOD),
        iron=inventory.iron - cost.amount(ResourceType.IRON),
        stone=inventory.stone - cost.amount(ResourceType.STONE),
    )


def credit(inventory: ResourceInventory, amounts: ResourceCost) -> ResourceInventory:
    """Add every present field of ``amounts`` to ``inventory``."""

    return ResourceInventory(
        wood=inventory.wood + amounts.amount(ResourceType.WOOD),
        iron=inventory.iron + amounts.amount(ResourceType.IRON),
        stone=inventory.stone + amounts.amount(ResourceType.STONE),
    )


def spend(
    inventory: ResourceInventory, cost: ResourceCost, *, purpose: str | None = None
) -> ResourceInventory:
    """Afford-check then debit; raises ``InsufficientResources`` without debiting."""

    if not can_afford(inventory, cost):
        raise InsufficientResources(f"cannot afford {purpose or cost}")
    return debit(inventory, cost)


def clamp(value: int, low: int, high: int) -> int:
    return max(low, min(high, value))
