"""Declarative rule configuration for the economy engine."""

from __future__ import annotations

from dataclasses import dataclass, field

from .enums import ResourceType, StarvationPolicy
from .models import ResourceCost, ResourceInventory


@dataclass(frozen=True, slots=True)
class PlayerRules:
    """Starting values for a freshly created player."""

    starting_resources: ResourceInventory = ResourceInventory(wood=50, iron=30, stone=40)
    starting_health: int = 100
    max_health: int = 100
    conquest_score: int = 10


@dataclass(frozen=True, slots=True)
class TerritoryRules:
    """Prices attached to a cell that has never been written."""

    conquest_cost: ResourceCost = ResourceCost(wood=10, iron=5, stone=8)
    maintenance_cost: ResourceCost = ResourceCost(wood=2, iron=1, stone=2)


@dataclass(frozen=True, slots=True)
class ZoneRules:
    """Resource deposit spawn amounts, regeneration and collection."""

    base_amounts: dict[ResourceType, int] = field(
        default_factory=lambda: {
            ResourceType.WOOD: 50,
            ResourceType.IRON: 30,
            ResourceType.STONE: 40,
        }
    )
    regeneration_rates: dict[ResourceType, int] = field(
        default_factory=lambda: {
            ResourceType.WOOD: 10,
            ResourceType.IRON: 5,
            ResourceType.STONE: 8,
        }
    )
    cap_multiplier: int = 2
    collect_fraction_min: float = 0.1
    collect_fraction_max: float = 0.3
    regeneration_window_seconds: float = 3600.0

    def base_amount(self, resource_type: ResourceType) -> int:
        return self.base_amounts[resource_type]

    def regeneration_rate(self, resource_type: ResourceType) -> int:
        return self.regeneration_rates[resource_type]

    def cap(self, resource_type: ResourceType) -> int:
        return self.cap_multiplier * self.base_amount(resource_type)


@dataclass(frozen=True, slots=True)
class BaseLevel:
    """Production, upkeep and durability of one base level."""

    name: str
    max_health: int
    resource_generation: ResourceInventory
    maintenance_cost: ResourceInventory


@dataclass(frozen=True, slots=True)
class BaseRules:
    """Establishment and upgrade prices plus per-level tables."""

    establish_cost: ResourceCost = ResourceCost(wood=30, iron=20, stone=25)
    upgrade_cost: ResourceCost = ResourceCost(wood=50, iron=30, stone=40)
    levels: dict[int, BaseLevel] = field(
        default_factory=lambda: {
            1: BaseLevel(
                name="hut",
                max_health=100,
                resource_generation=ResourceInventory(wood=5, iron=3, stone=4),
                maintenance_cost=ResourceInventory(wood=2, iron=1, stone=2),
            ),
            2: BaseLevel(
                name="fortress",
                max_health=250,
                resource_generation=ResourceInventory(wood=8, iron=6, stone=7),
                maintenance_cost=ResourceInventory(wood=12, iron=8, stone=10),
            ),
        }
    )
    starvation_policy: StarvationPolicy = StarvationPolicy.IGNORE
    starvation_health_loss: int = 10

    @property
    def max_level(self) -> int:
        return max(self.levels)

    def level(self, level: int) -> BaseLevel:
        return self.levels[level]


@dataclass(frozen=True, slots=True)
class HomeRules:
    """Away-from-home detection."""

    threshold_km: float = 5.0


@dataclass(frozen=True, slots=True)
class RulesConfig:
    """Top-level configuration container for all subsystems."""

    player: PlayerRules = PlayerRules()
    territory: TerritoryRules = TerritoryRules()
    zones: ZoneRules = ZoneRules()
    bases: BaseRules = BaseRules()
    home: HomeRules = HomeRules()


DEFAULT_RULES = RulesConfig()
