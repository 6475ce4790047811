"""Tests for base establishment, upgrades and maintenance."""

from dataclasses import replace
from datetime import UTC, datetime, timedelta

import pytest

from hexconquest.domain.bases import (
    apply_starvation,
    build_base,
    establish,
    run_maintenance_cycle,
    upgrade,
)
from hexconquest.domain.enums import FailureReason, MaintenanceOutcome, StarvationPolicy
from hexconquest.domain.errors import InsufficientResources, PreconditionFailed
from hexconquest.domain.models import (
    CellID,
    Coordinate,
    Existing,
    PlayerID,
    ResourceInventory,
)
from hexconquest.domain.rules_config import DEFAULT_RULES
from hexconquest.domain.territory import conquer, default_lookup

NOW = datetime(2024, 5, 1, 12, 0, tzinfo=UTC)
CELL = CellID("89390cb1b4bffff")
PLAYER = PlayerID("main-player")
RICH = ResourceInventory(wood=500, iron=500, stone=500)


def _conquered_lookup() -> Existing:
    outcome = conquer(default_lookup(CELL), PLAYER, Coordinate(40.0, -3.0), RICH, now=NOW)
    return Existing(record=outcome.record)


def _rules(policy: StarvationPolicy):
    return replace(DEFAULT_RULES.bases, starvation_policy=policy)


class TestEstablish:
    def test_level_one_base_on_conquered_cell(self):
        outcome = establish(
            PLAYER, _conquered_lookup(), None, ResourceInventory(wood=30, iron=20, stone=25), now=NOW
        )
        base = outcome.base
        assert outcome.inventory == ResourceInventory()
        assert base.level == 1
        assert base.health == base.max_health == 100
        assert base.resource_generation == ResourceInventory(wood=5, iron=3, stone=4)
        assert base.maintenance_cost == ResourceInventory(wood=2, iron=1, stone=2)
        assert base.last_maintenance == NOW

    def test_unconquered_cell_is_rejected(self):
        with pytest.raises(PreconditionFailed) as excinfo:
            establish(PLAYER, default_lookup(CELL), None, RICH, now=NOW)
        assert excinfo.value.reason == FailureReason.NOT_CONQUERED

    def test_second_base_is_rejected(self):
        with pytest.raises(PreconditionFailed) as excinfo:
            establish(PLAYER, _conquered_lookup(), CellID("other"), RICH, now=NOW)
        assert excinfo.value.reason == FailureReason.ALREADY_HAS_BASE

    def test_cost_must_be_affordable(self):
        with pytest.raises(InsufficientResources):
            establish(
                PLAYER,
                _conquered_lookup(),
                None,
                ResourceInventory(wood=29, iron=20, stone=25),
                now=NOW,
            )


class TestUpgrade:
    def test_upgrade_to_level_two(self):
        base = build_base(PLAYER, CELL, 1, now=NOW)
        base.health = 40
        outcome = upgrade(PLAYER, base, ResourceInventory(wood=50, iron=30, stone=40))
        upgraded = outcome.base
        assert outcome.inventory == ResourceInventory()
        assert upgraded.level == 2
        assert upgraded.max_health == upgraded.health == 250
        assert upgraded.resource_generation == ResourceInventory(wood=8, iron=6, stone=7)
        assert upgraded.maintenance_cost == ResourceInventory(wood=12, iron=8, stone=10)
        assert upgraded.last_maintenance == base.last_maintenance

    def test_foreign_base_is_rejected(self):
        base = build_base(PlayerID("someone-else"), CELL, 1, now=NOW)
        with pytest.raises(PreconditionFailed) as excinfo:
            upgrade(PLAYER, base, RICH)
        assert excinfo.value.reason == FailureReason.NOT_OWNER

    def test_missing_base_counts_as_not_owner(self):
        with pytest.raises(PreconditionFailed) as excinfo:
            upgrade(PLAYER, None, RICH)
        assert excinfo.value.reason == FailureReason.NOT_OWNER

    def test_max_level_is_final(self):
        base = build_base(PLAYER, CELL, 2, now=NOW)
        with pytest.raises(PreconditionFailed) as excinfo:
            upgrade(PLAYER, base, RICH)
        assert excinfo.value.reason == FailureReason.ALREADY_MAX_LEVEL

    def test_cost_must_be_affordable(self):
        with pytest.raises(InsufficientResources):
            upgrade(PLAYER, build_base(PLAYER, CELL, 1, now=NOW), ResourceInventory(wood=49, iron=30, stone=40))


class TestMaintenance:
    def test_sustained_cycle_pays_then_produces(self):
        base = build_base(PLAYER, CELL, 1, now=NOW)
        later = NOW + timedelta(minutes=1)
        result = run_maintenance_cycle(base, ResourceInventory(wood=2, iron=1, stone=2), now=later)
        assert result.outcome == MaintenanceOutcome.SUSTAINED
        assert result.inventory == ResourceInventory(wood=5, iron=3, stone=4)
        assert result.base.last_maintenance == later

    def test_starved_cycle_leaves_inventory_unchanged(self):
        base = build_base(PLAYER, CELL, 1, now=NOW)
        inventory = ResourceInventory(wood=1, iron=1, stone=1)
        result = run_maintenance_cycle(base, inventory, now=NOW + timedelta(minutes=1))
        assert result.outcome == MaintenanceOutcome.STARVED
        assert result.inventory == ResourceInventory(wood=1, iron=1, stone=1)
        assert result.base == base
        assert not result.destroyed

    def test_degrade_policy_costs_health(self):
        rules = _rules(StarvationPolicy.DEGRADE_HEALTH)
        base = build_base(PLAYER, CELL, 1, now=NOW, rules=rules)
        result = run_maintenance_cycle(base, ResourceInventory(), now=NOW, rules=rules)
        assert result.base.health == 90

    def test_degrade_policy_destroys_at_zero_health(self):
        rules = _rules(StarvationPolicy.DEGRADE_HEALTH)
        base = build_base(PLAYER, CELL, 1, now=NOW, rules=rules)
        base.health = 10
        assert apply_starvation(base, rules) is None

    def test_destroy_policy_removes_base(self):
        rules = _rules(StarvationPolicy.DESTROY)
        base = build_base(PLAYER, CELL, 1, now=NOW, rules=rules)
        result = run_maintenance_cycle(base, ResourceInventory(), now=NOW, rules=rules)
        assert result.destroyed
        assert result.outcome == MaintenanceOutcome.STARVED
