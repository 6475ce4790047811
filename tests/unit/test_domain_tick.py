"""Tests for the in-memory simulation tick."""

from datetime import UTC, datetime, timedelta

from hexconquest.domain.bases import build_base
from hexconquest.domain.enums import MaintenanceOutcome, ResourceType
from hexconquest.domain.models import CellID, PlayerID, ResourceInventory, ResourceZone
from hexconquest.domain.tick import run_tick

NOW = datetime(2024, 5, 1, 12, 0, tzinfo=UTC)


def _zone(cell: str, at: datetime) -> ResourceZone:
    return ResourceZone(
        cell=CellID(cell),
        resource_type=ResourceType.WOOD,
        amount=50,
        regeneration_rate=10,
        last_regeneration=at,
    )


def test_only_due_zones_are_reported():
    stale = _zone("a", NOW - timedelta(hours=2))
    fresh = _zone("b", NOW - timedelta(minutes=10))
    result = run_tick([stale, fresh], None, ResourceInventory(), now=NOW)
    assert [zone.cell for zone in result.regenerated] == ["a"]
    assert result.regenerated[0].amount == 70
    assert result.maintenance is None


def test_base_maintenance_runs_when_base_exists():
    base = build_base(PlayerID("p"), CellID("c"), 1, now=NOW)
    result = run_tick([], base, ResourceInventory(wood=10, iron=10, stone=10), now=NOW)
    assert result.maintenance == MaintenanceOutcome.SUSTAINED
    assert result.inventory == ResourceInventory(wood=13, iron=12, stone=12)
    assert result.base_destroyed is False


def test_starved_tick_keeps_inventory():
    base = build_base(PlayerID("p"), CellID("c"), 1, now=NOW)
    result = run_tick([], base, ResourceInventory(wood=1, iron=1, stone=1), now=NOW)
    assert result.maintenance == MaintenanceOutcome.STARVED
    assert result.inventory == ResourceInventory(wood=1, iron=1, stone=1)
