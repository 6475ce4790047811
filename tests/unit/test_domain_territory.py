"""Tests for conquest rules."""

from datetime import UTC, datetime

import pytest

from hexconquest.domain.enums import FailureReason
from hexconquest.domain.errors import InsufficientResources, PreconditionFailed
from hexconquest.domain.models import (
    CellID,
    Coordinate,
    Existing,
    PlayerID,
    ResourceCost,
    ResourceInventory,
)
from hexconquest.domain.territory import conquer, default_lookup, default_record

NOW = datetime(2024, 5, 1, 12, 0, tzinfo=UTC)
CELL = CellID("89390cb1b4bffff")
PLAYER = PlayerID("main-player")
HERE = Coordinate(40.4168, -3.7038)


def test_default_record_uses_standard_costs():
    record = default_record(CELL)
    assert record.conquered is False
    assert record.conquered_by is None
    assert record.conquest_cost == ResourceCost(wood=10, iron=5, stone=8)
    assert record.maintenance_cost == ResourceCost(wood=2, iron=1, stone=2)


def test_default_lookup_is_tagged():
    lookup = default_lookup(CELL)
    assert lookup.is_default
    assert lookup.cell == CELL


def test_conquest_debits_cost_and_marks_owner():
    outcome = conquer(
        default_lookup(CELL), PLAYER, HERE, ResourceInventory(wood=50, iron=30, stone=40), now=NOW
    )
    assert outcome.inventory == ResourceInventory(wood=40, iron=25, stone=32)
    assert outcome.record.conquered is True
    assert outcome.record.conquered_by == PLAYER
    assert outcome.record.conquered_at == NOW
    assert outcome.record.center == HERE


def test_conquered_cell_cannot_be_taken_again():
    first = conquer(
        default_lookup(CELL), PLAYER, HERE, ResourceInventory(wood=50, iron=30, stone=40), now=NOW
    )
    with pytest.raises(PreconditionFailed) as excinfo:
        conquer(Existing(record=first.record), PlayerID("other"), HERE, first.inventory, now=NOW)
    assert excinfo.value.reason == FailureReason.ALREADY_CONQUERED


def test_already_conquered_is_checked_before_resources():
    first = conquer(
        default_lookup(CELL), PLAYER, HERE, ResourceInventory(wood=50, iron=30, stone=40), now=NOW
    )
    with pytest.raises(PreconditionFailed):
        conquer(Existing(record=first.record), PLAYER, HERE, ResourceInventory(), now=NOW)


def test_conquest_without_resources_fails():
    with pytest.raises(InsufficientResources):
        conquer(default_lookup(CELL), PLAYER, HERE, ResourceInventory(wood=9, iron=5, stone=8), now=NOW)
