"""Tests for the home tracker."""

from __future__ import annotations

import pytest

from hexconquest.domain.models import Coordinate, PlayerID
from hexconquest.repository.codec import SETTINGS, home_key
from hexconquest.services.home_service import HomeTracker

PLAYER = PlayerID("main-player")
HOME = Coordinate(40.4168, -3.7038)
FAR = Coordinate(40.4168 + 10 / 111.19, -3.7038)


@pytest.mark.asyncio
async def test_home_is_stored_under_settings_key(store, clock):
    tracker = HomeTracker(store, clock=clock)
    home = await tracker.set_home(PLAYER, HOME)
    assert home.saved_at == clock.now
    assert home_key(PLAYER) in store.data[SETTINGS]

    fresh = HomeTracker(store, clock=clock)
    assert (await fresh.get_home(PLAYER)).position == HOME


@pytest.mark.asyncio
async def test_failed_home_write_keeps_in_memory_copy(store, clock):
    store.fail_writes.add(SETTINGS)
    tracker = HomeTracker(store, clock=clock)
    await tracker.set_home(PLAYER, HOME)
    assert (await tracker.get_home(PLAYER)).position == HOME
    assert await tracker.is_away_from_home(PLAYER, FAR) is True


@pytest.mark.asyncio
async def test_failed_home_read_means_no_home(store, clock):
    store.fail_reads.add(SETTINGS)
    tracker = HomeTracker(store, clock=clock)
    assert await tracker.get_home(PLAYER) is None
    assert await tracker.is_away_from_home(PLAYER, FAR) is False


@pytest.mark.asyncio
async def test_threshold_override(store, clock):
    tracker = HomeTracker(store, clock=clock)
    await tracker.set_home(PLAYER, HOME)
    assert await tracker.is_away_from_home(PLAYER, FAR) is True
    assert await tracker.is_away_from_home(PLAYER, FAR, threshold_km=15) is False
