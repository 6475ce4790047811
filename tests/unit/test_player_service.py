"""Tests for the player service and position history."""

from __future__ import annotations

from datetime import timedelta

import pytest
from conftest import START, make_fix

from hexconquest.domain.errors import StoreFailure
from hexconquest.domain.models import PlayerID
from hexconquest.repository.codec import PLAYERS, POSITIONS
from hexconquest.services.player_service import PlayerService

PLAYER = PlayerID("main-player")


@pytest.mark.asyncio
async def test_load_or_create_creates_once(store):
    service = PlayerService(store)
    created = await service.load_or_create(PLAYER)
    created.score = 30
    await service.save(created)

    loaded = await service.load_or_create(PLAYER)
    assert loaded.score == 30
    assert list(store.data[PLAYERS]) == [PLAYER]


@pytest.mark.asyncio
async def test_load_or_create_propagates_store_failure(store):
    store.fail_reads.add(PLAYERS)
    with pytest.raises(StoreFailure):
        await PlayerService(store).load_or_create(PLAYER)


@pytest.mark.asyncio
async def test_history_is_oldest_first(store):
    service = PlayerService(store)
    for minutes in (3, 1, 2):
        await service.record_position(make_fix(at=START + timedelta(minutes=minutes)))
    history = await service.position_history()
    assert [fix.timestamp for fix in history] == [
        START + timedelta(minutes=1),
        START + timedelta(minutes=2),
        START + timedelta(minutes=3),
    ]
    assert (await service.latest_position()).timestamp == START + timedelta(minutes=3)


@pytest.mark.asyncio
async def test_fixes_with_the_same_timestamp_are_all_kept(store):
    service = PlayerService(store)
    await service.record_position(make_fix(lat=40.0))
    await service.record_position(make_fix(lat=41.0))

    history = await service.position_history()
    assert [fix.latitude for fix in history] == [40.0, 41.0]
    assert (await service.latest_position()).latitude == 41.0


@pytest.mark.asyncio
async def test_history_is_trimmed_periodically(store):
    service = PlayerService(store, history_limit=5, trim_every=10)
    for second in range(9):
        await service.record_position(make_fix(at=START + timedelta(seconds=second)))
    assert len(store.data[POSITIONS]) == 9

    await service.record_position(make_fix(at=START + timedelta(seconds=9)))
    history = await service.position_history()
    assert len(history) == 5
    assert history[0].timestamp == START + timedelta(seconds=5)


@pytest.mark.asyncio
async def test_failed_position_write_is_swallowed(store):
    store.fail_writes.add(POSITIONS)
    service = PlayerService(store)
    assert await service.record_position(make_fix()) is False

    store.fail_reads.add(POSITIONS)
    assert await service.position_history() == []
