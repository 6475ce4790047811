"""Service Factory for HexConquest.

This module provides factory functions for creating service instances with
proper dependency wiring. Use these functions in production code to ensure
all service dependencies are correctly initialized.

For testing, inject protocol-based fakes instead of using these factories.

Example:
    # Production usage
    from hexconquest.factory import create_game_session
    session = create_game_session(store, settings=settings)

    # Testing usage
    from hexconquest.services.territory_service import TerritoryLedger

    ledger = TerritoryLedger(FakeStore(), clock=fixed_clock)
"""

from __future__ import annotations

import random
from collections.abc import Callable
from dataclasses import replace
from datetime import datetime, timedelta

from hexconquest.config import Settings, get_settings
from hexconquest.domain.models import PlayerID
from hexconquest.domain.rules_config import DEFAULT_RULES, HomeRules, RulesConfig
from hexconquest.interfaces.position import IPositionSource
from hexconquest.interfaces.store import IStore
from hexconquest.models.base import utc_now
from hexconquest.services.base_service import BaseManager
from hexconquest.services.game_service import GameSession, SessionLimits
from hexconquest.services.home_service import HomeTracker
from hexconquest.services.player_service import PlayerService
from hexconquest.services.territory_service import TerritoryLedger
from hexconquest.services.zone_service import ResourceZoneManager
from hexconquest.utils.hex_grid import HexGrid


def create_rules(settings: Settings, base: RulesConfig = DEFAULT_RULES) -> RulesConfig:
    """Apply the rule overrides exposed as settings.

    Args:
        settings: Application settings
        base: Rules to start from

    Returns:
        Rules with the configured starvation policy and home threshold
    """
    return replace(
        base,
        bases=replace(base.bases, starvation_policy=settings.starvation_policy),
        home=HomeRules(threshold_km=settings.home_threshold_km),
    )


def create_grid(settings: Settings) -> HexGrid:
    return HexGrid(resolution=settings.h3_resolution)


def create_game_session(
    store: IStore,
    *,
    settings: Settings | None = None,
    rules: RulesConfig | None = None,
    position_source: IPositionSource | None = None,
    grid: HexGrid | None = None,
    clock: Callable[[], datetime] = utc_now,
    rng: random.Random | None = None,
) -> GameSession:
    """Create a GameSession with all dependencies.

    Args:
        store: Opened persistent store shared by every service
        settings: Application settings, defaults to the cached settings
        rules: Game rules, defaults to ``create_rules(settings)``
        position_source: Source used by ``refresh_position``
        grid: Hex grid adapter, defaults to h3 at the configured resolution
        clock: Source of the current time
        rng: Random generator for zone placement and collection

    Returns:
        Fully initialized GameSession (call ``bootstrap`` before commands)
    """
    settings = settings or get_settings()
    rules = rules or create_rules(settings)
    ledger = TerritoryLedger(store, rules=rules, clock=clock)
    return GameSession(
        PlayerID(settings.player_id),
        grid=grid or create_grid(settings),
        players=PlayerService(
            store,
            rules=rules,
            history_limit=settings.position_history_limit,
            trim_every=settings.position_trim_every,
        ),
        ledger=ledger,
        zones=ResourceZoneManager(store, rules=rules, clock=clock, rng=rng),
        bases=BaseManager(store, ledger, rules=rules, clock=clock),
        homes=HomeTracker(store, rules=rules, clock=clock),
        position_source=position_source,
        rules=rules,
        limits=SessionLimits(
            max_radius=settings.max_radius,
            max_hexagons=settings.max_hexagons,
            zone_count=settings.zone_count,
            stale_after=timedelta(seconds=settings.position_stale_seconds),
        ),
        clock=clock,
    )
