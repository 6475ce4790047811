"""Runtime primitives backing the HexConquest HTTP API."""

from __future__ import annotations

import logging
import random
from collections.abc import Callable
from datetime import datetime, timedelta

from hexconquest.config import Settings, get_settings
from hexconquest.domain.rules_config import RulesConfig
from hexconquest.factory import create_game_session, create_rules
from hexconquest.interfaces.store import IStore
from hexconquest.models.base import utc_now
from hexconquest.positions import PushPositionSource
from hexconquest.repository import SqlStore
from hexconquest.services import GameSession, PositionTracker, SimulationClock

logger = logging.getLogger(__name__)


class ApiState:
    """Aggregated services shared by the FastAPI layer.

    Construction only wires objects together; ``startup`` opens the store,
    loads the player and starts the background drivers, ``shutdown`` undoes
    that in reverse order.  Both are safe to call more than once.
    """

    def __init__(
        self,
        *,
        settings: Settings | None = None,
        rules: RulesConfig | None = None,
        store: IStore | None = None,
        clock: Callable[[], datetime] = utc_now,
        rng: random.Random | None = None,
        autostart_clock: bool = True,
    ) -> None:
        self.settings = settings or get_settings()
        self.rules = rules or create_rules(self.settings)
        self.store: IStore = store or SqlStore(
            self.settings.database_url, echo=self.settings.database_echo
        )
        self.positions = PushPositionSource(
            timeout_seconds=self.settings.position_timeout_seconds,
            maximum_age=timedelta(seconds=self.settings.position_stale_seconds),
            clock=clock,
        )
        self.session: GameSession = create_game_session(
            self.store,
            settings=self.settings,
            rules=self.rules,
            position_source=self.positions,
            clock=clock,
            rng=rng,
        )
        self.ticks = SimulationClock(
            self.session.run_tick,
            base_interval_seconds=self.settings.tick_interval_seconds,
            debug_multiplier=self.settings.debug_tick_speed_multiplier,
            clock=clock,
        )
        self.tracker = PositionTracker(self.positions, self.session)
        self._autostart_clock = autostart_clock
        self._started = False

    async def startup(self) -> None:
        if self._started:
            return
        await self.store.open()
        await self.session.bootstrap()
        self.tracker.start()
        if self._autostart_clock:
            self.ticks.start()
        self._started = True
        logger.info("engine started for player %s", self.session.player_id)

    async def shutdown(self) -> None:
        self.tracker.stop()
        await self.ticks.stop()
        await self.store.close()
        self._started = False


def build_state() -> ApiState:
    """Factory used by the API to initialize state."""

    return ApiState()
