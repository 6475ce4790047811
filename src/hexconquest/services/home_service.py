"""Home tracker service.

Home coordinates live in the ``settings`` collection under
``home_base:<player_id>``.  Settings I/O is non-critical: failed writes are
logged and the in-memory copy still applies for the rest of the session.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime

from hexconquest.domain import home as home_rules
from hexconquest.domain.errors import StoreFailure
from hexconquest.domain.models import Coordinate, HomeBase, PlayerID
from hexconquest.domain.rules_config import DEFAULT_RULES, RulesConfig
from hexconquest.interfaces.store import IStore
from hexconquest.models.base import utc_now
from hexconquest.repository.codec import HOME_CODEC, SETTINGS, home_key

logger = logging.getLogger(__name__)


class HomeTracker:
    """Remembers each player's home and answers away-from-home checks."""

    def __init__(
        self,
        store: IStore,
        *,
        rules: RulesConfig = DEFAULT_RULES,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._store = store
        self._rules = rules
        self._clock = clock
        self._homes: dict[PlayerID, HomeBase] = {}

    async def set_home(self, player_id: PlayerID, coordinate: Coordinate) -> HomeBase:
        """Overwrite the player's home with ``coordinate``."""

        home = HomeBase(player_id=player_id, position=coordinate, saved_at=self._clock())
        self._homes[player_id] = home
        try:
            await self._store.put(SETTINGS, home_key(player_id), HOME_CODEC.dump(home))
        except StoreFailure:
            logger.warning("could not persist home for player %s", player_id, exc_info=True)
        return home

    async def get_home(self, player_id: PlayerID) -> HomeBase | None:
        cached = self._homes.get(player_id)
        if cached is not None:
            return cached
        try:
            payload = await self._store.get(SETTINGS, home_key(player_id))
            if payload is None:
                return None
            home = HOME_CODEC.load(payload)
        except StoreFailure:
            logger.warning("could not read home for player %s", player_id, exc_info=True)
            return None
        self._homes[player_id] = home
        return home

    async def is_away_from_home(
        self,
        player_id: PlayerID,
        current: Coordinate,
        threshold_km: float | None = None,
    ) -> bool:
        """True when ``current`` is farther than the threshold from home.

        Returns False when the player has no home.
        """
        limit = threshold_km if threshold_km is not None else self._rules.home.threshold_km
        home = await self.get_home(player_id)
        return home_rules.is_away_from_home(home, current, limit)
