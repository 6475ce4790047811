"""Player records and position history."""

from __future__ import annotations

import itertools
import logging

from hexconquest.domain import players as player_rules
from hexconquest.domain.errors import StoreFailure
from hexconquest.domain.models import PlayerID, PlayerState, PositionFix
from hexconquest.domain.rules_config import DEFAULT_RULES, RulesConfig
from hexconquest.interfaces.store import IStore
from hexconquest.repository.codec import (
    PLAYER_CODEC,
    PLAYERS,
    POSITION_CODEC,
    POSITIONS,
    position_key,
)

logger = logging.getLogger(__name__)


class PlayerService:
    """Loads and saves the local player and appends to the position history.

    Position history is bounded to ``history_limit`` entries; the oldest
    entries are trimmed after every ``trim_every`` successful saves.
    """

    def __init__(
        self,
        store: IStore,
        *,
        rules: RulesConfig = DEFAULT_RULES,
        history_limit: int = 100,
        trim_every: int = 10,
    ) -> None:
        self._store = store
        self._rules = rules
        self._history_limit = history_limit
        self._trim_every = trim_every
        self._saves_since_trim = 0
        self._sequence = itertools.count()

    async def load(self, player_id: PlayerID) -> PlayerState | None:
        payload = await self._store.get(PLAYERS, player_id)
        return PLAYER_CODEC.load(payload) if payload is not None else None

    async def load_or_create(self, player_id: PlayerID) -> PlayerState:
        """Return the stored player, creating a fresh one when missing.

        Raises:
            StoreFailure: If the player cannot be read or the new one written
        """
        player = await self.load(player_id)
        if player is not None:
            return player
        player = player_rules.new_player(player_id, self._rules.player)
        await self.save(player)
        logger.info("created player %s", player_id)
        return player

    async def save(self, player: PlayerState) -> None:
        await self._store.put(PLAYERS, player.id, PLAYER_CODEC.dump(player))

    async def record_position(self, fix: PositionFix) -> bool:
        """Append ``fix`` to the history; failures are logged, not raised.

        Returns:
            True when the fix was written
        """
        try:
            key = position_key(fix.timestamp, next(self._sequence))
            await self._store.put(POSITIONS, key, POSITION_CODEC.dump(fix))
        except StoreFailure:
            logger.warning("could not save position fix", exc_info=True)
            return False

        self._saves_since_trim += 1
        if self._saves_since_trim >= self._trim_every:
            self._saves_since_trim = 0
            await self.trim_history()
        return True

    async def trim_history(self) -> int:
        """Delete all but the newest ``history_limit`` fixes.

        Returns:
            Number of deleted entries
        """
        try:
            rows = await self._store.get_all(POSITIONS)
            stale = sorted(rows)[: max(0, len(rows) - self._history_limit)]
            for key in stale:
                await self._store.delete(POSITIONS, key)
        except StoreFailure:
            logger.warning("could not trim position history", exc_info=True)
            return 0
        return len(stale)

    async def position_history(self) -> list[PositionFix]:
        """Oldest-first history; empty when the store cannot be read."""

        try:
            rows = await self._store.get_all(POSITIONS)
            return [POSITION_CODEC.load(rows[key]) for key in sorted(rows)]
        except StoreFailure:
            logger.warning("could not read position history", exc_info=True)
            return []

    async def latest_position(self) -> PositionFix | None:
        history = await self.position_history()
        return history[-1] if history else None
