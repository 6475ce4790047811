"""Subscription of the game session to a position source."""

from __future__ import annotations

import logging

from hexconquest.interfaces.position import IPositionSource
from hexconquest.services.game_service import GameSession

logger = logging.getLogger(__name__)


class PositionTracker:
    """Feeds every fix from ``source`` into ``session``.

    ``start`` and ``stop`` are idempotent: a second ``start`` keeps the
    existing watch and ``stop`` without a watch does nothing.
    """

    def __init__(self, source: IPositionSource, session: GameSession) -> None:
        self._source = source
        self._session = session
        self._handle: int | None = None

    @property
    def watching(self) -> bool:
        return self._handle is not None

    def start(self) -> None:
        if self._handle is not None:
            return
        self._handle = self._source.watch(
            self._session.on_position_update, self._session.on_position_error
        )
        logger.debug("watching position source (handle %s)", self._handle)

    def stop(self) -> None:
        handle, self._handle = self._handle, None
        if handle is not None:
            self._source.cancel(handle)
