"""Position Source Protocol Interface.

This module defines the protocol for whatever supplies the player's
geographic position: a device feed, a client pushing fixes over HTTP, or a
fake in tests.
"""

from collections.abc import Awaitable, Callable
from typing import Protocol

from hexconquest.domain.errors import PositionUnavailable
from hexconquest.domain.models import PositionFix

PositionCallback = Callable[[PositionFix], Awaitable[None]]
ErrorCallback = Callable[[PositionUnavailable], Awaitable[None]]


class IPositionSource(Protocol):
    """Protocol for one-shot and continuous position delivery."""

    async def get_once(self) -> PositionFix:
        """Return a current fix.

        Raises:
            PositionUnavailable: No fix could be obtained
            PermissionDenied: The user refused location access
            PositionTimeout: No fix arrived in time
        """
        ...

    def watch(self, on_update: PositionCallback, on_error: ErrorCallback) -> int:
        """Subscribe to fixes and return a handle for ``cancel``."""
        ...

    def cancel(self, handle: int) -> None:
        """Stop a subscription; unknown or cancelled handles are ignored."""
        ...
