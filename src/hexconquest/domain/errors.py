"""Exception hierarchy for the HexConquest engine.

Pure computations (economy, grid) raise these directly.  Player commands
catch them at the session boundary and turn them into ``CommandResult``
failures so the presentation layer can show a specific message.
"""

from __future__ import annotations

from .enums import FailureReason


class HexConquestError(Exception):
    """Base class for every engine error."""

    reason: FailureReason = FailureReason.INVALID_INPUT


class InvalidInput(HexConquestError):
    """Malformed coordinate, resolution or cell identifier."""

    reason = FailureReason.INVALID_INPUT


class InvalidCoordinate(InvalidInput):
    pass


class InvalidResolution(InvalidInput):
    pass


class InvalidCell(InvalidInput):
    pass


class NotFound(HexConquestError):
    """A record that must exist is missing."""

    reason = FailureReason.NOT_FOUND


class PreconditionFailed(HexConquestError):
    """A state precondition of a command does not hold."""

    def __init__(self, reason: FailureReason, message: str | None = None) -> None:
        super().__init__(message or str(reason))
        self.reason = reason


class InsufficientResources(HexConquestError):
    """The inventory cannot pay the requested cost."""

    reason = FailureReason.INSUFFICIENT_RESOURCES


class StoreFailure(HexConquestError):
    """Persistence I/O failed."""

    reason = FailureReason.STORE_FAILURE


class PositionUnavailable(HexConquestError):
    """The position source could not deliver a fix."""

    reason = FailureReason.POSITION_UNAVAILABLE


class PermissionDenied(PositionUnavailable):
    pass


class PositionTimeout(PositionUnavailable):
    pass
