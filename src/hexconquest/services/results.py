"""Result types returned by player commands."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, TypeVar

from hexconquest.domain.enums import FailureReason
from hexconquest.domain.errors import HexConquestError

T = TypeVar("T")


@dataclass(slots=True)
class CommandResult(Generic[T]):
    """Outcome of a command issued by the presentation layer.

    ``reason`` is set exactly when ``ok`` is False.
    """

    ok: bool
    value: T | None = None
    reason: FailureReason | None = None
    message: str | None = None

    @classmethod
    def success(cls, value: T | None = None) -> CommandResult[T]:
        return cls(ok=True, value=value)

    @classmethod
    def failure(cls, reason: FailureReason, message: str | None = None) -> CommandResult[T]:
        return cls(ok=False, reason=reason, message=message or str(reason))

    @classmethod
    def from_error(cls, error: HexConquestError) -> CommandResult[T]:
        return cls.failure(error.reason, str(error) or None)
