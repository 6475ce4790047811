"""Position source implementations."""

from .source import PushPositionSource

__all__ = ["PushPositionSource"]
