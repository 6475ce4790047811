"""Persistence adapters for the HexConquest engine."""

from .codec import (
    BASES,
    PLAYERS,
    POSITIONS,
    RESOURCE_ZONES,
    SETTINGS,
    TERRITORIES,
)
from .sql_store import SqlStore

__all__ = [
    "BASES",
    "PLAYERS",
    "POSITIONS",
    "RESOURCE_ZONES",
    "SETTINGS",
    "TERRITORIES",
    "SqlStore",
]
