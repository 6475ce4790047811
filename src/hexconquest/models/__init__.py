"""SQLAlchemy models for the HexConquest store.

This module exports the declarative base and the single record table that
backs every store collection.
"""

from .base import Base, TimestampMixin, utc_now
from .record import StoredRecord

__all__ = [
    "Base",
    "StoredRecord",
    "TimestampMixin",
    "utc_now",
]
