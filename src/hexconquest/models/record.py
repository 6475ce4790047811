"""Stored record model for the HexConquest key-value store.

Every collection (players, territories, resource zones, bases, positions,
settings) shares one table; rows are addressed by ``(collection, key)``.
"""

from typing import Any

from sqlalchemy import JSON, Index, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, TimestampMixin


class StoredRecord(Base, TimestampMixin):
    """Represents one value in one collection of the store.

    Attributes:
        id: Primary key
        collection: Logical collection name (e.g. ``territories``)
        key: Key of the value inside its collection (cell id, player id, ...)
        payload: JSON document holding the serialized domain object
    """

    __tablename__ = "records"

    # Primary key
    id: Mapped[int] = mapped_column(Integer, primary_key=True)

    # Addressing
    collection: Mapped[str] = mapped_column(String, nullable=False)
    key: Mapped[str] = mapped_column(String, nullable=False)

    # Value
    payload: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False)

    # Table constraints
    __table_args__ = (
        UniqueConstraint("collection", "key", name="uq_records_collection_key"),
        Index("idx_records_collection", "collection"),
    )

    def __repr__(self) -> str:
        return f"<StoredRecord(collection='{self.collection}', key='{self.key}')>"
