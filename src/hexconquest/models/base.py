"""Declarative base and the row timestamp mixin for the store schema."""

from datetime import UTC, datetime
from typing import ClassVar

from sqlalchemy import DateTime
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


def utc_now() -> datetime:
    """Timezone-aware current time; the default clock of every service."""
    return datetime.now(UTC)


def as_utc(value: datetime) -> datetime:
    """Treat a naive ``value`` as UTC; aware values are returned unchanged."""
    if value.tzinfo is None or value.utcoffset() is None:
        return value.replace(tzinfo=UTC)
    return value


class Base(DeclarativeBase):
    """Declarative base mapping ``datetime`` annotations to aware columns."""

    type_annotation_map: ClassVar[dict] = {
        datetime: DateTime(timezone=True),
    }


class TimestampMixin:
    """Adds ``created_at``/``updated_at`` set from :func:`utc_now` on write."""

    created_at: Mapped[datetime] = mapped_column(nullable=False, default=utc_now)
    updated_at: Mapped[datetime] = mapped_column(
        nullable=False, default=utc_now, onupdate=utc_now
    )
