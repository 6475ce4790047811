"""Persistent Store Protocol Interface.

This module defines the protocol for the async key-value store holding
player state, territories, resource zones, bases, position history and
settings.
"""

from typing import Any, Protocol

Payload = dict[str, Any]


class IStore(Protocol):
    """Protocol for an async collection/key/value store.

    Values are JSON-compatible dictionaries.  Every method may raise
    ``StoreFailure`` when the underlying I/O fails.
    """

    async def open(self) -> None:
        """Acquire the underlying connection; safe to call twice."""
        ...

    async def close(self) -> None:
        """Release the underlying connection; safe to call when closed."""
        ...

    async def healthy(self) -> bool:
        """Return True when the store is open and answers a trivial query."""
        ...

    async def get(self, collection: str, key: str) -> Payload | None:
        """Return the stored value or None."""
        ...

    async def put(self, collection: str, key: str, value: Payload) -> None:
        """Insert or overwrite a value."""
        ...

    async def delete(self, collection: str, key: str) -> None:
        """Remove a value if present."""
        ...

    async def get_all(self, collection: str) -> dict[str, Payload]:
        """Return every value of the collection keyed by key, in key order."""
        ...

    async def get_all_where(self, collection: str, field: str, value: Any) -> dict[str, Payload]:
        """Return values whose top-level ``field`` equals ``value``."""
        ...

    async def count(self, collection: str) -> int:
        """Return the number of values in the collection."""
        ...

    async def clear(self, collection: str) -> None:
        """Remove every value of the collection."""
        ...
