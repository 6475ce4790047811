"""Protocol interfaces for the external collaborators of the engine.

This package defines Protocol interfaces (structural typing) for the
collaborators the engine consumes, enabling:
- Dependency inversion: services depend on protocols, not implementations
- Testability: easy to inject fake stores, grids and position sources
- Swappability: the h3 grid or SQL store can be replaced without touching rules

Usage:
    from hexconquest.interfaces import IStore

    class LedgerService:
        def __init__(self, store: IStore):
            self.store = store
"""

from hexconquest.interfaces.grid import IHexGridIndex
from hexconquest.interfaces.position import ErrorCallback, IPositionSource, PositionCallback
from hexconquest.interfaces.store import IStore, Payload

__all__ = [
    "ErrorCallback",
    "IHexGridIndex",
    "IPositionSource",
    "IStore",
    "Payload",
    "PositionCallback",
]
