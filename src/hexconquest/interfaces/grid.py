"""Hex Grid Index Protocol Interface.

This module defines the protocol for the global hexagonal tessellation the
engine runs on.  The default implementation wraps the ``h3`` library (see
:mod:`hexconquest.utils.hex_grid`).
"""

from typing import Protocol


class IHexGridIndex(Protocol):
    """Protocol for a discrete global hex grid.

    Cells are opaque string identifiers scoped to a resolution.  Coordinates
    are exchanged as ``(lat, lng)`` tuples in decimal degrees.
    """

    min_resolution: int
    max_resolution: int

    def cell_for(self, lat: float, lng: float, resolution: int) -> str:
        """Return the cell containing the coordinate at ``resolution``."""
        ...

    def boundary(self, cell: str) -> list[tuple[float, float]]:
        """Return the open ring of vertices describing the cell outline."""
        ...

    def center(self, cell: str) -> tuple[float, float]:
        """Return the centroid of the cell."""
        ...

    def disk(self, cell: str, k: int) -> list[str]:
        """Return every cell within ``k`` steps of ``cell``, center included."""
        ...

    def grid_distance(self, a: str, b: str) -> int:
        """Return the number of steps between two cells."""
        ...

    def is_valid(self, cell: str) -> bool:
        """Return True when ``cell`` is a well-formed identifier."""
        ...
