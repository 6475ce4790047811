"""
Hex grid adapter over the global H3 tessellation.

This module is the thin seam between the engine and the external hex index.
It supports:
- Resolving the cell under a coordinate
- Expanding a cell into its k-ring neighborhood, capped in size
- Looking up a cell's boundary polygon and center

Cell identifiers are H3 index strings.  Resolution 9 gives cells roughly
50-100 meters across, which is the default for standing-in-a-cell gameplay.

References:
-----------
H3 documentation: https://h3geo.org/docs/
"""

from __future__ import annotations

import math

import h3

from hexconquest.domain.errors import InvalidCell, InvalidCoordinate, InvalidResolution
from hexconquest.domain.models import CellID, Coordinate
from hexconquest.interfaces.grid import IHexGridIndex

DEFAULT_RESOLUTION = 9


class H3GridIndex:
    """``IHexGridIndex`` implementation backed by the h3 library."""

    min_resolution = 0
    max_resolution = 15

    def cell_for(self, lat: float, lng: float, resolution: int) -> str:
        return h3.latlng_to_cell(lat, lng, resolution)

    def boundary(self, cell: str) -> list[tuple[float, float]]:
        return [(lat, lng) for lat, lng in h3.cell_to_boundary(cell)]

    def center(self, cell: str) -> tuple[float, float]:
        lat, lng = h3.cell_to_latlng(cell)
        return lat, lng

    def disk(self, cell: str, k: int) -> list[str]:
        return list(h3.grid_disk(cell, k))

    def grid_distance(self, a: str, b: str) -> int:
        return h3.grid_distance(a, b)

    def is_valid(self, cell: str) -> bool:
        return isinstance(cell, str) and h3.is_valid_cell(cell)


class HexGrid:
    """
    Engine-facing operations on the hex grid.

    Wraps an ``IHexGridIndex`` and adds input validation, closed boundary
    rings, and deterministic truncation of oversized neighborhoods.

    Example:
        >>> grid = HexGrid()
        >>> cell = grid.cell_for(Coordinate(40.4168, -3.7038))
        >>> cell in grid.neighborhood(cell, 1)
        True
    """

    def __init__(
        self,
        index: IHexGridIndex | None = None,
        *,
        resolution: int = DEFAULT_RESOLUTION,
    ) -> None:
        self._index = index or H3GridIndex()
        self._check_resolution(resolution)
        self.resolution = resolution

    def cell_for(self, coordinate: Coordinate, resolution: int | None = None) -> CellID:
        """
        Return the cell containing ``coordinate``.

        Args:
            coordinate: Point to resolve
            resolution: Grid resolution, defaults to the adapter's resolution

        Returns:
            The identifier of the containing cell

        Raises:
            InvalidCoordinate: If latitude or longitude is not finite
            InvalidResolution: If resolution is outside the index's range
        """
        res = self.resolution if resolution is None else resolution
        self._check_resolution(res)
        lat, lng = coordinate.latitude, coordinate.longitude
        if not _is_finite_number(lat) or not _is_finite_number(lng):
            raise InvalidCoordinate(f"Invalid coordinates: lat={lat}, lng={lng}")
        if not -90.0 <= lat <= 90.0:
            raise InvalidCoordinate(f"Latitude out of range: {lat}")
        return CellID(self._index.cell_for(lat, lng, res))

    def neighborhood(self, center: CellID, radius: int, limit: int | None = None) -> list[CellID]:
        """
        Return all cells within ``radius`` steps of ``center``, closest first.

        The result always starts with ``center``.  When ``limit`` is given and
        the ring is larger, cells are ordered by grid distance (ties broken by
        identifier) before truncating, so the kept set does not depend on the
        order the index happens to return.

        Raises:
            InvalidCell: If ``center`` is malformed
            ValueError: If ``radius`` is negative
        """
        self._check_cell(center)
        if radius < 0:
            msg = f"Radius must be non-negative, got {radius}"
            raise ValueError(msg)

        cells = self._index.disk(center, radius)
        ordered = sorted(cells, key=lambda cell: (self._distance_or_inf(center, cell), cell))
        if limit is not None and len(ordered) > limit:
            ordered = ordered[:limit]
        return [CellID(cell) for cell in ordered]

    def boundary(self, cell: CellID) -> list[Coordinate]:
        """Return the closed outline of ``cell`` (first vertex repeated last)."""
        self._check_cell(cell)
        ring = [Coordinate(latitude=lat, longitude=lng) for lat, lng in self._index.boundary(cell)]
        if ring and ring[0] != ring[-1]:
            ring.append(ring[0])
        return ring

    def center(self, cell: CellID) -> Coordinate:
        """Return the centroid of ``cell``."""
        self._check_cell(cell)
        lat, lng = self._index.center(cell)
        return Coordinate(latitude=lat, longitude=lng)

    def is_valid(self, cell: str) -> bool:
        return self._index.is_valid(cell)

    def _check_cell(self, cell: str) -> None:
        if not self._index.is_valid(cell):
            raise InvalidCell(f"Invalid cell identifier: {cell!r}")

    def _check_resolution(self, resolution: int) -> None:
        if (
            isinstance(resolution, bool)
            or not isinstance(resolution, int)
            or not self._index.min_resolution <= resolution <= self._index.max_resolution
        ):
            raise InvalidResolution(
                f"Invalid resolution: {resolution}. Must be between "
                f"{self._index.min_resolution} and {self._index.max_resolution}"
            )

    def _distance_or_inf(self, a: str, b: str) -> float:
        try:
            return self._index.grid_distance(a, b)
        except Exception:  # noqa: BLE001 - h3 cannot measure across some pentagons
            return math.inf


def _is_finite_number(value: object) -> bool:
    return isinstance(value, int | float) and not isinstance(value, bool) and math.isfinite(value)
