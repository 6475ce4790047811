"""Tests for the hex grid adapter over h3."""

import math

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from hexconquest.domain.errors import InvalidCell, InvalidCoordinate, InvalidResolution
from hexconquest.domain.models import CellID, Coordinate
from hexconquest.utils.hex_grid import HexGrid

MADRID = Coordinate(40.4168, -3.7038)


@pytest.fixture
def grid() -> HexGrid:
    return HexGrid()


class TestCellFor:
    def test_same_point_gives_same_cell(self, grid):
        assert grid.cell_for(MADRID) == grid.cell_for(MADRID)
        assert grid.is_valid(grid.cell_for(MADRID))

    def test_center_of_cell_resolves_to_that_cell(self, grid):
        cell = grid.cell_for(MADRID)
        assert grid.cell_for(grid.center(cell)) == cell

    def test_explicit_resolution_is_used(self, grid):
        coarse = grid.cell_for(MADRID, resolution=5)
        fine = grid.cell_for(MADRID, resolution=9)
        assert coarse != fine

    @pytest.mark.parametrize(
        "coordinate",
        [
            Coordinate(math.nan, 0.0),
            Coordinate(0.0, math.inf),
            Coordinate(91.0, 0.0),
        ],
    )
    def test_invalid_coordinates_are_rejected(self, grid, coordinate):
        with pytest.raises(InvalidCoordinate):
            grid.cell_for(coordinate)

    @pytest.mark.parametrize("resolution", [-1, 16, True])
    def test_invalid_resolutions_are_rejected(self, grid, resolution):
        with pytest.raises(InvalidResolution):
            grid.cell_for(MADRID, resolution=resolution)

    def test_adapter_rejects_invalid_default_resolution(self):
        with pytest.raises(InvalidResolution):
            HexGrid(resolution=20)

    @settings(max_examples=50)
    @given(
        lat=st.floats(min_value=-85, max_value=85, allow_nan=False),
        lng=st.floats(min_value=-179, max_value=179, allow_nan=False),
    )
    def test_cell_center_round_trips(self, lat, lng):
        grid = HexGrid()
        cell = grid.cell_for(Coordinate(lat, lng))
        assert grid.cell_for(grid.center(cell)) == cell


class TestNeighborhood:
    def test_radius_zero_is_the_center(self, grid):
        cell = grid.cell_for(MADRID)
        assert grid.neighborhood(cell, 0) == [cell]

    def test_ring_sizes(self, grid):
        cell = grid.cell_for(MADRID)
        assert len(grid.neighborhood(cell, 1)) == 7
        assert len(grid.neighborhood(cell, 2)) == 19

    def test_center_comes_first(self, grid):
        cell = grid.cell_for(MADRID)
        assert grid.neighborhood(cell, 3)[0] == cell

    def test_truncation_keeps_the_closest_cells(self, grid):
        cell = grid.cell_for(MADRID)
        first_ring = set(grid.neighborhood(cell, 1))
        limited = grid.neighborhood(cell, 3, limit=10)
        assert len(limited) == 10
        assert first_ring <= set(limited)

    def test_truncation_is_stable(self, grid):
        cell = grid.cell_for(MADRID)
        assert grid.neighborhood(cell, 4, limit=25) == grid.neighborhood(cell, 4, limit=25)

    def test_negative_radius_is_rejected(self, grid):
        with pytest.raises(ValueError):
            grid.neighborhood(grid.cell_for(MADRID), -1)

    def test_invalid_center_is_rejected(self, grid):
        with pytest.raises(InvalidCell):
            grid.neighborhood(CellID("not-a-cell"), 1)


class TestBoundary:
    def test_boundary_is_a_closed_hexagon(self, grid):
        ring = grid.boundary(grid.cell_for(MADRID))
        assert len(ring) == 7
        assert ring[0] == ring[-1]

    def test_boundary_surrounds_the_input_point(self, grid):
        ring = grid.boundary(grid.cell_for(MADRID))
        lats = [point.latitude for point in ring]
        lngs = [point.longitude for point in ring]
        assert min(lats) <= MADRID.latitude <= max(lats)
        assert min(lngs) <= MADRID.longitude <= max(lngs)

    def test_malformed_cell_is_rejected(self, grid):
        with pytest.raises(InvalidCell):
            grid.boundary(CellID("zzz"))
