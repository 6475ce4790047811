"""Tests for great-circle distance."""

import pytest
from hypothesis import given
from hypothesis import strategies as st

from hexconquest.domain.models import Coordinate
from hexconquest.utils.geo import distance_km, great_circle_distance

latitudes = st.floats(min_value=-90, max_value=90, allow_nan=False)
longitudes = st.floats(min_value=-180, max_value=180, allow_nan=False)
coordinates = st.builds(Coordinate, latitude=latitudes, longitude=longitudes)


def test_madrid_to_barcelona_is_about_505_km():
    madrid = Coordinate(40.4168, -3.7038)
    barcelona = Coordinate(41.3874, 2.1686)
    assert distance_km(madrid, barcelona) == pytest.approx(505, rel=0.01)


def test_meters_is_the_default_unit():
    a = Coordinate(0.0, 0.0)
    b = Coordinate(0.0, 1.0)
    assert great_circle_distance(a, b) == pytest.approx(distance_km(a, b) * 1000)


def test_antipodal_points_do_not_fail():
    distance = distance_km(Coordinate(0.0, 0.0), Coordinate(0.0, 180.0))
    assert distance == pytest.approx(20_015, rel=0.001)


@given(coordinates)
def test_distance_to_self_is_zero(point):
    assert great_circle_distance(point, point) == pytest.approx(0.0, abs=1e-6)


@given(coordinates, coordinates)
def test_distance_is_symmetric(a, b):
    assert great_circle_distance(a, b) == pytest.approx(great_circle_distance(b, a), abs=1e-6)
