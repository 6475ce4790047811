"""Great-circle distance on a spherical Earth.

The engine uses the Haversine formula in two units: meters for cell and
position distances, kilometers for the away-from-home check.  Both share the
same shape:

    a = sin²(Δφ/2) + cos φ1 · cos φ2 · sin²(Δλ/2)
    d = 2 · atan2(√a, √(1 − a)) · R
"""

from __future__ import annotations

import math
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from hexconquest.domain.models import Coordinate

EARTH_RADIUS_M = 6_371_000.0
EARTH_RADIUS_KM = 6_371.0


def great_circle_distance(
    a: Coordinate, b: Coordinate, *, radius: float = EARTH_RADIUS_M
) -> float:
    """
    Return the Haversine distance between two coordinates.

    Args:
        a: First coordinate
        b: Second coordinate
        radius: Sphere radius; selects the unit of the result (meters by default)

    Returns:
        Distance along the sphere surface, in the unit of ``radius``

    Example:
        >>> paris = Coordinate(48.8566, 2.3522)
        >>> round(great_circle_distance(paris, paris), 3)
        0.0
    """
    phi1 = math.radians(a.latitude)
    phi2 = math.radians(b.latitude)
    d_phi = math.radians(b.latitude - a.latitude)
    d_lambda = math.radians(b.longitude - a.longitude)

    h = (
        math.sin(d_phi / 2) ** 2
        + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    )
    # Float error can push h a hair above 1 for antipodal points
    h = min(1.0, max(0.0, h))
    return 2 * math.atan2(math.sqrt(h), math.sqrt(1 - h)) * radius


def distance_km(a: Coordinate, b: Coordinate) -> float:
    """Haversine distance in kilometers."""
    return great_circle_distance(a, b, radius=EARTH_RADIUS_KM)
