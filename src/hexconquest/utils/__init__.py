"""Utility modules for the HexConquest engine."""

from hexconquest.utils.geo import EARTH_RADIUS_KM, EARTH_RADIUS_M, distance_km, great_circle_distance

__all__ = [
    "EARTH_RADIUS_KM",
    "EARTH_RADIUS_M",
    "distance_km",
    "great_circle_distance",
]
