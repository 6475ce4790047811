"""Away-from-home detection."""

from __future__ import annotations

from hexconquest.utils.geo import distance_km

from .models import Coordinate, HomeBase
from .rules_config import DEFAULT_RULES


def is_away_from_home(
    home: HomeBase | None,
    current: Coordinate,
    threshold_km: float = DEFAULT_RULES.home.threshold_km,
) -> bool:
    """True when ``current`` lies more than ``threshold_km`` from home.

    A player without a home is never away.
    """

    if home is None:
        return False
    return distance_km(current, home.position) > threshold_km
