"""Geospatial helper functions."""

from __future__ import annotations

import math
from typing import Any

EARTH_RADIUS_MILES = 3959.0


def haversine_miles(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Compute distance between two coordinates using the Haversine formula."""

    phi1, phi2 = math.radians(lat1), math.radians(lat2)
    d_phi = math.radians(lat2 - lat1)
    d_lambda = math.radians(lon2 - lon1)

    a = math.sin(d_phi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_MILES * c


def is_valid_coordinate(value: Any) -> bool:
    """Return True for a finite real number (bools and NaN excluded)."""

    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value)


def has_coordinates(lat: Any, lng: Any) -> bool:
    return is_valid_coordinate(lat) and is_valid_coordinate(lng)
