"""Great-circle distance helpers."""

from __future__ import annotations

import math

EARTH_RADIUS_M = 6371000


def haversine(lon1: float, lat1: float, lon2: float, lat2: float) -> float:
    """Distance in meters between two lon/lat points."""
    phi1, phi2 = math.radians(lat1), math.radians(lat2)
    dphi = math.radians(lat2 - lat1)
    dl = math.radians(lon2 - lon1)
    a = math.sin(dphi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(dl / 2) ** 2
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_M * c
