"""Great-circle distance helpers (miles)."""

from __future__ import annotations

import math
from typing import NamedTuple, Optional

from app.core.constants import EARTH_RADIUS_MILES

# One degree of latitude is ~69 miles everywhere
_MILES_PER_DEGREE_LAT = 69.0


class BoundingBox(NamedTuple):
    min_lat: float
    max_lat: float
    min_lng: float
    max_lng: float


def haversine_miles(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    """
    Distance between two points using the haversine formula.

    a = sin²(Δlat/2) + cos(lat1)·cos(lat2)·sin²(Δlng/2)
    d = 2·R·atan2(√a, √(1−a))
    """
    d_lat = math.radians(lat2 - lat1)
    d_lng = math.radians(lng2 - lng1)
    a = (
        math.sin(d_lat / 2) ** 2
        + math.cos(math.radians(lat1)) * math.cos(math.radians(lat2)) * math.sin(d_lng / 2) ** 2
    )
    # Floating point can push `a` a hair outside [0, 1] for antipodal/identical points
    a = min(1.0, max(0.0, a))
    return 2 * EARTH_RADIUS_MILES * math.atan2(math.sqrt(a), math.sqrt(1 - a))


def bounding_box(lat: float, lng: float, radius_miles: float) -> BoundingBox:
    """Return a lat/lng box that fully contains the circle of `radius_miles` around a point."""
    d_lat = radius_miles / _MILES_PER_DEGREE_LAT
    cos_lat = math.cos(math.radians(lat))
    if cos_lat < 1e-6:
        d_lng = 180.0
    else:
        d_lng = min(180.0, radius_miles / (_MILES_PER_DEGREE_LAT * cos_lat))
    return BoundingBox(
        min_lat=max(-90.0, lat - d_lat),
        max_lat=min(90.0, lat + d_lat),
        min_lng=lng - d_lng,
        max_lng=lng + d_lng,
    )


def has_coordinates(lat: Optional[float], lng: Optional[float]) -> bool:
    """True when both coordinates are present, finite and not the (0, 0) placeholder."""
    if lat is None or lng is None:
        return False
    if not (math.isfinite(lat) and math.isfinite(lng)):
        return False
    return not (lat == 0.0 and lng == 0.0)
