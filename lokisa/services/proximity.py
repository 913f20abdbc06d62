"""
Distance and proximity helpers.

Pure functions: great-circle distance between two coordinates and a radius
filter over a collection of issues.
"""

import math
from typing import Iterable, List, Optional

from lokisa.models.geo import Coordinate
from lokisa.models.issue import Issue

EARTH_RADIUS_KM = 6371.0
DEFAULT_RADIUS_KM = 5.0


def haversine_distance_km(a: Coordinate, b: Coordinate) -> float:
    """Calculate distance between two points using the Haversine formula."""
    phi1 = math.radians(a.latitude)
    phi2 = math.radians(b.latitude)
    delta_phi = math.radians(b.latitude - a.latitude)
    delta_lambda = math.radians(b.longitude - a.longitude)
    h = math.sin(delta_phi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(delta_lambda / 2) ** 2
    # Rounding can push h just past 1 for antipodal points
    h = min(1.0, max(0.0, h))
    c = 2 * math.atan2(math.sqrt(h), math.sqrt(1 - h))
    return EARTH_RADIUS_KM * c


def find_nearby(
    issues: Iterable[Issue],
    center: Coordinate,
    radius_km: Optional[float] = None,
) -> List[Issue]:
    """
    Return the issues within radius_km of center, keeping input order.

    The boundary is inclusive. A missing radius means DEFAULT_RADIUS_KM; a
    radius <= 0 matches nothing.
    """
    if radius_km is None:
        radius_km = DEFAULT_RADIUS_KM
    if radius_km <= 0:
        return []

    return [
        issue for issue in issues
        if haversine_distance_km(issue.coordinate, center) <= radius_km
    ]
