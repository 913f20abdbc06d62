"""
Boundary containment for municipality lookup.

Polygons use ray casting over (lat=x, lng=y) vertex pairs; circles compare
the haversine distance to the radius. Points exactly on an edge or vertex
may land on either side.
"""

from typing import Sequence

from lokisa.models.geo import CircleBoundary, Coordinate, PolygonBoundary
from lokisa.services.proximity import haversine_distance_km


def point_in_polygon(point: Coordinate, vertices: Sequence[Coordinate]) -> bool:
    lat, lng = point.latitude, point.longitude
    inside = False

    j = len(vertices) - 1
    for i in range(len(vertices)):
        xi, yi = vertices[i].latitude, vertices[i].longitude
        xj, yj = vertices[j].latitude, vertices[j].longitude

        if (yi > lng) != (yj > lng) and lat < (xj - xi) * (lng - yi) / (yj - yi) + xi:
            inside = not inside
        j = i

    return inside


def contains(boundary, point: Coordinate) -> bool:
    """Check whether point lies inside a polygon or circle boundary."""
    if isinstance(boundary, CircleBoundary):
        return haversine_distance_km(boundary.center, point) <= boundary.radius_km
    if isinstance(boundary, PolygonBoundary):
        return point_in_polygon(point, boundary.vertices)
    raise TypeError(f"Unsupported boundary type: {type(boundary).__name__}")
