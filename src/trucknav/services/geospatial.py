"""Geospatial helper functions."""

from __future__ import annotations

import math
from typing import Sequence

from shapely.geometry import LineString, Point

from ..models.domain import Coordinate

EARTH_RADIUS_M = 6_371_000.0


def haversine_m(start: Coordinate, end: Coordinate) -> float:
    """Great-circle distance in meters."""
    lat1, lat2 = math.radians(start.latitude), math.radians(end.latitude)
    half_chord = (
        math.sin((lat2 - lat1) / 2) ** 2
        + math.cos(lat1) * math.cos(lat2) * math.sin(math.radians(end.longitude - start.longitude) / 2) ** 2
    )
    return 2 * EARTH_RADIUS_M * math.asin(math.sqrt(min(half_chord, 1.0)))


def _project(point: Coordinate, origin_lat: float) -> tuple[float, float]:
    # Local equirectangular projection in meters, good enough along a single route.
    x = math.radians(point.longitude) * math.cos(math.radians(origin_lat)) * EARTH_RADIUS_M
    y = math.radians(point.latitude) * EARTH_RADIUS_M
    return x, y


def distance_along_route_m(geometry: Sequence[Coordinate], location: Coordinate) -> tuple[float, float]:
    """Return ``(distance along the route, distance off the route)`` in meters.

    The location is projected onto the nearest route segment. A single-point
    geometry yields zero along-route distance and the straight-line offset.
    """
    if not geometry:
        raise ValueError("Route geometry is empty.")
    if len(geometry) == 1:
        return 0.0, haversine_m(geometry[0], location)

    origin_lat = geometry[0].latitude
    line = LineString([_project(point, origin_lat) for point in geometry])
    target = Point(_project(location, origin_lat))
    return float(line.project(target)), float(line.distance(target))
