"""Geospatial helper functions."""

from __future__ import annotations

import math
from typing import Sequence

EARTH_RADIUS_MILES = 3958.8

Coordinate = tuple[float, float]


def haversine_miles(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Compute distance between two coordinates using the Haversine formula."""

    phi1, phi2 = math.radians(lat1), math.radians(lat2)
    d_phi = math.radians(lat2 - lat1)
    d_lambda = math.radians(lon2 - lon1)

    a = math.sin(d_phi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_MILES * c


def polyline_length_miles(polyline: Sequence[Coordinate]) -> float:
    return sum(
        haversine_miles(a[0], a[1], b[0], b[1])
        for a, b in zip(polyline, polyline[1:])
    )


def position_at_distance(distance_miles: float, polyline: Sequence[Coordinate]) -> Coordinate:
    """Return the (lat, lng) reached after travelling ``distance_miles`` along ``polyline``.

    Segment lengths are great-circle distances; the position inside the
    matching segment is a straight lat/lng interpolation. Distances past
    either end clamp to the first or last vertex. An empty polyline yields
    ``(0.0, 0.0)``, meaning no position is available.
    """

    if not polyline:
        return (0.0, 0.0)
    first = polyline[0]
    if distance_miles <= 0:
        return (first[0], first[1])

    travelled = 0.0
    for p1, p2 in zip(polyline, polyline[1:]):
        segment = haversine_miles(p1[0], p1[1], p2[0], p2[1])
        if segment > 0 and travelled + segment >= distance_miles:
            ratio = (distance_miles - travelled) / segment
            return (
                p1[0] + (p2[0] - p1[0]) * ratio,
                p1[1] + (p2[1] - p1[1]) * ratio,
            )
        travelled += segment

    last = polyline[-1]
    return (last[0], last[1])
