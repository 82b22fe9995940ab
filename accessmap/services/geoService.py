"""
Geo Service
===========

Geographic utility functions for distance calculation and display.
Used by the proximity ranker to order overlay markers by distance from
the user.

Uses the haversine formula for great-circle distance between two points
on a sphere of Earth's mean radius.  Accurate enough for walking-scale
distances (error < 0.5% against the ellipsoid).
"""

from __future__ import annotations

import math

from accessmap.models import Coordinate

# Earth's mean radius in metres
EARTH_RADIUS_M: float = 6_371_000.0


def haversine_distance(origin: Coordinate, destination: Coordinate) -> float:
    """Calculate the great-circle distance between two points using the
    haversine formula.

    Args:
        origin: First point.
        destination: Second point.

    Returns:
        Distance in metres.
    """
    # Convert decimal degrees to radians
    lat1_rad = math.radians(origin.lat)
    lat2_rad = math.radians(destination.lat)
    delta_lat = math.radians(destination.lat - origin.lat)
    delta_lng = math.radians(destination.lng - origin.lng)

    # Haversine formula
    a = (
        math.sin(delta_lat / 2) ** 2
        + math.cos(lat1_rad) * math.cos(lat2_rad) * math.sin(delta_lng / 2) ** 2
    )
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))

    return EARTH_RADIUS_M * c


def format_distance(meters: float) -> str:
    """Render a distance for display.

    Under a kilometre the value is shown in whole metres (``"850m"``),
    otherwise in kilometres to one decimal place (``"1.5km"``).
    """
    if meters < 1000:
        # half-up, not round()'s half-to-even
        return f"{math.floor(meters + 0.5)}m"
    return f"{meters / 1000:.1f}km"
