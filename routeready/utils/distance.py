"""
Great-circle distance helpers.
"""
from math import radians, cos, sin, asin, sqrt
from typing import Tuple

EARTH_RADIUS_KM = 6371


def haversine_distance(coord1: Tuple[float, float], coord2: Tuple[float, float]) -> float:
    """
    Calculate the great circle distance between two points on Earth using Haversine formula.

    Args:
        coord1: (latitude, longitude) tuple for first point
        coord2: (latitude, longitude) tuple for second point

    Returns:
        Distance in kilometers
    """
    lat1, lon1 = radians(coord1[0]), radians(coord1[1])
    lat2, lon2 = radians(coord2[0]), radians(coord2[1])

    dlat = lat2 - lat1
    dlon = lon2 - lon1

    a = sin(dlat / 2) ** 2 + cos(lat1) * cos(lat2) * sin(dlon / 2) ** 2
    c = 2 * asin(sqrt(min(1.0, a)))

    return c * EARTH_RADIUS_KM
