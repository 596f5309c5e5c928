"""
Great-circle helpers for proximity search.

The store narrows candidates with a latitude/longitude bounding box (plain
column comparisons, index friendly) and the service refines them with the
haversine distance.
"""

from math import asin, atan2, cos, degrees, radians, sin, sqrt

EARTH_RADIUS_KM = 6371.0


def haversine_km(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    """Great-circle distance between two points, in kilometres."""
    dlat = radians(lat2 - lat1)
    dlng = radians(lng2 - lng1)
    a = sin(dlat / 2) ** 2 + cos(radians(lat1)) * cos(radians(lat2)) * sin(dlng / 2) ** 2
    return EARTH_RADIUS_KM * 2 * atan2(sqrt(a), sqrt(1 - a))


def bounding_box(
    lat: float, lng: float, radius_km: float
) -> tuple[float, float, list[tuple[float, float]] | None]:
    """
    Return (min_lat, max_lat, lng_ranges) enclosing every point within radius_km.

    lng_ranges is None when the circle reaches a pole (any longitude matches),
    and holds two ranges when the box wraps around the antimeridian.
    """
    angular = radius_km / EARTH_RADIUS_KM
    min_lat = lat - degrees(angular)
    max_lat = lat + degrees(angular)
    if min_lat <= -90 or max_lat >= 90:
        return max(min_lat, -90.0), min(max_lat, 90.0), None

    ratio = sin(angular) / cos(radians(lat))
    if ratio >= 1:
        return min_lat, max_lat, None
    delta = degrees(asin(ratio))
    low, high = lng - delta, lng + delta
    if low < -180:
        return min_lat, max_lat, [(low + 360, 180.0), (-180.0, high)]
    if high > 180:
        return min_lat, max_lat, [(low, 180.0), (-180.0, high - 360)]
    return min_lat, max_lat, [(low, high)]
