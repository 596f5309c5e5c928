"""Great-circle distance and bounding-box helpers."""

from math import cos, degrees, radians

import pytest

from marketplace.core.geo import EARTH_RADIUS_KM, bounding_box, haversine_km


def test_haversine_same_point_is_zero():
    assert haversine_km(37.77, -122.42, 37.77, -122.42) == 0


def test_haversine_san_francisco_to_los_angeles():
    # ~559 km great-circle
    assert haversine_km(37.7749, -122.4194, 34.0522, -118.2437) == pytest.approx(559, abs=3)


def test_one_hundredth_degree_latitude_is_about_a_kilometre():
    assert haversine_km(37.77, -122.42, 37.78, -122.42) == pytest.approx(1.11, abs=0.01)


def test_bounding_box_contains_points_on_the_circle():
    lat, lng, radius = 37.77, -122.42, 5
    min_lat, max_lat, ranges = bounding_box(lat, lng, radius)
    assert len(ranges) == 1
    lo, hi = ranges[0]
    # Points just inside the radius in each cardinal direction
    north = lat + degrees(radius / EARTH_RADIUS_KM) * 0.999
    east = lng + degrees(radius / EARTH_RADIUS_KM) / cos(radians(lat)) * 0.999
    assert haversine_km(lat, lng, north, lng) <= radius
    assert haversine_km(lat, lng, lat, east) <= radius
    assert min_lat < lat < north < max_lat
    assert lo < lng < east < hi


def test_bounding_box_wraps_antimeridian():
    _, _, ranges = bounding_box(0.0, 179.99, 10)
    assert len(ranges) == 2
    assert (-180.0 <= ranges[1][0]) and ranges[1][1] < -179


def test_bounding_box_near_pole_has_no_longitude_bound():
    min_lat, max_lat, ranges = bounding_box(89.99, 10.0, 5)
    assert ranges is None
    assert max_lat == 90.0
