"""
Unit tests for the ring geometry (traffic.geo).
"""

import math

import pytest

from traffic.exceptions import GeometryError
from traffic.geo import (
    POINT_NAMES,
    Coordinate,
    degrees_to_radians,
    destination_point,
    generate_ring,
    radians_to_degrees,
)

DUBLIN = Coordinate(53.3498, -6.2603)


def haversine_km(a, b):
    phi1, phi2 = math.radians(a.lat), math.radians(b.lat)
    d_phi = math.radians(b.lat - a.lat)
    d_lambda = math.radians(b.lng - a.lng)
    h = math.sin(d_phi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    return 6371.0 * 2 * math.atan2(math.sqrt(h), math.sqrt(1 - h))


def initial_bearing(a, b):
    phi1, phi2 = math.radians(a.lat), math.radians(b.lat)
    d_lambda = math.radians(b.lng - a.lng)
    y = math.sin(d_lambda) * math.cos(phi2)
    x = math.cos(phi1) * math.sin(phi2) - math.sin(phi1) * math.cos(phi2) * math.cos(d_lambda)
    return (math.degrees(math.atan2(y, x)) + 360) % 360


def angle_diff(a, b):
    d = abs(a - b) % 360
    return min(d, 360 - d)


class TestConversions:
    def test_degrees_to_radians(self):
        assert degrees_to_radians(180) == pytest.approx(math.pi)
        assert degrees_to_radians(0) == 0

    def test_radians_to_degrees(self):
        assert radians_to_degrees(math.pi / 2) == pytest.approx(90)

    def test_round_trip(self):
        assert radians_to_degrees(degrees_to_radians(-6.2603)) == pytest.approx(-6.2603)


class TestDestinationPoint:
    def test_north_moves_latitude_only(self):
        dest = destination_point(DUBLIN, 0, 10)
        assert dest.lat - DUBLIN.lat == pytest.approx(0.0899, abs=1e-4)
        assert dest.lng == pytest.approx(DUBLIN.lng)

    def test_east_on_equator(self):
        dest = destination_point(Coordinate(0.0, 0.0), 90, 10)
        assert dest.lat == pytest.approx(0.0, abs=1e-9)
        assert dest.lng == pytest.approx(0.0899, abs=1e-4)

    def test_nan_input_raises(self):
        with pytest.raises(GeometryError):
            destination_point(Coordinate(float("nan"), 0.0), 0, 10)

    def test_infinite_input_raises(self):
        with pytest.raises(GeometryError):
            destination_point(Coordinate(float("inf"), 0.0), 45, 10)


class TestGenerateRing:
    def test_nine_points_in_fixed_order(self):
        ring = generate_ring(DUBLIN, 10)
        assert len(ring) == 9
        assert [p.name for p in ring] == list(POINT_NAMES)
        assert [p.name for p in ring] == ["CENTER", "N", "NE", "E", "SE", "S", "SW", "W", "NW"]

    def test_center_is_rounded_center(self):
        center = generate_ring(DUBLIN, 10)[0]
        assert (center.lat, center.lng) == (53.35, -6.26)
        assert center.bearing is None

    def test_scenario_north_point(self):
        """10 km north of Dublin: latitude +~0.09, longitude unchanged to 3 decimals."""
        north = generate_ring(DUBLIN, 10)[1]
        assert north.name == "N"
        assert north.bearing == 0
        assert north.lat == 53.44
        assert north.lng == -6.26

    def test_coordinates_rounded_to_three_decimals(self):
        for p in generate_ring(DUBLIN, 10):
            assert round(p.lat, 3) == p.lat
            assert round(p.lng, 3) == p.lng

    @pytest.mark.parametrize("center", [DUBLIN, Coordinate(-33.8688, 151.2093), Coordinate(0.0, 0.0)])
    def test_points_at_radius_and_bearing(self, center):
        ring = generate_ring(center, 10)
        for p, expected_bearing in zip(ring[1:], range(0, 360, 45)):
            assert p.bearing == expected_bearing
            assert haversine_km(center, p.coordinate) == pytest.approx(10, abs=0.15)
            assert angle_diff(initial_bearing(center, p.coordinate), expected_bearing) < 1.0

    def test_deterministic(self):
        assert generate_ring(DUBLIN, 10) == generate_ring(DUBLIN, 10)

    def test_radius_changes_ring(self):
        assert generate_ring(DUBLIN, 5)[1].lat < generate_ring(DUBLIN, 10)[1].lat

    def test_non_finite_center_aborts_ring(self):
        with pytest.raises(GeometryError):
            generate_ring(Coordinate(float("nan"), -6.26), 10)
