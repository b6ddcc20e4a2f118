"""Tests for haversine distance."""

import math

from bus_tracker.core.geo import EARTH_RADIUS_KM, Coordinate, haversine_km, round_km

CHENNAI = Coordinate(lat=13.0827, lng=80.2707)
KM_PER_DEG_LAT = EARTH_RADIUS_KM * math.pi / 180


def test_zero_distance_to_self():
    assert haversine_km(CHENNAI, CHENNAI) == 0.0
    origin = Coordinate(lat=0.0, lng=0.0)
    assert haversine_km(origin, origin) == 0.0


def test_symmetric():
    other = Coordinate(lat=12.9716, lng=77.5946)
    assert haversine_km(CHENNAI, other) == haversine_km(other, CHENNAI)


def test_chennai_to_bangalore():
    bangalore = Coordinate(lat=12.9716, lng=77.5946)
    # ~290 km great-circle
    assert 285 < haversine_km(CHENNAI, bangalore) < 295


def test_meridian_distance_matches_arc_length():
    north = Coordinate(lat=CHENNAI.lat + 10 / KM_PER_DEG_LAT, lng=CHENNAI.lng)
    assert abs(haversine_km(CHENNAI, north) - 10.0) < 1e-9


def test_increases_with_longitude_delta():
    dists = [
        haversine_km(CHENNAI, Coordinate(lat=CHENNAI.lat, lng=CHENNAI.lng + delta))
        for delta in (0.001, 0.01, 0.05, 0.1, 0.5, 1.0)
    ]
    assert all(dists[i] < dists[i + 1] for i in range(len(dists) - 1))


def test_round_km_half_up():
    assert round_km(1.005000001) == 1.01
    assert round_km(2.344) == 2.34
    assert round_km(0.0) == 0.0
