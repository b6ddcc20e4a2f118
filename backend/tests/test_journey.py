"""Tests for passenger parsing and JourneyComposer."""

import math

from bus_tracker.core.eta_calculator import EtaEstimate
from bus_tracker.core.geo import EARTH_RADIUS_KM, Coordinate
from bus_tracker.core.journey import JourneyComposer, parse_passenger

KM_PER_DEG_LAT = EARTH_RADIUS_KM * math.pi / 180
STOP = Coordinate(lat=13.0827, lng=80.2707)


def north_of(point: Coordinate, km: float) -> Coordinate:
    return Coordinate(lat=point.lat + km / KM_PER_DEG_LAT, lng=point.lng)


def test_parse_passenger_numbers_and_strings():
    assert parse_passenger(13.08, 80.27) == Coordinate(13.08, 80.27)
    assert parse_passenger("13.08", " 80.27 ") == Coordinate(13.08, 80.27)


def test_parse_passenger_degrades_to_none():
    assert parse_passenger(None, None) is None
    assert parse_passenger("13.08", None) is None
    assert parse_passenger("", "80.27") is None
    assert parse_passenger("abc", "80.27") is None
    assert parse_passenger("nan", "80.27") is None
    assert parse_passenger(13.08, float("inf")) is None
    assert parse_passenger(True, 80.27) is None


def test_eta_target():
    passenger = north_of(STOP, 1)
    assert JourneyComposer.eta_target(STOP, None) == STOP
    assert JourneyComposer.eta_target(STOP, passenger) == passenger


def test_walking_uses_ceiling():
    walk = JourneyComposer.walking(north_of(STOP, 1.01), STOP)
    assert walk.distance_km == 1.01
    # 1.01 km at 5 km/h = 12.12 min -> 13
    assert walk.minutes == 13


def test_stop_mode():
    journey = JourneyComposer().compose(None, STOP, EtaEstimate(distance_km=4.0, eta_minutes=12))
    assert journey.eta_target == STOP
    assert journey.walking_distance_km == 0.0
    assert journey.walking_minutes == 0
    assert journey.total_journey_minutes == 12


def test_passenger_mode_adds_walking_time():
    passenger = north_of(STOP, 2)
    journey = JourneyComposer().compose(passenger, STOP, EtaEstimate(distance_km=10.0, eta_minutes=15))
    assert journey.eta_target == passenger
    assert journey.walking_distance_km == 2.0
    assert journey.walking_minutes == 24
    assert journey.total_journey_minutes == 39
