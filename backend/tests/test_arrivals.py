"""Tests for StopArrivalOrchestrator (end-to-end arrival ranking)."""

import datetime
import math

from bus_tracker.core.arrivals import StopArrivalOrchestrator, compute_arrivals
from bus_tracker.core.geo import EARTH_RADIUS_KM, Coordinate
from bus_tracker.core.snapshots import (
    BusSnapshot,
    RouteSnapshot,
    RouteStopSnapshot,
    StopSnapshot,
)

KM_PER_DEG_LAT = EARTH_RADIUS_KM * math.pi / 180

S = Coordinate(lat=13.0827, lng=80.2707)
NOW = datetime.datetime(2026, 3, 1, 8, 30, tzinfo=datetime.timezone.utc)


def north_of(point: Coordinate, km: float) -> Coordinate:
    return Coordinate(lat=point.lat + km / KM_PER_DEG_LAT, lng=point.lng)


def make_stop() -> StopSnapshot:
    return StopSnapshot(
        id=2, name="Central", code="STOP_002", coordinate=S,
        address="Park Town", route_ids=(1,),
    )


def make_route() -> RouteSnapshot:
    """Route R: A(0) -> S(1) -> B(2), running north."""
    return RouteSnapshot(
        id=1,
        name="Route 42 - Central to Airport",
        number="42",
        stops=(
            RouteStopSnapshot(stop_id=1, order=0, name="A", code="STOP_001",
                              coordinate=north_of(S, -3)),
            RouteStopSnapshot(stop_id=2, order=1, name="Central", code="STOP_002",
                              coordinate=S),
            RouteStopSnapshot(stop_id=3, order=2, name="B", code="STOP_003",
                              coordinate=north_of(S, 3)),
        ),
    )


def make_bus(bus_id: int = 1, km_south: float = 10, speed: float = 30, **kwargs) -> BusSnapshot:
    fields = dict(
        id=bus_id,
        bus_number=f"TN-01-{bus_id:04d}",
        bus_name=f"Express {bus_id}",
        route=make_route(),
        location=north_of(S, -km_south),
        speed=speed,
        next_stop_index=1,
        last_updated=NOW,
        driver_name="Ravi",
    )
    fields.update(kwargs)
    return BusSnapshot(**fields)


def test_end_to_end_stop_mode():
    result = compute_arrivals(make_stop(), [make_bus()])

    assert result.passenger is None
    assert result.stop.code == "STOP_002"
    assert result.stop.lat == S.lat
    assert len(result.buses) == 1

    bus = result.buses[0]
    assert bus.eta_minutes == 20  # 10 km at 30 km/h
    assert bus.distance_km == 10.0
    assert bus.distance_to_stop == 10.0
    assert bus.total_journey_minutes == 20
    assert bus.stops_away == 0
    assert bus.route_name == "Route 42 - Central to Airport"
    assert bus.route_number == "42"
    assert bus.driver_name == "Ravi"
    assert bus.last_updated == NOW

    flags = {p.name: (p.is_passed, p.is_scanned_stop) for p in bus.route_polyline}
    assert flags == {"A": (True, False), "Central": (False, True), "B": (False, False)}


def test_end_to_end_passenger_mode():
    # Passenger 2 km north of S; bus 8 km south of S, so 10 km to the passenger
    passenger = north_of(S, 2)
    result = compute_arrivals(make_stop(), [make_bus(km_south=8, speed=40)], passenger)

    assert result.passenger is not None
    assert result.passenger.walking_distance_km == 2.0
    assert result.passenger.walking_minutes == 24

    bus = result.buses[0]
    assert bus.eta_minutes == 15  # 10 km at 40 km/h
    assert bus.distance_km == 10.0
    assert bus.distance_to_stop == 8.0  # bus -> stop, not bus -> passenger
    assert bus.total_journey_minutes == 39


def test_passed_stop_excluded():
    result = compute_arrivals(make_stop(), [make_bus(next_stop_index=2)])
    assert result.buses == []


def test_ranking_by_eta_with_stable_ties():
    # 60 km/h = 1 km per minute
    buses = [
        make_bus(bus_id=10, km_south=12, speed=60),
        make_bus(bus_id=30, km_south=5, speed=60),
        make_bus(bus_id=20, km_south=5, speed=60),
    ]
    result = compute_arrivals(make_stop(), buses)
    assert [b.eta_minutes for b in result.buses] == [5, 5, 12]
    assert [b.id for b in result.buses] == [30, 20, 10]


def test_stalled_bus_ranked_with_fallback_speed():
    passenger = north_of(S, 2)
    slow_close = make_bus(bus_id=1, km_south=1, speed=3)  # 3 km at fallback 20 -> 9 min
    fast_far = make_bus(bus_id=2, km_south=6, speed=60)  # 8 km at 60 -> 8 min
    result = compute_arrivals(make_stop(), [slow_close, fast_far], passenger)
    assert [b.id for b in result.buses] == [2, 1]
    assert [b.eta_minutes for b in result.buses] == [8, 9]


def test_incomplete_buses_skipped():
    buses = [
        make_bus(bus_id=1, route=None),
        make_bus(bus_id=2, location=None),
        make_bus(bus_id=3, is_active=False),
        make_bus(bus_id=4),
    ]
    result = compute_arrivals(make_stop(), buses)
    assert [b.id for b in result.buses] == [4]


def test_route_without_target_stop_skipped():
    other_route = RouteSnapshot(
        id=9, name="Elsewhere", number="9",
        stops=(RouteStopSnapshot(stop_id=77, order=0, name="X", code="X", coordinate=S),),
    )
    result = compute_arrivals(make_stop(), [make_bus(route=other_route), make_bus(bus_id=2)])
    assert [b.id for b in result.buses] == [2]


def test_missing_driver_name():
    result = compute_arrivals(make_stop(), [make_bus(driver_name=None)])
    assert result.buses[0].driver_name == "Unknown"


def test_no_candidates():
    result = StopArrivalOrchestrator().compute_arrivals(make_stop(), [], north_of(S, 1))
    assert result.buses == []
    assert result.passenger.walking_minutes == 12
