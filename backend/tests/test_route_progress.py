"""Tests for RouteProgressFilter (order-based progress gate)."""

from bus_tracker.core.geo import Coordinate
from bus_tracker.core.route_progress import RouteProgressFilter
from bus_tracker.core.snapshots import BusSnapshot, RouteSnapshot, RouteStopSnapshot


def make_route() -> RouteSnapshot:
    """Four stops along a north-south line in Chennai (~13.08°N, 80.27°E)."""
    return RouteSnapshot(
        id=1,
        name="Central - Airport",
        number="42",
        stops=(
            RouteStopSnapshot(stop_id=10, order=0, name="Stop A", code="A",
                              coordinate=Coordinate(13.070, 80.270)),
            RouteStopSnapshot(stop_id=11, order=1, name="Stop B", code="B",
                              coordinate=Coordinate(13.080, 80.270)),
            RouteStopSnapshot(stop_id=12, order=2, name="Stop C", code="C",
                              coordinate=Coordinate(13.090, 80.270)),
            RouteStopSnapshot(stop_id=13, order=3, name="Stop D", code="D",
                              coordinate=Coordinate(13.100, 80.270)),
        ),
    )


def make_bus(next_stop_index: int) -> BusSnapshot:
    return BusSnapshot(
        id=1, bus_number="TN-01-AB-1234", route=make_route(),
        location=Coordinate(13.075, 80.270), speed=30, next_stop_index=next_stop_index,
    )


def test_passed_stop_excluded():
    result = RouteProgressFilter().evaluate(make_route(), 12, make_bus(next_stop_index=3))
    assert result.included is False
    assert result.target_order == 2
    assert result.polyline == ()


def test_next_stop_included_zero_stops_away():
    result = RouteProgressFilter().evaluate(make_route(), 11, make_bus(next_stop_index=1))
    assert result.included is True
    assert result.stops_away == 0
    assert result.target_order == 1


def test_stops_away_counts_remaining_orders():
    result = RouteProgressFilter().evaluate(make_route(), 13, make_bus(next_stop_index=1))
    assert result.included is True
    assert result.stops_away == 2


def test_stop_not_on_route_excluded():
    result = RouteProgressFilter().evaluate(make_route(), 999, make_bus(next_stop_index=0))
    assert result.included is False
    assert result.target_order is None


def test_polyline_flags():
    result = RouteProgressFilter().evaluate(make_route(), 12, make_bus(next_stop_index=2))
    assert [p.stop_code for p in result.polyline] == ["A", "B", "C", "D"]
    assert [p.is_passed for p in result.polyline] == [True, True, False, False]
    assert [p.is_scanned_stop for p in result.polyline] == [False, False, True, False]
    assert result.polyline[2].lat == 13.090
    assert result.polyline[2].lng == 80.270


def test_polyline_sorted_and_skips_unlocated_stops():
    """Stops stored out of order come back sorted; stops without coordinates are dropped."""
    route = RouteSnapshot(
        id=2, name="Loopless", number="7",
        stops=(
            RouteStopSnapshot(stop_id=3, order=2, name="Third", code="T",
                              coordinate=Coordinate(13.09, 80.27)),
            RouteStopSnapshot(stop_id=1, order=0, name="First", code="F",
                              coordinate=Coordinate(13.07, 80.27)),
            RouteStopSnapshot(stop_id=2, order=1, name="Ghost", code="G", coordinate=None),
        ),
    )
    bus = BusSnapshot(id=5, bus_number="7A", route=route, location=Coordinate(13.06, 80.27))
    result = RouteProgressFilter().evaluate(route, 3, bus)
    assert result.included is True
    assert [p.order for p in result.polyline] == [0, 2]
    assert [p.name for p in result.polyline] == ["First", "Third"]
