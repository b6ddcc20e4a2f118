"""Immutable per-request views of stops, routes and buses.

The arrival engine only ever sees these value objects. The database layer
resolves bus -> route -> route stops -> stop once per request and freezes the
result, so one bus is evaluated against a single consistent snapshot.
"""

import datetime
from dataclasses import dataclass

from bus_tracker.core.geo import Coordinate


@dataclass(frozen=True)
class StopSnapshot:
    id: int
    name: str
    code: str
    coordinate: Coordinate
    address: str = ""
    route_ids: tuple[int, ...] = ()


@dataclass(frozen=True)
class RouteStopSnapshot:
    stop_id: int
    order: int
    name: str = ""
    code: str = ""
    coordinate: Coordinate | None = None  # None when the stop has no usable location
    distance_from_prev_km: float = 0.0


@dataclass(frozen=True)
class RouteSnapshot:
    id: int
    name: str
    number: str
    stops: tuple[RouteStopSnapshot, ...] = ()

    def find_stop(self, stop_id: int) -> RouteStopSnapshot | None:
        for rs in self.stops:
            if rs.stop_id == stop_id:
                return rs
        return None


@dataclass(frozen=True)
class BusSnapshot:
    id: int
    bus_number: str
    bus_name: str = ""
    route: RouteSnapshot | None = None
    location: Coordinate | None = None
    speed: float = 0.0  # km/h as last reported, may be stale
    is_active: bool = True
    next_stop_index: int = 0
    last_updated: datetime.datetime | None = None
    driver_name: str | None = None
