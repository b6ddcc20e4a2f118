"""Route-order progress check: is a stop still ahead of a bus on its route?

Progress is decided purely by stop order. A bus heading to the stop with
order ``next_stop_index`` has already passed every stop with a lower order;
there is no GPS-distance disambiguation.
"""

import logging
from dataclasses import dataclass, field

from bus_tracker.core.snapshots import BusSnapshot, RouteSnapshot

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PolylinePoint:
    name: str
    stop_code: str
    order: int
    lat: float
    lng: float
    is_scanned_stop: bool
    is_passed: bool


@dataclass(frozen=True)
class RouteProgress:
    included: bool
    stops_away: int = 0
    target_order: int | None = None
    polyline: tuple[PolylinePoint, ...] = field(default_factory=tuple)


class RouteProgressFilter:
    """Gates buses on whether the target stop is ahead of them."""

    def evaluate(
        self, route: RouteSnapshot, target_stop_id: int, bus: BusSnapshot,
    ) -> RouteProgress:
        """Check inclusion and build the annotated polyline.

        ``next_stop_index`` is read once, so the inclusion decision and the
        ``is_passed`` flags always agree.
        """
        next_stop_index = bus.next_stop_index
        target = route.find_stop(target_stop_id)
        if target is None:
            logger.debug("Stop %s not on route %s", target_stop_id, route.id)
            return RouteProgress(included=False)

        if target.order < next_stop_index:
            return RouteProgress(included=False, target_order=target.order)

        return RouteProgress(
            included=True,
            stops_away=target.order - next_stop_index,
            target_order=target.order,
            polyline=self.polyline(route, target_stop_id, next_stop_index),
        )

    @staticmethod
    def polyline(
        route: RouteSnapshot, target_stop_id: int, next_stop_index: int,
    ) -> tuple[PolylinePoint, ...]:
        """Route stops with known coordinates, in travel order, flagged for display."""
        located = [rs for rs in route.stops if rs.coordinate is not None]
        located.sort(key=lambda rs: rs.order)
        return tuple(
            PolylinePoint(
                name=rs.name,
                stop_code=rs.code,
                order=rs.order,
                lat=rs.coordinate.lat,
                lng=rs.coordinate.lng,
                is_scanned_stop=rs.stop_id == target_stop_id,
                is_passed=rs.order < next_stop_index,
            )
            for rs in located
        )
