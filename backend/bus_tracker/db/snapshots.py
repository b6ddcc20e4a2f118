"""Load fully-resolved stop and bus snapshots for the arrivals engine."""

import logging

from fastapi import Depends
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from bus_tracker.core.arrivals import StopNotFoundError
from bus_tracker.core.geo import Coordinate
from bus_tracker.core.snapshots import (
    BusSnapshot,
    RouteSnapshot,
    RouteStopSnapshot,
    StopSnapshot,
)
from bus_tracker.db.session import get_session
from bus_tracker.models.tables import Bus, Route, RouteStop, Stop

logger = logging.getLogger(__name__)


def route_snapshot(route: Route) -> RouteSnapshot:
    """Freeze a route with its stops already loaded."""
    stops = []
    for rs in route.stops:
        stop = rs.stop
        coordinate = None
        if stop is not None and stop.lat is not None and stop.lng is not None:
            coordinate = Coordinate(lat=stop.lat, lng=stop.lng)
        stops.append(RouteStopSnapshot(
            stop_id=rs.stop_id,
            order=rs.order,
            name=stop.name if stop else "",
            code=stop.code if stop else "",
            coordinate=coordinate,
            distance_from_prev_km=rs.distance_from_prev or 0.0,
        ))
    return RouteSnapshot(id=route.id, name=route.name, number=route.number, stops=tuple(stops))


def bus_snapshot(bus: Bus) -> BusSnapshot:
    location = None
    if bus.lat is not None and bus.lng is not None:
        location = Coordinate(lat=bus.lat, lng=bus.lng)
    return BusSnapshot(
        id=bus.id,
        bus_number=bus.number,
        bus_name=bus.name or "",
        route=route_snapshot(bus.route) if bus.route is not None else None,
        location=location,
        speed=bus.speed or 0.0,
        is_active=bus.is_active,
        next_stop_index=bus.next_stop_index,
        last_updated=bus.last_updated,
        driver_name=bus.driver.name if bus.driver else None,
    )


class ArrivalsRepository:
    """Database-backed source of stop and bus snapshots."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def find_stop_by_id(self, stop_id: int) -> StopSnapshot:
        result = await self.session.execute(
            select(Stop).where(Stop.id == stop_id).options(selectinload(Stop.route_stops))
        )
        stop = result.scalar_one_or_none()
        if stop is None:
            raise StopNotFoundError(stop_id)
        return StopSnapshot(
            id=stop.id,
            name=stop.name,
            code=stop.code,
            coordinate=Coordinate(lat=stop.lat, lng=stop.lng),
            address=stop.address or "",
            route_ids=tuple(sorted({rs.route_id for rs in stop.route_stops})),
        )

    async def find_active_buses_serving_stop(self, stop_id: int) -> list[BusSnapshot]:
        """Active buses whose route includes the stop, ordered by bus id."""
        serving_routes = select(RouteStop.route_id).where(RouteStop.stop_id == stop_id)
        result = await self.session.execute(
            select(Bus)
            .where(Bus.is_active.is_(True), Bus.route_id.in_(serving_routes))
            .options(
                selectinload(Bus.route).selectinload(Route.stops).selectinload(RouteStop.stop),
                selectinload(Bus.driver),
            )
            .order_by(Bus.id)
        )
        buses = result.scalars().all()
        logger.debug("Stop %s: %d active buses on serving routes", stop_id, len(buses))
        return [bus_snapshot(b) for b in buses]


async def get_arrivals_repository(
    session: AsyncSession = Depends(get_session),
) -> ArrivalsRepository:
    return ArrivalsRepository(session)
