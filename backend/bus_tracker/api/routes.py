"""Route REST API endpoints."""

import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from bus_tracker.api.deps import AuthUser, require_admin
from bus_tracker.db.session import get_session
from bus_tracker.models.tables import Bus, Route, RouteStop, Stop
from bus_tracker.schemas.common import MessageResponse
from bus_tracker.schemas.route import (
    RouteCreate,
    RouteDetail,
    RouteRef,
    RouteStopIn,
    RouteStopInfo,
    RouteUpdate,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/routes", tags=["routes"])


def route_ref(route: Route) -> RouteRef:
    return RouteRef(id=route.id, name=route.name, route_number=route.number)


def route_detail(route: Route) -> RouteDetail:
    stops = []
    for rs in route.stops:
        stops.append(RouteStopInfo(
            stop_id=rs.stop.id,
            order=rs.order,
            distance_from_prev=rs.distance_from_prev,
            name=rs.stop.name,
            stop_code=rs.stop.code,
            lat=rs.stop.lat,
            lng=rs.stop.lng,
            address=rs.stop.address,
        ))
    return RouteDetail(
        id=route.id,
        name=route.name,
        route_number=route.number,
        description=route.description,
        is_active=route.is_active,
        stops=stops,
    )


async def _load_route(session: AsyncSession, route_id: int) -> Route:
    result = await session.execute(
        select(Route)
        .where(Route.id == route_id)
        .options(selectinload(Route.stops).selectinload(RouteStop.stop))
        .execution_options(populate_existing=True)
    )
    route = result.scalar_one_or_none()
    if not route:
        raise HTTPException(status_code=404, detail="Route not found")
    return route


async def _build_route_stops(session: AsyncSession, entries: list[RouteStopIn]) -> list[RouteStop]:
    """Validate an ordered stop list and turn it into RouteStop rows."""
    orders = [e.order for e in entries]
    stop_ids = [e.stop_id for e in entries]
    if len(set(orders)) != len(orders):
        raise HTTPException(status_code=400, detail="Stop orders must be unique")
    if len(set(stop_ids)) != len(stop_ids):
        raise HTTPException(status_code=400, detail="A stop can appear only once on a route")

    if stop_ids:
        result = await session.execute(select(Stop.id).where(Stop.id.in_(stop_ids)))
        missing = set(stop_ids) - set(result.scalars().all())
        if missing:
            raise HTTPException(status_code=400, detail=f"Unknown stop ids: {sorted(missing)}")

    return [
        RouteStop(stop_id=e.stop_id, order=e.order, distance_from_prev=e.distance_from_prev)
        for e in sorted(entries, key=lambda e: e.order)
    ]


@router.get("", response_model=list[RouteDetail])
async def list_routes(session: AsyncSession = Depends(get_session)):
    """Get all active routes with their stops."""
    result = await session.execute(
        select(Route)
        .where(Route.is_active.is_(True))
        .options(selectinload(Route.stops).selectinload(RouteStop.stop))
        .order_by(Route.number)
    )
    return [route_detail(r) for r in result.scalars().all()]


@router.get("/{route_id}", response_model=RouteDetail)
async def get_route(route_id: int, session: AsyncSession = Depends(get_session)):
    """Get route detail with ordered stops."""
    return route_detail(await _load_route(session, route_id))


@router.post("", response_model=RouteDetail, status_code=201)
async def create_route(
    body: RouteCreate,
    session: AsyncSession = Depends(get_session),
    _: AuthUser = Depends(require_admin),
):
    existing = await session.execute(select(Route.id).where(Route.number == body.route_number))
    if existing.scalar_one_or_none() is not None:
        raise HTTPException(status_code=400, detail="Route number already exists")

    route = Route(name=body.name, number=body.route_number, description=body.description)
    route.stops = await _build_route_stops(session, body.stops)
    session.add(route)
    await session.commit()
    logger.info("Created route %s with %d stops", route.number, len(body.stops))
    return route_detail(await _load_route(session, route.id))


@router.put("/{route_id}", response_model=RouteDetail)
async def update_route(
    route_id: int,
    body: RouteUpdate,
    session: AsyncSession = Depends(get_session),
    _: AuthUser = Depends(require_admin),
):
    route = await _load_route(session, route_id)
    if body.name is not None:
        route.name = body.name
    if body.route_number is not None:
        route.number = body.route_number
    if body.description is not None:
        route.description = body.description
    if body.is_active is not None:
        route.is_active = body.is_active
    if body.stops is not None:
        new_stops = await _build_route_stops(session, body.stops)
        route.stops.clear()
        # Flush deletions first so (route_id, order) stays unique
        await session.flush()
        route.stops.extend(new_stops)
    await session.commit()
    return route_detail(await _load_route(session, route_id))


@router.delete("/{route_id}", response_model=MessageResponse)
async def delete_route(
    route_id: int,
    session: AsyncSession = Depends(get_session),
    _: AuthUser = Depends(require_admin),
):
    route = await _load_route(session, route_id)
    label = f"{route.number} - {route.name}"
    # Detach buses still running this route
    await session.execute(
        update(Bus).where(Bus.route_id == route_id).values(route_id=None, is_active=False)
    )
    await session.delete(route)
    await session.commit()
    logger.info("Deleted route %s", label)
    return MessageResponse(message=f'Route "{label}" deleted.')
