"""Bus REST API endpoints, including the stop arrivals query."""

import logging
from dataclasses import asdict

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from bus_tracker.api.deps import AuthUser, require_admin
from bus_tracker.api.routes import route_ref
from bus_tracker.core.arrivals import StopArrivalOrchestrator, StopNotFoundError
from bus_tracker.core.journey import parse_passenger
from bus_tracker.db.session import get_session
from bus_tracker.db.snapshots import ArrivalsRepository, get_arrivals_repository
from bus_tracker.models.tables import Bus, Route
from bus_tracker.schemas.arrivals import StopArrivals
from bus_tracker.schemas.bus import BusCreate, BusInfo, BusUpdate, DriverRef
from bus_tracker.schemas.common import LatLng, MessageResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/buses", tags=["buses"])

orchestrator = StopArrivalOrchestrator()

# Will be set by main.py
broadcaster = None


def bus_info(bus: Bus) -> BusInfo:
    location = None
    if bus.lat is not None and bus.lng is not None:
        location = LatLng(lat=bus.lat, lng=bus.lng)
    return BusInfo(
        id=bus.id,
        bus_number=bus.number,
        bus_name=bus.name,
        route=route_ref(bus.route) if bus.route else None,
        driver=DriverRef(id=bus.driver.id, name=bus.driver.name, phone=bus.driver.phone) if bus.driver else None,
        capacity=bus.capacity,
        current_location=location,
        speed=bus.speed,
        heading=bus.heading,
        is_active=bus.is_active,
        next_stop_index=bus.next_stop_index,
        last_updated=bus.last_updated,
    )


def with_refs(query):
    return query.options(selectinload(Bus.route), selectinload(Bus.driver))


async def load_bus(session: AsyncSession, bus_id: int) -> Bus:
    result = await session.execute(
        with_refs(select(Bus).where(Bus.id == bus_id)).execution_options(populate_existing=True)
    )
    bus = result.scalar_one_or_none()
    if not bus:
        raise HTTPException(status_code=404, detail="Bus not found")
    return bus


async def _check_route(session: AsyncSession, route_id: int | None) -> None:
    if route_id is None:
        return
    if await session.get(Route, route_id) is None:
        raise HTTPException(status_code=400, detail="Route not found")


@router.get("/all", response_model=list[BusInfo])
async def list_all_buses(
    session: AsyncSession = Depends(get_session),
    _: AuthUser = Depends(require_admin),
):
    """Get all buses regardless of status."""
    result = await session.execute(with_refs(select(Bus)).order_by(Bus.number))
    return [bus_info(b) for b in result.scalars().all()]


@router.get("", response_model=list[BusInfo])
async def list_active_buses(session: AsyncSession = Depends(get_session)):
    """Get all currently active buses."""
    result = await session.execute(
        with_refs(select(Bus).where(Bus.is_active.is_(True))).order_by(Bus.number)
    )
    return [bus_info(b) for b in result.scalars().all()]


@router.get("/stop/{stop_id}", response_model=StopArrivals)
async def get_stop_arrivals(
    stop_id: int,
    passenger_lat: str | None = Query(default=None, alias="passengerLat"),
    passenger_lng: str | None = Query(default=None, alias="passengerLng"),
    repo: ArrivalsRepository = Depends(get_arrivals_repository),
):
    """Buses approaching a stop, ranked by ETA.

    With ``passengerLat``/``passengerLng`` the ETA is measured to the
    passenger and walking time to the stop is added; malformed coordinates
    fall back to ETAs measured to the stop.
    """
    try:
        stop = await repo.find_stop_by_id(stop_id)
    except StopNotFoundError:
        raise HTTPException(status_code=404, detail="Stop not found")

    passenger = parse_passenger(passenger_lat, passenger_lng)
    if passenger is None and (passenger_lat is not None or passenger_lng is not None):
        logger.debug("Ignoring malformed passenger position %r,%r", passenger_lat, passenger_lng)

    buses = await repo.find_active_buses_serving_stop(stop_id)
    result = orchestrator.compute_arrivals(stop, buses, passenger)
    return StopArrivals.model_validate(asdict(result))


@router.get("/{bus_id}", response_model=BusInfo)
async def get_bus(bus_id: int, session: AsyncSession = Depends(get_session)):
    return bus_info(await load_bus(session, bus_id))


@router.post("", response_model=BusInfo, status_code=201)
async def create_bus(
    body: BusCreate,
    session: AsyncSession = Depends(get_session),
    _: AuthUser = Depends(require_admin),
):
    existing = await session.execute(select(Bus.id).where(Bus.number == body.bus_number))
    if existing.scalar_one_or_none() is not None:
        raise HTTPException(status_code=400, detail="Bus number already exists")
    await _check_route(session, body.route_id)

    bus = Bus(
        number=body.bus_number,
        name=body.bus_name,
        route_id=body.route_id,
        capacity=body.capacity,
    )
    session.add(bus)
    await session.commit()
    logger.info("Created bus %s", bus.number)
    return bus_info(await load_bus(session, bus.id))


@router.put("/{bus_id}", response_model=BusInfo)
async def update_bus(
    bus_id: int,
    body: BusUpdate,
    session: AsyncSession = Depends(get_session),
    _: AuthUser = Depends(require_admin),
):
    bus = await load_bus(session, bus_id)
    if body.bus_number is not None:
        bus.number = body.bus_number
    if body.bus_name is not None:
        bus.name = body.bus_name
    if body.route_id is not None and body.route_id != bus.route_id:
        await _check_route(session, body.route_id)
        bus.route_id = body.route_id
        bus.next_stop_index = 0
    if body.capacity is not None:
        bus.capacity = body.capacity
    if body.next_stop_index is not None:
        # Progress on a live bus only moves forward
        if body.next_stop_index < bus.next_stop_index and bus.is_active:
            raise HTTPException(
                status_code=400, detail="nextStopIndex cannot move backwards while the bus is active"
            )
        bus.next_stop_index = body.next_stop_index
    await session.commit()
    return bus_info(await load_bus(session, bus_id))


@router.delete("/{bus_id}", response_model=MessageResponse)
async def delete_bus(
    bus_id: int,
    session: AsyncSession = Depends(get_session),
    _: AuthUser = Depends(require_admin),
):
    """Delete a bus; its driver becomes unassigned."""
    bus = await load_bus(session, bus_id)
    number = bus.number
    await session.delete(bus)
    await session.commit()

    if broadcaster is not None:
        await broadcaster.forget(bus_id)
    logger.info("Deleted bus %s", number)
    return MessageResponse(message=f'Bus "{number}" deleted.')
