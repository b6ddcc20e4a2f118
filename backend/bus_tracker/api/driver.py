"""Driver endpoints: live location updates, shifts, and bus assignment."""

import datetime
import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from bus_tracker.api.buses import bus_info, load_bus, with_refs
from bus_tracker.api.deps import AuthUser, get_current_user, require_admin
from bus_tracker.core.security import ROLE_DRIVER
from bus_tracker.db.session import get_session
from bus_tracker.models.tables import Bus, User
from bus_tracker.schemas.auth import AssignmentResult, DriverInfo
from bus_tracker.schemas.bus import AssignBus, BusInfo, EndShift, LocationAck, LocationUpdate
from bus_tracker.schemas.common import MessageResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/driver", tags=["driver"])

# Will be set by main.py
broadcaster = None


def driver_info(user: User) -> DriverInfo:
    return DriverInfo(
        id=user.id,
        name=user.name,
        phone=user.phone,
        role=user.role,
        assigned_bus=bus_info(user.assigned_bus) if user.assigned_bus else None,
    )


def _check_bus_access(bus: Bus, user: AuthUser) -> None:
    if bus.driver_id != user.id and not user.is_admin:
        raise HTTPException(status_code=403, detail="Not authorized for this bus")


async def _load_driver(session: AsyncSession, driver_id: int) -> User:
    result = await session.execute(
        select(User)
        .where(User.id == driver_id)
        .options(selectinload(User.assigned_bus).options(
            selectinload(Bus.route), selectinload(Bus.driver),
        ))
        .execution_options(populate_existing=True)
    )
    driver = result.scalar_one_or_none()
    if driver is None or driver.role != ROLE_DRIVER:
        raise HTTPException(status_code=404, detail="Driver not found.")
    return driver


@router.post("/update-location", response_model=LocationAck)
async def update_location(
    body: LocationUpdate,
    session: AsyncSession = Depends(get_session),
    user: AuthUser = Depends(get_current_user),
):
    """Record the bus's live position (sent periodically by the driver's phone)."""
    bus = await load_bus(session, body.bus_id)
    _check_bus_access(bus, user)

    now = datetime.datetime.now(datetime.timezone.utc)
    bus.lat = body.latitude
    bus.lng = body.longitude
    bus.speed = body.speed or 0.0
    bus.heading = body.heading or 0.0
    if body.next_stop_index is not None:
        if body.next_stop_index < bus.next_stop_index and bus.is_active:
            logger.warning(
                "Bus %s: ignoring backwards next_stop_index %d -> %d",
                bus.id, bus.next_stop_index, body.next_stop_index,
            )
        else:
            bus.next_stop_index = body.next_stop_index
    bus.is_active = True
    bus.last_updated = now
    await session.commit()

    if broadcaster is not None:
        await broadcaster.publish({
            "id": bus.id,
            "busNumber": bus.number,
            "routeId": bus.route_id,
            "lat": bus.lat,
            "lng": bus.lng,
            "speed": bus.speed,
            "heading": bus.heading,
            "nextStopIndex": bus.next_stop_index,
            "lastUpdated": now.isoformat(),
        })

    return LocationAck(message="Location updated", last_updated=now)


@router.post("/end-shift", response_model=MessageResponse)
async def end_shift(
    body: EndShift,
    session: AsyncSession = Depends(get_session),
    user: AuthUser = Depends(get_current_user),
):
    """Take the bus off the live map and reset its route progress."""
    bus = await load_bus(session, body.bus_id)
    _check_bus_access(bus, user)

    bus.is_active = False
    bus.next_stop_index = 0
    await session.commit()

    if broadcaster is not None:
        await broadcaster.forget(bus.id)
    logger.info("Bus %s: shift ended", bus.id)
    return MessageResponse(message="Shift ended")


@router.get("/my-bus", response_model=BusInfo)
async def my_bus(
    session: AsyncSession = Depends(get_session),
    user: AuthUser = Depends(get_current_user),
):
    result = await session.execute(with_refs(select(Bus).where(Bus.driver_id == user.id)))
    bus = result.scalar_one_or_none()
    if not bus:
        raise HTTPException(status_code=404, detail="No bus assigned to you")
    return bus_info(bus)


@router.get("/all-drivers", response_model=list[DriverInfo])
async def all_drivers(
    session: AsyncSession = Depends(get_session),
    _: AuthUser = Depends(require_admin),
):
    result = await session.execute(
        select(User)
        .where(User.role == ROLE_DRIVER)
        .options(selectinload(User.assigned_bus).options(
            selectinload(Bus.route), selectinload(Bus.driver),
        ))
        .order_by(User.name)
    )
    return [driver_info(u) for u in result.scalars().all()]


@router.post("/assign-bus", response_model=AssignmentResult)
async def assign_bus(
    body: AssignBus,
    session: AsyncSession = Depends(get_session),
    _: AuthUser = Depends(require_admin),
):
    """Assign a bus to a driver, or unassign with ``busId: null``.

    A driver has at most one bus and a bus at most one driver; previous
    pairings on either side are released.
    """
    driver = await _load_driver(session, body.driver_id)

    if driver.assigned_bus is not None and driver.assigned_bus.id != body.bus_id:
        driver.assigned_bus.driver_id = None
        await session.flush()

    if body.bus_id is not None:
        bus = await session.get(Bus, body.bus_id)
        if bus is None:
            raise HTTPException(status_code=404, detail="Bus not found.")
        # Replaces any previous driver of this bus
        bus.driver_id = driver.id

    await session.commit()
    updated = await _load_driver(session, driver.id)
    return AssignmentResult(message="Assignment updated.", driver=driver_info(updated))
