"""Stop REST API endpoints."""

import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from bus_tracker.api.deps import AuthUser, require_admin
from bus_tracker.api.routes import route_ref
from bus_tracker.core.qr import qr_data_url, stop_url
from bus_tracker.db.session import get_session
from bus_tracker.models.tables import RouteStop, Stop
from bus_tracker.schemas.common import MessageResponse
from bus_tracker.schemas.stop import StopCreate, StopCreated, StopInfo, StopQr, StopUpdate

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/stops", tags=["stops"])


def stop_info(stop: Stop) -> StopInfo:
    return StopInfo(
        id=stop.id,
        name=stop.name,
        stop_code=stop.code,
        lat=stop.lat,
        lng=stop.lng,
        address=stop.address,
        qr_code=stop.qr_code,
        is_active=stop.is_active,
        routes=[route_ref(rs.route) for rs in stop.route_stops],
    )


def _with_routes(query):
    return query.options(selectinload(Stop.route_stops).selectinload(RouteStop.route))


async def _load_stop(session: AsyncSession, stop_id: int) -> Stop:
    result = await session.execute(
        _with_routes(select(Stop).where(Stop.id == stop_id)).execution_options(populate_existing=True)
    )
    stop = result.scalar_one_or_none()
    if not stop:
        raise HTTPException(status_code=404, detail="Stop not found")
    return stop


async def _refresh_qr(session: AsyncSession, stop: Stop) -> str:
    url = stop_url(stop.id)
    stop.qr_code = qr_data_url(url)
    await session.commit()
    return url


@router.get("", response_model=list[StopInfo])
async def list_stops(session: AsyncSession = Depends(get_session)):
    """Get all active stops with the routes serving them."""
    result = await session.execute(
        _with_routes(select(Stop).where(Stop.is_active.is_(True))).order_by(Stop.name)
    )
    return [stop_info(s) for s in result.scalars().all()]


@router.get("/code/{stop_code}", response_model=StopInfo)
async def get_stop_by_code(stop_code: str, session: AsyncSession = Depends(get_session)):
    result = await session.execute(_with_routes(select(Stop).where(Stop.code == stop_code)))
    stop = result.scalar_one_or_none()
    if not stop:
        raise HTTPException(status_code=404, detail="Stop not found")
    return stop_info(stop)


@router.get("/{stop_id}", response_model=StopInfo)
async def get_stop(stop_id: int, session: AsyncSession = Depends(get_session)):
    """Get a single stop (what the QR code resolves to)."""
    return stop_info(await _load_stop(session, stop_id))


@router.post("", response_model=StopCreated, status_code=201)
async def create_stop(
    body: StopCreate,
    session: AsyncSession = Depends(get_session),
    _: AuthUser = Depends(require_admin),
):
    """Create a stop and generate its QR code."""
    existing = await session.execute(select(Stop.id).where(Stop.code == body.stop_code))
    if existing.scalar_one_or_none() is not None:
        raise HTTPException(status_code=400, detail="Stop code already exists")

    stop = Stop(
        name=body.name,
        code=body.stop_code,
        lat=body.latitude,
        lng=body.longitude,
        address=body.address,
    )
    session.add(stop)
    await session.flush()  # assigns stop.id for the QR URL
    url = await _refresh_qr(session, stop)
    logger.info("Created stop %s (%s)", stop.code, stop.id)
    return StopCreated(stop=stop_info(await _load_stop(session, stop.id)), qr_url=url)


@router.get("/{stop_id}/qr", response_model=StopQr)
async def regenerate_qr(
    stop_id: int,
    session: AsyncSession = Depends(get_session),
    _: AuthUser = Depends(require_admin),
):
    """Regenerate the QR code for a stop."""
    stop = await _load_stop(session, stop_id)
    url = await _refresh_qr(session, stop)
    return StopQr(qr_code=stop.qr_code, qr_url=url)


@router.put("/{stop_id}", response_model=StopInfo)
async def update_stop(
    stop_id: int,
    body: StopUpdate,
    session: AsyncSession = Depends(get_session),
    _: AuthUser = Depends(require_admin),
):
    stop = await _load_stop(session, stop_id)
    if body.name is not None:
        stop.name = body.name
    if body.stop_code is not None:
        stop.code = body.stop_code
    if body.latitude is not None:
        stop.lat = body.latitude
    if body.longitude is not None:
        stop.lng = body.longitude
    if body.address is not None:
        stop.address = body.address
    if body.is_active is not None:
        stop.is_active = body.is_active
    await session.commit()
    return stop_info(await _load_stop(session, stop_id))


@router.delete("/{stop_id}", response_model=MessageResponse)
async def delete_stop(
    stop_id: int,
    session: AsyncSession = Depends(get_session),
    _: AuthUser = Depends(require_admin),
):
    """Delete a stop; its route memberships go with it."""
    stop = await _load_stop(session, stop_id)
    name = stop.name
    await session.delete(stop)
    await session.commit()
    logger.info("Deleted stop %s", stop_id)
    return MessageResponse(message=f'Stop "{name}" deleted.')
