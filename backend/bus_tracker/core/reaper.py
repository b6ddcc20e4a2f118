"""Liveness sweep: mark buses inactive after a silence window.

Runs as a scheduled job, never inside an arrivals request. The update is a
single idempotent statement, so overlapping or repeated sweeps are harmless.
Reaped buses are also dropped from the live feed state.
"""

import datetime
import logging

from sqlalchemy import update

from bus_tracker.models.tables import Bus

logger = logging.getLogger(__name__)


def stale_cutoff(now: datetime.datetime, stale_after_seconds: int) -> datetime.datetime:
    """Buses last heard from before this instant count as gone."""
    return now - datetime.timedelta(seconds=stale_after_seconds)


def stale_buses_statement(cutoff: datetime.datetime):
    return (
        update(Bus)
        .where(Bus.is_active.is_(True), Bus.last_updated < cutoff)
        .values(is_active=False)
        .returning(Bus.id)
    )


async def deactivate_stale_buses(session_factory, stale_after_seconds: int, broadcaster=None) -> int:
    """Flip silent buses to inactive. Returns the number of buses changed."""
    now = datetime.datetime.now(datetime.timezone.utc)
    cutoff = stale_cutoff(now, stale_after_seconds)
    try:
        async with session_factory() as session:
            result = await session.execute(stale_buses_statement(cutoff))
            reaped = list(result.scalars().all())
            await session.commit()
    except Exception:
        logger.exception("Failed to deactivate stale buses")
        return 0

    if broadcaster is not None:
        for bus_id in reaped:
            await broadcaster.forget(bus_id)

    if reaped:
        logger.info("Marked %d bus(es) inactive (silent since %s)", len(reaped), cutoff.isoformat())
    return len(reaped)
