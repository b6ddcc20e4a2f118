"""APScheduler setup for periodic tasks."""

import logging

from apscheduler.schedulers.asyncio import AsyncIOScheduler

from bus_tracker.core.reaper import deactivate_stale_buses

logger = logging.getLogger(__name__)


def create_scheduler(session_factory, broadcaster=None) -> AsyncIOScheduler:
    """Create and configure the scheduler with all jobs."""
    from bus_tracker.config import settings

    scheduler = AsyncIOScheduler()

    # Mark silent buses inactive every N seconds
    scheduler.add_job(
        deactivate_stale_buses,
        "interval",
        seconds=settings.reaper_interval_seconds,
        args=[session_factory, settings.bus_stale_seconds, broadcaster],
        id="deactivate_stale_buses",
        name="Mark buses inactive after silence window",
        max_instances=1,
        coalesce=True,
    )

    return scheduler
