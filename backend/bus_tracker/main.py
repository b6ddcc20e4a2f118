"""FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from bus_tracker.api import auth, buses, driver, routes, stops, ws
from bus_tracker.config import Settings, settings
from bus_tracker.core.broadcaster import Broadcaster
from bus_tracker.core.scheduler import create_scheduler
from bus_tracker.db.session import async_session, engine
from bus_tracker.models.base import Base
from bus_tracker.models import tables  # noqa: F401

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)-8s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


def warn_on_default_secret(config: Settings) -> bool:
    """Log a warning when tokens would be signed with the built-in key."""
    if config.uses_default_secret:
        logger.warning("SECRET_KEY is not set; auth tokens are signed with the default key")
        return True
    return False


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application startup and shutdown."""
    warn_on_default_secret(settings)

    # Create tables if they don't exist
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    broadcaster = Broadcaster()
    await broadcaster.connect()

    # Wire up API modules
    ws.broadcaster = broadcaster
    driver.broadcaster = broadcaster
    buses.broadcaster = broadcaster

    scheduler = create_scheduler(async_session, broadcaster)
    scheduler.start()
    logger.info(
        "Bus Tracker started - buses go inactive after %ds of silence",
        settings.bus_stale_seconds,
    )

    yield

    # Shutdown
    scheduler.shutdown(wait=False)
    ws.broadcaster = None
    driver.broadcaster = None
    buses.broadcaster = None
    await broadcaster.close()
    await engine.dispose()
    logger.info("Bus Tracker shut down")


app = FastAPI(
    title="Bus Tracker API",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(auth.router)
app.include_router(buses.router)
app.include_router(routes.router)
app.include_router(stops.router)
app.include_router(driver.router)
app.include_router(ws.router)


@app.get("/api/health")
async def health():
    return {"status": "ok"}
