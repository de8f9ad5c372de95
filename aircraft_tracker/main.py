from __future__ import annotations

import asyncio
import contextlib
import logging
import time

from fastapi import FastAPI, Request

from aircraft_tracker.api import api_router
from aircraft_tracker.config import settings
from aircraft_tracker.db import SessionLocal, init_db
from aircraft_tracker.services import FusionEngine, IngestionCycle, IngestionScheduler

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s - %(message)s",
)
logger = logging.getLogger("aircraft_tracker")


@contextlib.asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage application startup and shutdown lifecycle."""

    init_db()
    logger.info("Database initialized")

    if settings.enable_scheduler:
        cycle = IngestionCycle(FusionEngine(), SessionLocal)
        scheduler = IngestionScheduler(cycle)
        app.state.ingestion_cycle = cycle
        app.state.scheduler_task = asyncio.create_task(scheduler.run())
        logger.info(
            "Tracking aircraft every %ss from feeds: %s",
            scheduler.interval_seconds,
            ", ".join(settings.feeds),
        )

    try:
        yield
    finally:
        task = getattr(app.state, "scheduler_task", None)
        if task:
            task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await task


app = FastAPI(title="Aircraft Tracker API", version="1.0.0", lifespan=lifespan)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Log basic request information for observability."""

    start_time = time.time()
    response = await call_next(request)
    duration_ms = (time.time() - start_time) * 1000
    logger.info(
        "HTTP %s %s -> %s (%.2f ms)",
        request.method,
        request.url.path,
        response.status_code,
        duration_ms,
    )
    return response


app.include_router(api_router)


@app.get("/", summary="Root")
def read_root() -> dict:
    """Service name and endpoint index."""

    return {
        "name": "Aircraft Tracker API",
        "version": "1.0.0",
        "endpoints": {
            "health": "/health",
            "aircraft": "/api/aircraft",
            "liveAircraft": "/api/aircraft/live",
            "tracks": "/api/aircraft/tracks",
            "aircraftHistory": "/api/aircraft/{icao24}/history",
            "aircraftTrack": "/api/aircraft/{icao24}/track",
            "stats": "/api/stats",
            "dailyStats": "/api/stats/daily",
            "hourlyStats": "/api/stats/hourly",
            "heatmap": "/api/stats/heatmap",
        },
    }
