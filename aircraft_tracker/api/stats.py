"""Tracking statistics endpoints."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
import logging

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.exc import SQLAlchemyError

from aircraft_tracker.api.dependencies import get_store
from aircraft_tracker.models.stats import (
    DailyStatsEntry,
    DailyStatsResponse,
    HeatmapPoint,
    HeatmapResponse,
    HourlyActivity,
    HourlyStatsResponse,
    StatsSummary,
    TopAircraft,
)
from aircraft_tracker.services.store import TrackingStore

router = APIRouter(prefix="/api/stats", tags=["stats"])

logger = logging.getLogger("aircraft_tracker.api.stats")


def _query_failed(message: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=message)


@router.get("", response_model=StatsSummary, summary="Overall tracking statistics")
def get_stats(store: TrackingStore = Depends(get_store)) -> StatsSummary:
    try:
        return StatsSummary(
            timestamp=datetime.now(timezone.utc),
            total_unique_aircraft=store.count_aircraft(),
            total_positions_recorded=store.count_positions(),
            aircraft_last_hour=store.count_distinct_since(timedelta(hours=1)),
            aircraft_last_24h=store.count_distinct_since(timedelta(hours=24)),
            top_aircraft=[TopAircraft.model_validate(a) for a in store.top_aircraft(10)],
            database_size=store.database_size(),
        )
    except SQLAlchemyError as exc:
        logger.error("Error fetching stats: %s", exc)
        raise _query_failed("Failed to fetch statistics") from exc


@router.get("/daily", response_model=DailyStatsResponse, summary="Daily statistics history")
def get_daily_stats(
    days: int = Query(default=30, ge=1, le=365),
    store: TrackingStore = Depends(get_store),
) -> DailyStatsResponse:
    try:
        rows = store.daily_stats(days)
    except SQLAlchemyError as exc:
        logger.error("Error fetching daily stats: %s", exc)
        raise _query_failed("Failed to fetch daily statistics") from exc

    return DailyStatsResponse(
        days=days, stats=[DailyStatsEntry.model_validate(row) for row in rows]
    )


@router.get("/hourly", response_model=HourlyStatsResponse, summary="Hourly activity for today")
def get_hourly_stats(store: TrackingStore = Depends(get_store)) -> HourlyStatsResponse:
    today = store.now().date()
    try:
        buckets = store.hourly_activity(today)
    except SQLAlchemyError as exc:
        logger.error("Error fetching hourly stats: %s", exc)
        raise _query_failed("Failed to fetch hourly statistics") from exc

    return HourlyStatsResponse(
        date=today,
        hours=[
            HourlyActivity(hour=b.hour, unique_aircraft=b.unique_aircraft, positions=b.positions)
            for b in buckets
        ],
    )


@router.get("/heatmap", response_model=HeatmapResponse, summary="Position density heatmap")
def get_heatmap(
    hours: int = Query(default=24, ge=1, le=168),
    store: TrackingStore = Depends(get_store),
) -> HeatmapResponse:
    try:
        cells = store.heatmap(timedelta(hours=hours))
    except SQLAlchemyError as exc:
        logger.error("Error fetching heatmap data: %s", exc)
        raise _query_failed("Failed to fetch heatmap data") from exc

    return HeatmapResponse(
        hours=hours,
        points=[HeatmapPoint(lat=c.lat, lng=c.lng, intensity=c.intensity) for c in cells],
    )
