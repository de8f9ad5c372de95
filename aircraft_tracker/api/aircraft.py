"""Aircraft, live position and track endpoints."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.exc import SQLAlchemyError

from aircraft_tracker import db_models
from aircraft_tracker.api.dependencies import get_store
from aircraft_tracker.config import settings
from aircraft_tracker.domain import classifier
from aircraft_tracker.models.aircraft import (
    AircraftListResponse,
    AircraftRecord,
    ClearTrackingResponse,
    DeletedCounts,
    LiveAircraft,
    LiveAircraftResponse,
)
from aircraft_tracker.models.tracks import (
    HistoryResponse,
    LineString,
    PositionSample,
    TrackCenter,
    TrackFeature,
    TracksResponse,
)
from aircraft_tracker.services.store import TrackingStore
from aircraft_tracker.services.tracks import TrackReconstructor

router = APIRouter(prefix="/api/aircraft", tags=["aircraft"])

logger = logging.getLogger("aircraft_tracker.api.aircraft")


def _query_failed(message: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=message)


def _to_record(aircraft: db_models.Aircraft) -> AircraftRecord:
    record = AircraftRecord.model_validate(aircraft)
    record.is_military = classifier.is_military(aircraft.icao24)
    return record


@router.get("", response_model=AircraftListResponse, summary="List tracked aircraft")
def list_aircraft(
    limit: int = Query(default=100, ge=1, le=1000),
    offset: int = Query(default=0, ge=0),
    military: Optional[bool] = Query(default=None, description="Filter on military flag"),
    store: TrackingStore = Depends(get_store),
) -> AircraftListResponse:
    """Return aircraft ordered by most recently seen."""

    try:
        rows = store.list_aircraft(limit=limit, offset=offset)
    except SQLAlchemyError as exc:
        logger.error("Error fetching aircraft: %s", exc)
        raise _query_failed("Failed to fetch aircraft") from exc

    aircraft = [_to_record(row) for row in rows]
    if military is not None:
        aircraft = [a for a in aircraft if a.is_military == military]
    return AircraftListResponse(count=len(aircraft), aircraft=aircraft)


@router.get("/live", response_model=LiveAircraftResponse, summary="Currently active aircraft")
def live_aircraft(store: TrackingStore = Depends(get_store)) -> LiveAircraftResponse:
    """Latest position of every aircraft reported within the live window."""

    try:
        rows = store.live_aircraft(timedelta(minutes=settings.live_window_minutes))
    except SQLAlchemyError as exc:
        logger.error("Error fetching live aircraft: %s", exc)
        raise _query_failed("Failed to fetch live aircraft") from exc

    aircraft = [
        LiveAircraft(
            icao24=position.icao24,
            callsign=position.callsign,
            origin_country=record.origin_country,
            registration=record.registration,
            aircraft_type=record.aircraft_type,
            first_seen=record.first_seen,
            last_seen=record.last_seen,
            total_sightings=record.total_sightings,
            is_military=classifier.is_military(position.icao24),
            latitude=position.latitude,
            longitude=position.longitude,
            altitude=position.altitude,
            velocity=position.velocity,
            heading=position.heading,
            vertical_rate=position.vertical_rate,
            on_ground=position.on_ground,
            timestamp=position.timestamp,
        )
        for position, record in rows
    ]
    return LiveAircraftResponse(
        timestamp=datetime.now(timezone.utc), count=len(aircraft), aircraft=aircraft
    )


@router.get(
    "/tracks",
    response_model=TracksResponse,
    summary="Tracks of all aircraft over the retention window",
)
def all_tracks(
    lat: Optional[float] = Query(default=None, ge=-90, le=90),
    lon: Optional[float] = Query(default=None, ge=-180, le=180),
    radius: Optional[float] = Query(default=None, gt=0, description="Radius in km"),
    store: TrackingStore = Depends(get_store),
) -> TracksResponse:
    """Segmented position history for polyline display, optionally within a circle."""

    try:
        tracks = TrackReconstructor(store).tracks(
            center_lat=lat, center_lon=lon, radius_km=radius
        )
    except SQLAlchemyError as exc:
        logger.error("Error fetching tracks: %s", exc)
        raise _query_failed("Failed to fetch tracks") from exc

    return TracksResponse(
        timestamp=datetime.now(timezone.utc),
        count=len(tracks),
        center=TrackCenter(lat=lat, lon=lon) if lat is not None and lon is not None else None,
        radius_km=radius,
        tracks=tracks,
    )


@router.delete(
    "/tracks", response_model=ClearTrackingResponse, summary="Delete all tracking data"
)
def clear_tracks(store: TrackingStore = Depends(get_store)) -> ClearTrackingResponse:
    try:
        positions, aircraft = store.delete_all()
    except SQLAlchemyError as exc:
        store.rollback()
        logger.error("Error clearing tracking data: %s", exc)
        raise _query_failed("Failed to clear tracking data") from exc

    logger.info("Cleared tracking data: %s positions, %s aircraft", positions, aircraft)
    return ClearTrackingResponse(
        success=True,
        message="All tracking data cleared",
        deleted=DeletedCounts(positions=positions, aircraft=aircraft),
    )


@router.get("/{icao24}", response_model=AircraftRecord, summary="Aircraft details")
def get_aircraft(icao24: str, store: TrackingStore = Depends(get_store)) -> AircraftRecord:
    try:
        aircraft = store.get_aircraft(icao24)
    except SQLAlchemyError as exc:
        logger.error("Error fetching aircraft %s: %s", icao24, exc)
        raise _query_failed("Failed to fetch aircraft") from exc

    if aircraft is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Aircraft not found")
    return _to_record(aircraft)


def _history(store: TrackingStore, icao24: str, hours: int) -> list[PositionSample]:
    try:
        rows = store.positions_since(icao24, timedelta(hours=hours))
    except SQLAlchemyError as exc:
        logger.error("Error fetching history for %s: %s", icao24, exc)
        raise _query_failed("Failed to fetch aircraft history") from exc
    return [PositionSample.model_validate(row) for row in rows]


@router.get(
    "/{icao24}/history", response_model=HistoryResponse, summary="Position history"
)
def aircraft_history(
    icao24: str,
    hours: int = Query(default=24, ge=1, le=168),
    store: TrackingStore = Depends(get_store),
) -> HistoryResponse:
    history = _history(store, icao24, hours)
    return HistoryResponse(icao24=icao24, hours=hours, positions=len(history), history=history)


@router.get(
    "/{icao24}/track", response_model=TrackFeature, summary="Position track as GeoJSON"
)
def aircraft_track(
    icao24: str,
    hours: int = Query(default=24, ge=1, le=168),
    store: TrackingStore = Depends(get_store),
) -> TrackFeature:
    """Return the history as a GeoJSON LineString of [lon, lat, altitude]."""

    history = _history(store, icao24, hours)
    coordinates = [
        [p.longitude, p.latitude, p.altitude or 0.0]
        for p in history
        if p.latitude is not None and p.longitude is not None
    ]
    return TrackFeature(
        properties={
            "icao24": icao24,
            "callsign": history[0].callsign if history else None,
            "positions": len(history),
        },
        geometry=LineString(coordinates=coordinates),
    )
