"""Models for position history and reconstructed aircraft tracks."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


class PositionSample(BaseModel):
    """Single stored position report."""

    icao24: str = Field(..., description="ICAO24 hex address")
    callsign: Optional[str] = Field(default=None, description="Callsign at time of sample")
    latitude: Optional[float] = Field(default=None, description="Latitude in decimal degrees")
    longitude: Optional[float] = Field(default=None, description="Longitude in decimal degrees")
    altitude: Optional[float] = Field(default=None, description="Altitude in feet")
    velocity: Optional[float] = Field(default=None, description="Ground speed in knots")
    heading: Optional[float] = Field(default=None, description="Track angle in degrees")
    vertical_rate: Optional[float] = Field(
        default=None, description="Vertical rate in feet per minute"
    )
    on_ground: bool = Field(default=False, description="Whether the aircraft was on the ground")
    timestamp: datetime = Field(..., description="Server-assigned sample time (UTC)")

    model_config = ConfigDict(from_attributes=True)


class TrackSegment(BaseModel):
    """Run of positions with no internal gap above the threshold."""

    positions: list[PositionSample] = Field(default_factory=list)
    has_gap_before: bool = Field(default=False, alias="hasGapBefore")
    gap_duration_seconds: Optional[float] = Field(
        default=None, alias="gapDurationSeconds"
    )

    model_config = ConfigDict(populate_by_name=True)


class AircraftTrack(BaseModel):
    """Trailing-window position history of one aircraft split into segments."""

    icao24: str
    callsign: Optional[str] = None
    aircraft_type: Optional[str] = None
    positions: list[PositionSample]
    segments: list[TrackSegment]
    is_military: bool = False


class TrackCenter(BaseModel):
    lat: float
    lon: float


class TracksResponse(BaseModel):
    timestamp: datetime
    count: int
    center: Optional[TrackCenter] = None
    radius_km: Optional[float] = Field(default=None, alias="radiusKm")
    tracks: list[AircraftTrack]

    model_config = ConfigDict(populate_by_name=True)


class HistoryResponse(BaseModel):
    icao24: str
    hours: int
    positions: int
    history: list[PositionSample]


class LineString(BaseModel):
    type: Literal["LineString"] = "LineString"
    coordinates: list[list[float]]


class TrackFeature(BaseModel):
    """GeoJSON feature wrapping an aircraft's path."""

    type: Literal["Feature"] = "Feature"
    properties: dict[str, Any]
    geometry: LineString


__all__ = [
    "AircraftTrack",
    "HistoryResponse",
    "LineString",
    "PositionSample",
    "TrackCenter",
    "TrackFeature",
    "TrackSegment",
    "TracksResponse",
]
