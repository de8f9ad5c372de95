"""Models for aircraft state reports and persisted aircraft records."""

from __future__ import annotations

from datetime import datetime
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

GROUND_SENTINEL = "ground"


class AircraftState(BaseModel):
    """Normalized aircraft state produced by a feed adapter.

    Altitudes are in feet, speeds in knots and vertical rates in feet per
    minute regardless of the upstream provider.
    """

    icao24: str = Field(..., description="ICAO24 hex address, lower-cased")
    callsign: Optional[str] = Field(default=None, description="Flight callsign")
    latitude: Optional[float] = Field(default=None, description="Latitude in decimal degrees")
    longitude: Optional[float] = Field(default=None, description="Longitude in decimal degrees")
    alt_baro: Optional[Union[float, str]] = Field(
        default=None, description="Barometric altitude, or 'ground' when on the surface"
    )
    alt_geom: Optional[float] = Field(default=None, description="Geometric altitude")
    ground_speed: Optional[float] = Field(default=None, description="Ground speed")
    track: Optional[float] = Field(default=None, description="Track angle in degrees")
    baro_rate: Optional[float] = Field(default=None, description="Barometric vertical rate")
    geom_rate: Optional[float] = Field(default=None, description="Geometric vertical rate")
    squawk: Optional[str] = Field(default=None, description="Transponder squawk code")
    category: Optional[str] = Field(default=None, description="Emitter category")
    aircraft_type: Optional[str] = Field(default=None, description="ICAO type designator")
    registration: Optional[str] = Field(default=None, description="Registration mark")
    description: Optional[str] = Field(default=None, description="Type description")
    source: str = Field(..., description="Feed that produced this state")

    model_config = ConfigDict(extra="ignore")

    @field_validator("icao24")
    @classmethod
    def _lower_icao(cls, value: str) -> str:
        value = value.strip().lower()
        if not value:
            raise ValueError("icao24 must not be empty")
        return value

    @field_validator("callsign", "aircraft_type", "registration", "description", "squawk")
    @classmethod
    def _blank_to_none(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        value = value.strip()
        return value or None

    @property
    def altitude(self) -> Optional[Union[float, str]]:
        return self.alt_baro if self.alt_baro is not None else self.alt_geom

    @property
    def numeric_altitude(self) -> Optional[float]:
        value = self.altitude
        return value if isinstance(value, (int, float)) else None

    @property
    def vertical_rate(self) -> Optional[float]:
        return self.baro_rate if self.baro_rate is not None else self.geom_rate

    @property
    def on_ground(self) -> bool:
        return self.alt_baro == GROUND_SENTINEL or self.altitude == 0

    @property
    def type_label(self) -> Optional[str]:
        return self.aircraft_type or self.description

    @property
    def has_position(self) -> bool:
        return self.latitude is not None and self.longitude is not None


class AircraftRecord(BaseModel):
    """Persisted aircraft metadata with its military flag."""

    icao24: str
    callsign: Optional[str] = None
    origin_country: Optional[str] = None
    registration: Optional[str] = None
    aircraft_type: Optional[str] = None
    first_seen: datetime
    last_seen: datetime
    total_sightings: int
    is_military: bool = False

    model_config = ConfigDict(from_attributes=True)


class AircraftListResponse(BaseModel):
    count: int
    aircraft: list[AircraftRecord]


class LiveAircraft(AircraftRecord):
    """Latest position of an aircraft seen within the live window."""

    latitude: Optional[float] = None
    longitude: Optional[float] = None
    altitude: Optional[float] = None
    velocity: Optional[float] = None
    heading: Optional[float] = None
    vertical_rate: Optional[float] = None
    on_ground: bool = False
    timestamp: datetime


class LiveAircraftResponse(BaseModel):
    timestamp: datetime
    count: int
    aircraft: list[LiveAircraft]


class DeletedCounts(BaseModel):
    positions: int
    aircraft: int


class ClearTrackingResponse(BaseModel):
    success: bool
    message: str
    deleted: DeletedCounts


__all__ = [
    "GROUND_SENTINEL",
    "AircraftListResponse",
    "AircraftRecord",
    "AircraftState",
    "ClearTrackingResponse",
    "DeletedCounts",
    "LiveAircraft",
    "LiveAircraftResponse",
]
