"""Ingestion summaries and statistics response models."""

from __future__ import annotations

import datetime as dt
from typing import Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class IngestionSummary(BaseModel):
    """Outcome of one fetch-and-store cycle."""

    tracked: int = Field(..., description="Aircraft of interest in the fused snapshot")
    stored: int = Field(..., description="Position samples inserted")


class TopAircraft(BaseModel):
    icao24: str
    callsign: Optional[str] = None
    total_sightings: int
    first_seen: dt.datetime
    last_seen: dt.datetime

    model_config = ConfigDict(from_attributes=True)


class StatsSummary(BaseModel):
    timestamp: dt.datetime
    total_unique_aircraft: int
    total_positions_recorded: int
    aircraft_last_hour: int
    aircraft_last_24h: int
    top_aircraft: list[TopAircraft]
    database_size: Optional[str] = None


class DailyStatsEntry(BaseModel):
    date: dt.date = Field(validation_alias=AliasChoices("day", "date"))
    unique_aircraft: int
    total_positions: int
    military_count: int
    civilian_count: int

    model_config = ConfigDict(from_attributes=True)


class DailyStatsResponse(BaseModel):
    days: int
    stats: list[DailyStatsEntry]


class HourlyActivity(BaseModel):
    hour: dt.datetime
    unique_aircraft: int
    positions: int


class HourlyStatsResponse(BaseModel):
    date: dt.date
    hours: list[HourlyActivity]


class HeatmapPoint(BaseModel):
    lat: float
    lng: float
    intensity: int


class HeatmapResponse(BaseModel):
    hours: int
    points: list[HeatmapPoint]


__all__ = [
    "DailyStatsEntry",
    "DailyStatsResponse",
    "HeatmapPoint",
    "HeatmapResponse",
    "HourlyActivity",
    "HourlyStatsResponse",
    "IngestionSummary",
    "StatsSummary",
    "TopAircraft",
]
