"""Pydantic models for the aircraft tracker."""

from .aircraft import AircraftRecord, AircraftState, LiveAircraft
from .stats import IngestionSummary
from .tracks import AircraftTrack, PositionSample, TrackSegment

__all__ = [
    "AircraftRecord",
    "AircraftState",
    "AircraftTrack",
    "IngestionSummary",
    "LiveAircraft",
    "PositionSample",
    "TrackSegment",
]
