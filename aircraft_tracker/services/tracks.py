"""Reconstruct drawable aircraft tracks from stored position history."""

from __future__ import annotations

from datetime import timedelta
import logging
from typing import Iterable, Optional, Sequence

from aircraft_tracker.config import settings
from aircraft_tracker.domain import classifier
from aircraft_tracker.domain.geo import within_radius
from aircraft_tracker.models.tracks import AircraftTrack, PositionSample, TrackSegment
from aircraft_tracker.services.store import TrackingStore

logger = logging.getLogger("aircraft_tracker.tracks")

MIN_TRACK_POSITIONS = 2


def filter_by_radius(
    positions: Iterable[PositionSample],
    center_lat: float,
    center_lon: float,
    radius_km: float,
) -> list[PositionSample]:
    """Keep samples on or inside the circle; samples without coordinates are dropped."""

    return [
        p
        for p in positions
        if within_radius(p.latitude, p.longitude, center_lat, center_lon, radius_km)
    ]


def split_into_segments(
    positions: Sequence[PositionSample], max_gap_seconds: float | None = None
) -> list[TrackSegment]:
    """Partition time-ordered samples wherever consecutive reports are too far apart.

    The first segment never has a gap before it; every later segment records
    the gap that opened it.
    """

    if not positions:
        return []
    threshold = settings.track_gap_seconds if max_gap_seconds is None else max_gap_seconds

    segments: list[TrackSegment] = []
    current = [positions[0]]
    pending_gap: float | None = None

    for previous, sample in zip(positions, positions[1:]):
        gap = (sample.timestamp - previous.timestamp).total_seconds()
        if gap > threshold:
            segments.append(
                TrackSegment(
                    positions=current,
                    has_gap_before=pending_gap is not None,
                    gap_duration_seconds=pending_gap,
                )
            )
            current = [sample]
            pending_gap = gap
        else:
            current.append(sample)

    segments.append(
        TrackSegment(
            positions=current,
            has_gap_before=pending_gap is not None,
            gap_duration_seconds=pending_gap,
        )
    )
    return segments


def build_track(
    icao24: str,
    positions: Sequence[PositionSample],
    *,
    callsign: str | None = None,
    aircraft_type: str | None = None,
    center_lat: float | None = None,
    center_lon: float | None = None,
    radius_km: float | None = None,
    max_gap_seconds: float | None = None,
) -> Optional[AircraftTrack]:
    """Assemble a track, or None when fewer than two samples qualify."""

    qualifying = list(positions)
    if center_lat is not None and center_lon is not None and radius_km is not None:
        qualifying = filter_by_radius(qualifying, center_lat, center_lon, radius_km)

    if len(qualifying) < MIN_TRACK_POSITIONS:
        return None

    return AircraftTrack(
        icao24=icao24,
        callsign=callsign,
        aircraft_type=aircraft_type,
        positions=qualifying,
        segments=split_into_segments(qualifying, max_gap_seconds),
        is_military=classifier.is_military(icao24),
    )


class TrackReconstructor:
    """Builds tracks for every aircraft seen in the trailing window."""

    def __init__(
        self,
        store: TrackingStore,
        *,
        window: timedelta | None = None,
        max_gap_seconds: float | None = None,
    ) -> None:
        self.store = store
        self.window = window or timedelta(hours=settings.retention_hours)
        self.max_gap_seconds = max_gap_seconds

    def track_for(
        self,
        icao24: str,
        *,
        callsign: str | None = None,
        aircraft_type: str | None = None,
        center_lat: float | None = None,
        center_lon: float | None = None,
        radius_km: float | None = None,
    ) -> Optional[AircraftTrack]:
        rows = self.store.positions_since(icao24, self.window)
        samples = [PositionSample.model_validate(row) for row in rows]
        return build_track(
            icao24,
            samples,
            callsign=callsign,
            aircraft_type=aircraft_type,
            center_lat=center_lat,
            center_lon=center_lon,
            radius_km=radius_km,
            max_gap_seconds=self.max_gap_seconds,
        )

    def tracks(
        self,
        center_lat: float | None = None,
        center_lon: float | None = None,
        radius_km: float | None = None,
    ) -> list[AircraftTrack]:
        tracks: list[AircraftTrack] = []
        for summary in self.store.distinct_identifiers_since(self.window):
            track = self.track_for(
                summary.icao24,
                callsign=summary.callsign,
                aircraft_type=summary.aircraft_type,
                center_lat=center_lat,
                center_lon=center_lon,
                radius_km=radius_km,
            )
            if track is not None:
                tracks.append(track)

        logger.debug("Reconstructed %s tracks", len(tracks))
        return tracks


__all__ = [
    "MIN_TRACK_POSITIONS",
    "TrackReconstructor",
    "build_track",
    "filter_by_radius",
    "split_into_segments",
]
