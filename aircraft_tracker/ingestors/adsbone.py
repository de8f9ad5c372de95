"""ADSB.one feed using point/radius queries over strategic coverage points."""

from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import Any, Optional, Sequence

import httpx
from pydantic import ValidationError

from aircraft_tracker.config import settings
from aircraft_tracker.ingestors.base import RegionFeed, coerce_float, coerce_str, get_json
from aircraft_tracker.models.aircraft import GROUND_SENTINEL, AircraftState

logger = logging.getLogger("aircraft_tracker.ingestors.adsbone")


@dataclass(frozen=True)
class CoveragePoint:
    """Center of a point query; ``radius_nm`` is capped at 250 by the provider."""

    lat: float
    lon: float
    radius_nm: float = 250
    label: str | None = None

    def __str__(self) -> str:
        return self.label or f"{self.lat},{self.lon}"


# ADSB.one has no global endpoint, so the Russia to Gulf of Finland to
# Kaliningrad corridor is covered by overlapping 250 nm circles.
DEFAULT_COVERAGE_POINTS: tuple[CoveragePoint, ...] = (
    CoveragePoint(60.17, 24.94, label="Helsinki/Gulf of Finland"),
    CoveragePoint(59.45, 24.75, label="Tallinn"),
    CoveragePoint(57.50, 21.00, label="Baltic Sea (Latvia coast)"),
    CoveragePoint(54.70, 20.50, label="Kaliningrad Oblast"),
    CoveragePoint(55.20, 23.50, label="Lithuania"),
    CoveragePoint(54.35, 18.65, label="Gdansk"),
    CoveragePoint(59.93, 30.31, label="St. Petersburg"),
    CoveragePoint(55.75, 37.62, label="Moscow"),
    CoveragePoint(56.0, 44.0, label="Nizhny Novgorod"),
    CoveragePoint(64.0, 40.0, label="Arkhangelsk"),
    CoveragePoint(68.0, 33.0, label="Murmansk"),
    CoveragePoint(55.0, 82.0, label="Novosibirsk"),
    CoveragePoint(48.0, 135.0, label="Far East"),
)


def _parse_alt_baro(value: Any) -> float | str | None:
    if value == GROUND_SENTINEL:
        return GROUND_SENTINEL
    return coerce_float(value)


def normalize_readsb_aircraft(entry: Any, source: str = "adsbone") -> Optional[AircraftState]:
    """Map a readsb-style ``ac`` entry to an AircraftState, or None if unusable."""

    if not isinstance(entry, dict):
        return None
    hex_code = entry.get("hex")
    if not isinstance(hex_code, str) or not hex_code.strip():
        return None

    try:
        return AircraftState(
            icao24=hex_code,
            callsign=coerce_str(entry.get("flight")),
            latitude=coerce_float(entry.get("lat")),
            longitude=coerce_float(entry.get("lon")),
            alt_baro=_parse_alt_baro(entry.get("alt_baro")),
            alt_geom=coerce_float(entry.get("alt_geom")),
            ground_speed=coerce_float(entry.get("gs")),
            track=coerce_float(entry.get("track")),
            baro_rate=coerce_float(entry.get("baro_rate")),
            geom_rate=coerce_float(entry.get("geom_rate")),
            squawk=coerce_str(entry.get("squawk")),
            category=coerce_str(entry.get("category")),
            aircraft_type=coerce_str(entry.get("t")),
            registration=coerce_str(entry.get("r")),
            description=coerce_str(entry.get("desc")),
            source=source,
        )
    except ValidationError as exc:
        logger.debug("Skipping malformed aircraft %s: %s", hex_code, exc)
        return None


class ADSBOneFeed(RegionFeed):
    """Fetch aircraft around each coverage point from the ADSB.one v2 API."""

    name = "adsbone"

    def __init__(
        self,
        *,
        base_url: str | None = None,
        points: Sequence[CoveragePoint] | None = None,
        timeout: float | None = None,
        region_timeout: float | None = None,
        max_concurrency: int | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        super().__init__(
            points if points is not None else DEFAULT_COVERAGE_POINTS,
            timeout=timeout,
            region_timeout=region_timeout,
            max_concurrency=max_concurrency,
            transport=transport,
        )
        self.base_url = (base_url or settings.adsbone_base_url).rstrip("/")

    def point_url(self, point: CoveragePoint) -> str:
        return f"{self.base_url}/point/{point.lat}/{point.lon}/{point.radius_nm:g}"

    async def fetch_region(
        self, client: httpx.AsyncClient, region: CoveragePoint
    ) -> list[AircraftState]:
        payload = await get_json(client, self.point_url(region), label=f"ADSB.one {region}")

        raw_aircraft = payload.get("ac") if isinstance(payload, dict) else None
        if not raw_aircraft:
            return []

        states: list[AircraftState] = []
        for entry in raw_aircraft:
            state = normalize_readsb_aircraft(entry, source=self.name)
            if state:
                states.append(state)
        return states


__all__ = [
    "ADSBOneFeed",
    "CoveragePoint",
    "DEFAULT_COVERAGE_POINTS",
    "normalize_readsb_aircraft",
]
