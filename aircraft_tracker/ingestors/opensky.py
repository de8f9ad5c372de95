"""OpenSky Network feed using bounding-box state vector queries."""

from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import Any, Optional, Sequence

import httpx
from pydantic import ValidationError

from aircraft_tracker.config import settings
from aircraft_tracker.ingestors.base import RegionFeed, coerce_float, coerce_str, get_json
from aircraft_tracker.models.aircraft import GROUND_SENTINEL, AircraftState

logger = logging.getLogger("aircraft_tracker.ingestors.opensky")


@dataclass(frozen=True)
class BoundingBox:
    """Latitude/longitude box for an OpenSky ``states/all`` query."""

    min_lat: float
    min_lon: float
    max_lat: float
    max_lon: float
    label: str | None = None

    def as_params(self) -> dict[str, float]:
        return {
            "lamin": self.min_lat,
            "lomin": self.min_lon,
            "lamax": self.max_lat,
            "lomax": self.max_lon,
        }

    def __str__(self) -> str:
        return self.label or f"{self.min_lat},{self.min_lon},{self.max_lat},{self.max_lon}"


DEFAULT_BOUNDING_BOXES: tuple[BoundingBox, ...] = (
    BoundingBox(53, 14, 70, 32, label="Baltic Sea, Scandinavia, Kaliningrad"),
    BoundingBox(50, 30, 70, 60, label="Western Russia"),
)


def _m_to_feet(value_m: Any) -> float | None:
    value = coerce_float(value_m)
    return value * 3.28084 if value is not None else None


def _ms_to_knots(value_ms: Any) -> float | None:
    value = coerce_float(value_ms)
    return value * 1.94384 if value is not None else None


def _ms_to_fpm(value_ms: Any) -> float | None:
    value = coerce_float(value_ms)
    return value * 196.850394 if value is not None else None


def _field(entry: Sequence[Any], index: int) -> Any:
    return entry[index] if len(entry) > index else None


def normalize_state_vector(entry: Any, source: str = "opensky") -> Optional[AircraftState]:
    """Map an OpenSky state vector to an AircraftState.

    Layout: [icao24, callsign, origin_country, time_position, last_contact,
    longitude, latitude, baro_altitude, on_ground, velocity, true_track,
    vertical_rate, sensors, geo_altitude, squawk, spi, position_source,
    category]. Metric values are converted to feet, knots and feet/minute.
    """

    if not isinstance(entry, (list, tuple)) or not entry:
        return None
    hex_code = entry[0]
    if not isinstance(hex_code, str) or not hex_code.strip():
        return None

    on_ground = _field(entry, 8) is True
    category = _field(entry, 17)

    try:
        return AircraftState(
            icao24=hex_code,
            callsign=coerce_str(_field(entry, 1)),
            latitude=coerce_float(_field(entry, 6)),
            longitude=coerce_float(_field(entry, 5)),
            alt_baro=GROUND_SENTINEL if on_ground else _m_to_feet(_field(entry, 7)),
            alt_geom=_m_to_feet(_field(entry, 13)),
            ground_speed=_ms_to_knots(_field(entry, 9)),
            track=coerce_float(_field(entry, 10)),
            baro_rate=_ms_to_fpm(_field(entry, 11)),
            squawk=coerce_str(_field(entry, 14)),
            category=coerce_str(category) if category is not None else None,
            source=source,
        )
    except ValidationError as exc:
        logger.debug("Skipping malformed state vector %s: %s", hex_code, exc)
        return None


class OpenSkyFeed(RegionFeed):
    """Fetch state vectors inside each bounding box from the OpenSky REST API."""

    name = "opensky"

    def __init__(
        self,
        *,
        base_url: str | None = None,
        boxes: Sequence[BoundingBox] | None = None,
        username: str | None = None,
        password: str | None = None,
        timeout: float | None = None,
        region_timeout: float | None = None,
        max_concurrency: int | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        super().__init__(
            boxes if boxes is not None else DEFAULT_BOUNDING_BOXES,
            timeout=timeout,
            region_timeout=region_timeout,
            max_concurrency=max_concurrency,
            transport=transport,
        )
        self.base_url = base_url or settings.opensky_base_url
        self.username = username if username is not None else settings.opensky_username
        self.password = password if password is not None else settings.opensky_password

    def client_options(self) -> dict[str, Any]:
        options = super().client_options()
        if self.username and self.password:
            options["auth"] = (self.username, self.password)
        return options

    async def fetch_region(
        self, client: httpx.AsyncClient, region: BoundingBox
    ) -> list[AircraftState]:
        payload = await get_json(
            client, self.base_url, params=region.as_params(), label=f"OpenSky {region}"
        )

        raw_states = payload.get("states") if isinstance(payload, dict) else None
        if not raw_states:
            return []

        states: list[AircraftState] = []
        for entry in raw_states:
            state = normalize_state_vector(entry, source=self.name)
            if state:
                states.append(state)
        return states


__all__ = [
    "BoundingBox",
    "DEFAULT_BOUNDING_BOXES",
    "OpenSkyFeed",
    "normalize_state_vector",
]
