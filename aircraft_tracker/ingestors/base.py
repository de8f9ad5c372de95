"""Shared plumbing for aircraft feed adapters."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Callable, Iterable, Protocol, Sequence

import httpx

from aircraft_tracker.config import settings
from aircraft_tracker.models.aircraft import AircraftState

logger = logging.getLogger("aircraft_tracker.ingestors")


class FeedAdapter(Protocol):
    """A provider of aircraft state snapshots."""

    name: str

    async def fetch(self) -> list[AircraftState]:
        """Return the provider's current snapshot, deduplicated by ICAO24."""


class FeedRequestError(RuntimeError):
    """Raised when a single region request cannot produce a payload."""


def dedupe_by_icao(states: Iterable[AircraftState]) -> list[AircraftState]:
    """Keep the first state seen for each ICAO24 address."""

    seen: set[str] = set()
    unique: list[AircraftState] = []
    for state in states:
        if state.icao24 in seen:
            continue
        seen.add(state.icao24)
        unique.append(state)
    return unique


async def get_json(
    client: httpx.AsyncClient,
    url: str,
    *,
    params: dict[str, Any] | None = None,
    label: str,
) -> Any:
    """GET a JSON document, translating every failure into FeedRequestError."""

    try:
        response = await client.get(url, params=params)
    except httpx.TimeoutException as exc:
        raise FeedRequestError(f"{label} request timed out: {exc}") from exc
    except httpx.RequestError as exc:
        raise FeedRequestError(f"{label} request failed: {exc}") from exc

    if response.status_code == 429:
        raise FeedRequestError(f"{label} rate limit encountered: {response.text}")
    try:
        response.raise_for_status()
    except httpx.HTTPStatusError as exc:
        raise FeedRequestError(
            f"{label} returned HTTP {exc.response.status_code}"
        ) from exc

    try:
        return response.json()
    except ValueError as exc:
        raise FeedRequestError(f"{label} returned invalid JSON: {exc}") from exc


class RegionFeed:
    """Base class for feeds that query several geographic regions.

    Subclasses provide ``regions`` and implement ``fetch_region``. Regions are
    requested concurrently over a single client; a failing region is logged
    and contributes nothing. ``region_timeout`` bounds a whole region request
    once it holds a concurrency slot, since httpx timeouts apply per phase.
    """

    name = "feed"

    def __init__(
        self,
        regions: Sequence[Any],
        *,
        timeout: float | None = None,
        region_timeout: float | None = None,
        max_concurrency: int | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.regions = list(regions)
        self.timeout = timeout or settings.feed_timeout
        self.region_timeout = region_timeout or settings.feed_region_timeout
        self.max_concurrency = max(max_concurrency or settings.feed_max_concurrency, 1)
        self.transport = transport

    def client_options(self) -> dict[str, Any]:
        return {
            "timeout": self.timeout,
            "transport": self.transport,
            "headers": {
                "User-Agent": settings.feed_user_agent,
                "Accept": "application/json",
            },
        }

    async def fetch_region(
        self, client: httpx.AsyncClient, region: Any
    ) -> list[AircraftState]:  # pragma: no cover - abstract
        raise NotImplementedError

    async def fetch(self) -> list[AircraftState]:
        semaphore = asyncio.Semaphore(self.max_concurrency)

        async with httpx.AsyncClient(**self.client_options()) as client:

            async def guarded(region: Any) -> list[AircraftState]:
                async with semaphore:
                    try:
                        return await asyncio.wait_for(
                            self.fetch_region(client, region), timeout=self.region_timeout
                        )
                    except asyncio.TimeoutError as exc:
                        raise FeedRequestError(
                            f"{self.name} region {region} exceeded {self.region_timeout}s"
                        ) from exc

            results = await _gather_regions(guarded, self.regions)

        collected: list[AircraftState] = []
        failures = 0
        for region, result in zip(self.regions, results):
            if isinstance(result, BaseException):
                failures += 1
                logger.warning("%s region %s skipped: %s", self.name, region, result)
                continue
            collected.extend(result)

        states = dedupe_by_icao(collected)
        logger.info(
            "Fetched %s aircraft from %s (%s/%s regions ok)",
            len(states),
            self.name,
            len(self.regions) - failures,
            len(self.regions),
        )
        return states


async def _gather_regions(
    worker: Callable[[Any], Awaitable[list[AircraftState]]], regions: Sequence[Any]
) -> list[list[AircraftState] | BaseException]:
    tasks = [worker(region) for region in regions]
    results = await asyncio.gather(*tasks, return_exceptions=True)
    for result in results:
        if isinstance(result, asyncio.CancelledError):
            raise result
    return list(results)


def coerce_float(value: Any) -> float | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def coerce_str(value: Any) -> str | None:
    if value is None:
        return None
    return str(value)


__all__ = [
    "FeedAdapter",
    "FeedRequestError",
    "RegionFeed",
    "coerce_float",
    "coerce_str",
    "dedupe_by_icao",
    "get_json",
]
