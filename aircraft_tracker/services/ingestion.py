"""Fetch-and-store cycle: retention, fusion, filtering, persistence, daily stats."""

from __future__ import annotations

import asyncio
from datetime import datetime, timedelta
import logging
from typing import Any, Callable, Optional, TypeVar

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from aircraft_tracker.config import settings
from aircraft_tracker.domain import classifier
from aircraft_tracker.models.aircraft import AircraftState
from aircraft_tracker.models.stats import IngestionSummary
from aircraft_tracker.services.fusion import FusionEngine
from aircraft_tracker.services.store import TrackingStore

logger = logging.getLogger("aircraft_tracker.ingestion")

T = TypeVar("T")


class IngestionCycle:
    """One fetch-and-store pass, guarded so two passes never overlap."""

    def __init__(
        self,
        fusion: FusionEngine,
        session_factory: Callable[[], Session],
        *,
        retention: timedelta | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self.fusion = fusion
        self.session_factory = session_factory
        self.retention = retention or timedelta(hours=settings.retention_hours)
        self.clock = clock
        self._lock = asyncio.Lock()

    @property
    def running(self) -> bool:
        return self._lock.locked()

    async def run(self) -> Optional[IngestionSummary]:
        """Execute one cycle; returns None when a previous cycle is still running."""

        if self._lock.locked():
            logger.warning("Ingestion cycle already running; skipping this trigger")
            return None

        async with self._lock:
            return await self._run()

    def _with_store(self, work: Callable[..., T], *args: Any) -> T:
        db = self.session_factory()
        try:
            return work(TrackingStore(db, clock=self.clock), *args)
        finally:
            db.close()

    async def _run(self) -> IngestionSummary:
        # Sessions are synchronous; database phases run in a worker thread.
        await asyncio.to_thread(self._with_store, self._cleanup)

        fused = await self.fusion.fuse()
        if not fused:
            logger.warning("No aircraft data received from any source")
            return IngestionSummary(tracked=0, stored=0)

        of_interest = [state for state in fused if classifier.is_of_interest(state.icao24)]
        logger.info(
            "Found %s aircraft of interest out of %s total", len(of_interest), len(fused)
        )

        stored = await asyncio.to_thread(self._with_store, self._persist, of_interest)

        logger.info("Stored %s positions from %s aircraft", stored, len(of_interest))
        return IngestionSummary(tracked=len(of_interest), stored=stored)

    def _persist(self, store: TrackingStore, states: list[AircraftState]) -> int:
        stored = sum(1 for state in states if self._store_state(store, state))
        self._update_daily_stats(store)
        return stored

    def _cleanup(self, store: TrackingStore) -> int:
        try:
            deleted = store.delete_older_than(self.retention)
        except SQLAlchemyError as exc:
            store.rollback()
            logger.error("Error cleaning up old positions: %s", exc)
            return 0
        if deleted:
            logger.info("Cleaned up %s old position records", deleted)
        return deleted

    def _store_state(self, store: TrackingStore, state: AircraftState) -> bool:
        """Persist one aircraft; returns True when a position row was inserted."""

        icao24 = state.icao24.lower() if state.icao24 else None
        if not icao24:
            return False

        try:
            store.upsert_aircraft(
                icao24,
                callsign=state.callsign,
                aircraft_type=state.type_label,
                registration=state.registration,
            )
            inserted = False
            if state.has_position:
                store.insert_position(
                    icao24,
                    state.callsign,
                    state.latitude,
                    state.longitude,
                    altitude=state.numeric_altitude,
                    velocity=state.ground_speed,
                    heading=state.track,
                    vertical_rate=state.vertical_rate,
                    on_ground=state.on_ground,
                )
                inserted = True
            store.commit()
            return inserted
        except SQLAlchemyError as exc:
            store.rollback()
            logger.error("Error storing aircraft %s: %s", icao24, exc)
            return False

    def _update_daily_stats(self, store: TrackingStore) -> None:
        try:
            today = store.now().date()
            counts = store.count_day(today)
            military = sum(1 for icao24 in counts.icao24s if classifier.is_military(icao24))
            store.upsert_daily_aggregate(
                today,
                counts.unique_aircraft,
                counts.total_positions,
                military_count=military,
                civilian_count=counts.unique_aircraft - military,
            )
        except SQLAlchemyError as exc:
            store.rollback()
            logger.error("Error updating daily stats: %s", exc)


__all__ = ["IngestionCycle"]
