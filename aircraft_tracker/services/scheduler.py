"""Periodic trigger for the ingestion cycle."""

from __future__ import annotations

import asyncio
import logging

from aircraft_tracker.config import settings
from aircraft_tracker.services.ingestion import IngestionCycle

logger = logging.getLogger("aircraft_tracker.scheduler")


class IngestionScheduler:
    """Run the ingestion cycle on a fixed interval until cancelled."""

    def __init__(
        self,
        cycle: IngestionCycle,
        *,
        interval_seconds: float | None = None,
        initial_delay_seconds: float | None = None,
        max_runs: int | None = None,
    ) -> None:
        self.cycle = cycle
        self.interval_seconds = (
            settings.fetch_interval_seconds if interval_seconds is None else interval_seconds
        )
        self.initial_delay_seconds = (
            settings.initial_fetch_delay_seconds
            if initial_delay_seconds is None
            else initial_delay_seconds
        )
        self.max_runs = max_runs
        self.runs = 0

    async def run(self) -> None:
        await asyncio.sleep(self.initial_delay_seconds)
        logger.info("Running initial aircraft fetch")

        while True:
            try:
                summary = await self.cycle.run()
                if summary is not None:
                    logger.info(
                        "Ingestion cycle finished: tracked=%s stored=%s",
                        summary.tracked,
                        summary.stored,
                    )
            except asyncio.CancelledError:
                logger.info("Ingestion scheduler cancelled")
                raise
            except Exception as exc:
                logger.error("Error in scheduled fetch: %s", exc, exc_info=True)

            self.runs += 1
            if self.max_runs is not None and self.runs >= self.max_runs:
                return
            await asyncio.sleep(self.interval_seconds)


__all__ = ["IngestionScheduler"]
