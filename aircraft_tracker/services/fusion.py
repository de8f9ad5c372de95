"""Concurrent multi-feed fetch and priority-ordered deduplicating merge."""

from __future__ import annotations

import asyncio
import logging
from typing import Sequence

from aircraft_tracker.config import settings
from aircraft_tracker.ingestors import FeedAdapter, build_feed_adapters
from aircraft_tracker.models.aircraft import AircraftState

logger = logging.getLogger("aircraft_tracker.fusion")


def merge_feed_results(results: Sequence[Sequence[AircraftState]]) -> list[AircraftState]:
    """Merge per-feed snapshots given in priority order.

    A state is admitted only if no higher-priority feed already supplied the
    same ICAO24 address, so the output holds at most one state per address.
    """

    seen: set[str] = set()
    merged: list[AircraftState] = []
    for states in results:
        for state in states:
            key = state.icao24.lower()
            if key in seen:
                continue
            seen.add(key)
            merged.append(state)
    return merged


class FusionEngine:
    """Run every configured feed concurrently and fuse their snapshots."""

    def __init__(
        self,
        adapters: Sequence[FeedAdapter] | None = None,
        *,
        adapter_timeout: float | None = None,
    ) -> None:
        self.adapters = list(adapters) if adapters is not None else build_feed_adapters(settings.feeds)
        self.adapter_timeout = adapter_timeout or settings.feed_adapter_timeout

    async def _run_adapter(self, adapter: FeedAdapter) -> list[AircraftState]:
        try:
            return await asyncio.wait_for(adapter.fetch(), timeout=self.adapter_timeout)
        except asyncio.TimeoutError:
            logger.warning(
                "Feed %s did not finish within %ss; ignoring this cycle",
                adapter.name,
                self.adapter_timeout,
            )
        except Exception as exc:
            logger.warning("Feed %s failed: %s", adapter.name, exc, exc_info=True)
        return []

    async def fetch_all(self) -> list[list[AircraftState]]:
        """Return each adapter's snapshot, in priority order."""

        return list(await asyncio.gather(*(self._run_adapter(a) for a in self.adapters)))

    async def fuse(self) -> list[AircraftState]:
        results = await self.fetch_all()
        merged = merge_feed_results(results)

        counts = ", ".join(
            f"{adapter.name}: {len(states)}" for adapter, states in zip(self.adapters, results)
        )
        logger.info("Merged %s aircraft (%s)", len(merged), counts or "no feeds")
        return merged


__all__ = ["FusionEngine", "merge_feed_results"]
