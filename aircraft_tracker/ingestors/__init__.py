"""Aircraft feed adapters."""

from __future__ import annotations

import logging
from typing import Sequence

from .adsbone import ADSBOneFeed, CoveragePoint, normalize_readsb_aircraft
from .base import FeedAdapter, FeedRequestError, RegionFeed, dedupe_by_icao
from .opensky import BoundingBox, OpenSkyFeed, normalize_state_vector

logger = logging.getLogger("aircraft_tracker.ingestors")

FEED_REGISTRY: dict[str, type[RegionFeed]] = {
    ADSBOneFeed.name: ADSBOneFeed,
    OpenSkyFeed.name: OpenSkyFeed,
}


def build_feed_adapters(names: Sequence[str]) -> list[FeedAdapter]:
    """Instantiate feeds in the given priority order, skipping unknown names."""

    adapters: list[FeedAdapter] = []
    for name in names:
        feed_cls = FEED_REGISTRY.get(name)
        if feed_cls is None:
            logger.warning("Unknown feed %r in configuration; skipping", name)
            continue
        adapters.append(feed_cls())
    return adapters


__all__ = [
    "ADSBOneFeed",
    "BoundingBox",
    "CoveragePoint",
    "FEED_REGISTRY",
    "FeedAdapter",
    "FeedRequestError",
    "OpenSkyFeed",
    "RegionFeed",
    "build_feed_adapters",
    "dedupe_by_icao",
    "normalize_readsb_aircraft",
    "normalize_state_vector",
]
