"""Service-layer components for the aircraft tracker."""

from .fusion import FusionEngine, merge_feed_results
from .ingestion import IngestionCycle
from .scheduler import IngestionScheduler
from .store import IdentifierSummary, TrackingStore
from .tracks import (
    TrackReconstructor,
    build_track,
    filter_by_radius,
    split_into_segments,
)

__all__ = [
    "FusionEngine",
    "IdentifierSummary",
    "IngestionCycle",
    "IngestionScheduler",
    "TrackReconstructor",
    "TrackingStore",
    "build_track",
    "filter_by_radius",
    "merge_feed_results",
    "split_into_segments",
]
