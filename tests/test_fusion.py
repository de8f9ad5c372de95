import asyncio
import logging

import pytest

from aircraft_tracker.models.aircraft import AircraftState
from aircraft_tracker.services.fusion import FusionEngine, merge_feed_results


def _state(icao24: str, source: str, callsign: str | None = None) -> AircraftState:
    return AircraftState(icao24=icao24, callsign=callsign, source=source)


class FakeFeed:
    def __init__(self, name: str, states=None, error: Exception | None = None, delay: float = 0):
        self.name = name
        self.states = states or []
        self.error = error
        self.delay = delay
        self.calls = 0

    async def fetch(self):
        self.calls += 1
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error:
            raise self.error
        return list(self.states)


def test_merge_prefers_earlier_feeds():
    primary = [_state("140ABC", "adsbone", "SU100"), _state("150def", "adsbone")]
    secondary = [_state("140abc", "opensky", "OTHER"), _state("151000", "opensky")]

    merged = merge_feed_results([primary, secondary])

    assert [s.icao24 for s in merged] == ["140abc", "150def", "151000"]
    assert merged[0].callsign == "SU100"
    assert merged[0].source == "adsbone"


def test_merge_is_union_of_identifiers():
    feeds = [
        [_state("140001", "a"), _state("140002", "a")],
        [_state("140002", "b"), _state("140003", "b")],
        [],
        [_state("140003", "c"), _state("140004", "c")],
    ]

    merged = merge_feed_results(feeds)

    assert {s.icao24 for s in merged} == {"140001", "140002", "140003", "140004"}
    assert len(merged) == 4


def test_merge_with_no_feeds():
    assert merge_feed_results([]) == []


@pytest.mark.anyio
async def test_fusion_engine_tolerates_failing_feed():
    broken = FakeFeed("adsbone", error=RuntimeError("boom"))
    working = FakeFeed("opensky", [_state("140abc", "opensky")])
    engine = FusionEngine([broken, working])

    merged = await engine.fuse()

    assert [s.icao24 for s in merged] == ["140abc"]
    assert broken.calls == 1
    assert working.calls == 1


@pytest.mark.anyio
async def test_fusion_engine_times_out_slow_feed():
    slow = FakeFeed("adsbone", [_state("140abc", "adsbone")], delay=5)
    fast = FakeFeed("opensky", [_state("150def", "opensky")])
    engine = FusionEngine([slow, fast], adapter_timeout=0.05)

    results = await engine.fetch_all()

    assert results[0] == []
    assert [s.icao24 for s in results[1]] == ["150def"]


@pytest.mark.anyio
async def test_fusion_engine_keeps_priority_order():
    first = FakeFeed("adsbone", [_state("140abc", "adsbone", "FIRST")], delay=0.02)
    second = FakeFeed("opensky", [_state("140abc", "opensky", "SECOND")])
    engine = FusionEngine([first, second])

    merged = await engine.fuse()

    assert len(merged) == 1
    assert merged[0].callsign == "FIRST"


@pytest.mark.anyio
async def test_fusion_engine_all_feeds_empty():
    engine = FusionEngine([FakeFeed("adsbone"), FakeFeed("opensky", error=ValueError("bad"))])

    assert await engine.fuse() == []


def test_fusion_engine_builds_configured_feeds(monkeypatch):
    from aircraft_tracker.config import settings

    monkeypatch.setattr(settings, "feeds", ["opensky", "unknown", "adsbone"])

    engine = FusionEngine()

    assert [adapter.name for adapter in engine.adapters] == ["opensky", "adsbone"]


@pytest.mark.anyio
async def test_fusion_engine_logs_fractional_timeout(caplog):
    slow = FakeFeed("adsbone", delay=5)
    engine = FusionEngine([slow], adapter_timeout=0.05)

    with caplog.at_level(logging.WARNING, logger="aircraft_tracker.fusion"):
        await engine.fuse()

    assert "Feed adsbone did not finish within 0.05s" in caplog.text
