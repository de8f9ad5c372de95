import asyncio
import threading
import time
from datetime import timedelta

import pytest
from sqlalchemy.exc import SQLAlchemyError

from aircraft_tracker import db_models
from aircraft_tracker.domain import classifier
from aircraft_tracker.models.aircraft import AircraftState
from aircraft_tracker.models.stats import IngestionSummary
from aircraft_tracker.services.fusion import FusionEngine
from aircraft_tracker.services.ingestion import IngestionCycle
from aircraft_tracker.services.store import TrackingStore


def _state(icao24: str, source: str = "adsbone", **fields) -> AircraftState:
    values = {"latitude": 55.75, "longitude": 37.62, "alt_baro": 32000.0}
    values.update(fields)
    return AircraftState(icao24=icao24, source=source, **values)


class FakeFusion:
    def __init__(self, states):
        self.states = states
        self.calls = 0

    async def fuse(self):
        self.calls += 1
        return list(self.states)


class StaticFeed:
    def __init__(self, name, states):
        self.name = name
        self.states = states

    async def fetch(self):
        return list(self.states)


@pytest.fixture(autouse=True)
def no_military_codes(monkeypatch):
    monkeypatch.setattr(classifier, "military_hex_codes", frozenset())


@pytest.mark.anyio
async def test_cycle_stores_only_aircraft_of_interest(session_factory, clock):
    fusion = FakeFusion(
        [
            _state("140abc", callsign="AFL100", aircraft_type="A321"),
            _state("4ca123", callsign="RYR1"),
            _state("150def", alt_baro="ground"),
        ]
    )
    cycle = IngestionCycle(fusion, session_factory, clock=clock)

    summary = await cycle.run()

    assert summary == IngestionSummary(tracked=2, stored=2)
    db = session_factory()
    try:
        aircraft = {a.icao24: a for a in db.query(db_models.Aircraft).all()}
        assert set(aircraft) == {"140abc", "150def"}
        assert aircraft["140abc"].callsign == "AFL100"
        assert aircraft["140abc"].aircraft_type == "A321"
        assert aircraft["140abc"].origin_country == "Russia"

        positions = {p.icao24: p for p in db.query(db_models.Position).all()}
        assert positions["140abc"].altitude == pytest.approx(32000.0)
        assert positions["140abc"].on_ground is False
        assert positions["150def"].altitude is None
        assert positions["150def"].on_ground is True
    finally:
        db.close()


@pytest.mark.anyio
async def test_cycle_prefers_primary_feed_and_filters_by_prefix(session_factory, clock):
    fusion = FusionEngine(
        [
            StaticFeed("adsbone", [_state("AABBCC", callsign="PRIMARY")]),
            StaticFeed("opensky", [_state("aabbcc", source="opensky", callsign="SECOND")]),
        ]
    )
    merged = await fusion.fuse()
    assert [(s.icao24, s.callsign) for s in merged] == [("aabbcc", "PRIMARY")]

    summary = await IngestionCycle(fusion, session_factory, clock=clock).run()

    assert summary == IngestionSummary(tracked=0, stored=0)
    db = session_factory()
    try:
        assert db.query(db_models.Aircraft).count() == 0
    finally:
        db.close()


@pytest.mark.anyio
async def test_cycle_without_data_returns_zero_summary(session_factory, clock):
    fusion = FakeFusion([])

    summary = await IngestionCycle(fusion, session_factory, clock=clock).run()

    assert summary == IngestionSummary(tracked=0, stored=0)


@pytest.mark.anyio
async def test_cycle_upserts_aircraft_without_position(session_factory, clock):
    fusion = FakeFusion([_state("140abc", latitude=None, longitude=None, callsign="SDM1")])

    summary = await IngestionCycle(fusion, session_factory, clock=clock).run()

    assert summary == IngestionSummary(tracked=1, stored=0)
    db = session_factory()
    try:
        assert db.query(db_models.Aircraft).one().callsign == "SDM1"
        assert db.query(db_models.Position).count() == 0
    finally:
        db.close()


@pytest.mark.anyio
async def test_cycle_isolates_per_aircraft_failures(session_factory, clock, monkeypatch):
    original = TrackingStore.insert_position

    def flaky_insert(self, icao24, *args, **kwargs):
        if icao24 == "140002":
            raise SQLAlchemyError("disk full")
        return original(self, icao24, *args, **kwargs)

    monkeypatch.setattr(TrackingStore, "insert_position", flaky_insert)
    fusion = FakeFusion([_state("140001"), _state("140002"), _state("140003")])

    summary = await IngestionCycle(fusion, session_factory, clock=clock).run()

    assert summary == IngestionSummary(tracked=3, stored=2)
    db = session_factory()
    try:
        stored = sorted(a.icao24 for a in db.query(db_models.Aircraft).all())
        assert stored == ["140001", "140003"]
    finally:
        db.close()


@pytest.mark.anyio
async def test_repeated_cycles_count_sightings(session_factory, clock):
    fusion = FakeFusion([_state("140abc", callsign="AFL100")])
    cycle = IngestionCycle(fusion, session_factory, clock=clock)

    await cycle.run()
    clock.advance(seconds=30)
    fusion.states = [_state("140abc", callsign=None)]
    await cycle.run()

    db = session_factory()
    try:
        record = db.query(db_models.Aircraft).one()
        assert record.total_sightings == 2
        assert record.callsign == "AFL100"
        assert record.last_seen == clock.current
        assert db.query(db_models.Position).count() == 2
    finally:
        db.close()


@pytest.mark.anyio
async def test_cycle_removes_positions_past_retention(session_factory, clock):
    fusion = FakeFusion([_state("140abc")])
    cycle = IngestionCycle(fusion, session_factory, retention=timedelta(hours=24), clock=clock)

    await cycle.run()
    clock.advance(hours=25)
    fusion.states = []
    await cycle.run()

    db = session_factory()
    try:
        assert db.query(db_models.Position).count() == 0
        assert db.query(db_models.Aircraft).count() == 1
    finally:
        db.close()


@pytest.mark.anyio
async def test_cycle_updates_daily_stats(session_factory, clock, monkeypatch):
    monkeypatch.setattr(classifier, "military_hex_codes", frozenset({"140001"}))
    fusion = FakeFusion([_state("140001"), _state("140002"), _state("4ca123")])
    cycle = IngestionCycle(fusion, session_factory, clock=clock)

    await cycle.run()
    clock.advance(seconds=30)
    await cycle.run()

    db = session_factory()
    try:
        row = db.query(db_models.DailyStats).one()
        assert row.day == clock.current.date()
        assert row.unique_aircraft == 2
        assert row.total_positions == 4
        assert row.military_count == 1
        assert row.civilian_count == 1
    finally:
        db.close()


@pytest.mark.anyio
async def test_overlapping_trigger_is_skipped(session_factory, clock):
    class BlockingFusion:
        def __init__(self):
            self.started = asyncio.Event()
            self.release = asyncio.Event()
            self.calls = 0

        async def fuse(self):
            self.calls += 1
            self.started.set()
            await self.release.wait()
            return []

    fusion = BlockingFusion()
    cycle = IngestionCycle(fusion, session_factory, clock=clock)

    first = asyncio.create_task(cycle.run())
    await fusion.started.wait()

    assert cycle.running is True
    assert await cycle.run() is None

    fusion.release.set()
    assert await first == IngestionSummary(tracked=0, stored=0)
    assert fusion.calls == 1
    assert cycle.running is False


@pytest.mark.anyio
async def test_cycle_database_work_does_not_block_event_loop(session_factory, clock, monkeypatch):
    loop_thread = threading.get_ident()
    writer_threads = set()
    original = TrackingStore.upsert_aircraft

    def slow_upsert(self, *args, **kwargs):
        writer_threads.add(threading.get_ident())
        time.sleep(0.05)
        return original(self, *args, **kwargs)

    monkeypatch.setattr(TrackingStore, "upsert_aircraft", slow_upsert)
    fusion = FakeFusion([_state(f"1400{n:02x}") for n in range(10)])
    cycle = IngestionCycle(fusion, session_factory, clock=clock)

    stalls = []
    done = asyncio.Event()

    async def ticker():
        last = time.monotonic()
        while not done.is_set():
            await asyncio.sleep(0.01)
            now = time.monotonic()
            stalls.append(now - last)
            last = now

    ticking = asyncio.create_task(ticker())
    summary = await cycle.run()
    done.set()
    await ticking

    assert summary == IngestionSummary(tracked=10, stored=10)
    assert writer_threads and loop_thread not in writer_threads
    assert max(stalls) < 0.25
