import httpx
import pytest

from aircraft_tracker.ingestors.opensky import (
    BoundingBox,
    DEFAULT_BOUNDING_BOXES,
    OpenSkyFeed,
    normalize_state_vector,
)
from aircraft_tracker.models.aircraft import GROUND_SENTINEL

BOXES = [BoundingBox(53, 14, 70, 32, label="Baltic")]


def _state_vector(icao24="abc123", on_ground=False, baro_altitude=3657.6):
    return [
        icao24,  # icao24
        "TEST123 ",  # callsign with trailing space
        "Russia",
        1714765198,  # time_position
        1714765200,  # last_contact
        20.0,  # longitude
        10.0,  # latitude
        baro_altitude,  # baro_altitude meters
        on_ground,  # on_ground
        164.6,  # velocity m/s
        90.0,  # true_track
        2.0,  # vertical_rate m/s
        None,  # sensors
        3700.0,  # geo_altitude meters
        "7000",  # squawk
        False,  # spi
        0,  # position_source
    ]


def test_default_bounding_boxes():
    assert [box.as_params() for box in DEFAULT_BOUNDING_BOXES] == [
        {"lamin": 53, "lomin": 14, "lamax": 70, "lomax": 32},
        {"lamin": 50, "lomin": 30, "lamax": 70, "lomax": 60},
    ]


def test_normalize_state_vector_converts_units():
    state = normalize_state_vector(_state_vector())

    assert state is not None
    assert state.icao24 == "abc123"
    assert state.callsign == "TEST123"
    assert state.latitude == 10.0
    assert state.longitude == 20.0
    assert state.alt_baro == pytest.approx(12000.0, rel=1e-4)
    assert state.alt_geom == pytest.approx(12139.108, rel=1e-4)
    assert state.ground_speed == pytest.approx(319.96, rel=1e-3)
    assert state.track == 90
    assert state.vertical_rate == pytest.approx(393.7008, rel=1e-3)
    assert state.squawk == "7000"
    assert state.on_ground is False
    assert state.source == "opensky"


def test_normalize_state_vector_on_ground_uses_sentinel():
    state = normalize_state_vector(_state_vector(on_ground=True, baro_altitude=None))

    assert state is not None
    assert state.alt_baro == GROUND_SENTINEL
    assert state.on_ground is True
    assert state.numeric_altitude is None


def test_normalize_state_vector_falls_back_to_geometric_altitude():
    state = normalize_state_vector(_state_vector(baro_altitude=None))

    assert state is not None
    assert state.numeric_altitude == pytest.approx(12139.108, rel=1e-4)


@pytest.mark.parametrize("entry", [None, [], [None, "X"], ["   ", "X"], {"icao24": "abc"}])
def test_normalize_state_vector_rejects_unusable_entries(entry):
    assert normalize_state_vector(entry) is None


def test_normalize_state_vector_tolerates_short_vectors():
    state = normalize_state_vector(["140abc", "SDM6001"])

    assert state is not None
    assert state.callsign == "SDM6001"
    assert state.has_position is False


@pytest.mark.anyio
async def test_opensky_feed_parses_states():
    def handler(request: httpx.Request):
        assert request.url.params["lamin"] == "53"
        assert request.url.params["lomax"] == "32"
        assert "authorization" not in request.headers
        return httpx.Response(
            200,
            json={"time": 1714765200, "states": [_state_vector(), _state_vector("ABC123")]},
        )

    feed = OpenSkyFeed(
        base_url="https://example.test/api/states/all",
        boxes=BOXES,
        username="",
        password="",
        transport=httpx.MockTransport(handler),
    )

    states = await feed.fetch()

    assert len(states) == 1
    assert states[0].icao24 == "abc123"


@pytest.mark.anyio
async def test_opensky_feed_sends_basic_auth_when_configured():
    def handler(request: httpx.Request):
        assert request.headers["authorization"].startswith("Basic ")
        return httpx.Response(200, json={"states": None})

    feed = OpenSkyFeed(
        base_url="https://example.test/api/states/all",
        boxes=BOXES,
        username="user",
        password="secret",
        transport=httpx.MockTransport(handler),
    )

    assert await feed.fetch() == []


@pytest.mark.anyio
async def test_opensky_feed_handles_rate_limit():
    def handler(request: httpx.Request):
        return httpx.Response(429, text="rate limited")

    feed = OpenSkyFeed(
        base_url="https://example.test/api/states/all",
        boxes=BOXES,
        username="",
        password="",
        transport=httpx.MockTransport(handler),
    )

    assert await feed.fetch() == []


@pytest.mark.anyio
async def test_opensky_feed_handles_error_response():
    def handler(request: httpx.Request):
        return httpx.Response(503, text="unavailable")

    feed = OpenSkyFeed(
        base_url="https://example.test/api/states/all",
        boxes=BOXES,
        username="",
        password="",
        transport=httpx.MockTransport(handler),
    )

    assert await feed.fetch() == []
