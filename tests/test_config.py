import pytest

from aircraft_tracker import config


class FakeSSMClient:
    def __init__(self, values):
        self.values = values
        self.requests = []

    def get_parameter(self, Name, WithDecryption):
        self.requests.append((Name, WithDecryption))
        return {"Parameter": {"Value": self.values.get(Name)}}


@pytest.fixture
def fake_ssm(monkeypatch):
    client = FakeSSMClient({"/tracker/opensky/username": "spotter"})
    monkeypatch.setattr(config.boto3, "client", lambda *args, **kwargs: client)
    config.get_ssm_parameter.cache_clear()
    yield client
    config.get_ssm_parameter.cache_clear()


def test_get_ssm_parameter_decrypts_and_caches(fake_ssm):
    assert config.get_ssm_parameter("/tracker/opensky/username") == "spotter"
    assert config.get_ssm_parameter("/tracker/opensky/username") == "spotter"

    assert fake_ssm.requests == [("/tracker/opensky/username", True)]


def test_get_ssm_parameter_rejects_empty_value(fake_ssm):
    with pytest.raises(RuntimeError):
        config.get_ssm_parameter("/tracker/opensky/password")


def test_feed_list_parsing(monkeypatch):
    monkeypatch.setenv("TRACKER_FEEDS", " OpenSky, ,adsbone ")

    assert config._get_list("TRACKER_FEEDS", "adsbone") == ["opensky", "adsbone"]


def test_bool_parsing(monkeypatch):
    monkeypatch.setenv("TRACKER_ENABLE_SCHEDULER", "off")
    assert config._get_bool("TRACKER_ENABLE_SCHEDULER", default=True) is False

    monkeypatch.setenv("TRACKER_ENABLE_SCHEDULER", "Yes")
    assert config._get_bool("TRACKER_ENABLE_SCHEDULER") is True

    monkeypatch.delenv("TRACKER_ENABLE_SCHEDULER")
    assert config._get_bool("TRACKER_ENABLE_SCHEDULER", default=True) is True


def test_default_settings():
    defaults = config.Settings()

    assert defaults.retention_hours > 0
    assert defaults.track_gap_seconds > 0
    assert defaults.adsbone_base_url.startswith("https://")
