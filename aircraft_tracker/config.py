"""Configuration settings for the aircraft tracker."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from functools import lru_cache

import boto3
from botocore.exceptions import BotoCoreError, ClientError

logger = logging.getLogger("aircraft_tracker.config")


def _get_bool(env_var: str, default: bool = False) -> bool:
    """Parse an environment variable into a boolean with a default."""

    value = os.getenv(env_var)
    if value is None:
        return default

    return value.lower() in {"1", "true", "yes", "on"}


def _get_list(env_var: str, default: str) -> list[str]:
    raw = os.getenv(env_var, default)
    return [item.strip().lower() for item in raw.split(",") if item.strip()]


@lru_cache(maxsize=4)
def get_ssm_parameter(name: str) -> str:
    """Fetch a decrypted parameter from AWS SSM Parameter Store.

    Values are cached in-memory to avoid repeated SSM calls. Any failure is
    raised as a runtime error so callers decide whether it is fatal.
    """

    client = boto3.client(
        "ssm",
        region_name=os.getenv("AWS_REGION") or os.getenv("AWS_DEFAULT_REGION") or "us-east-1",
    )
    try:
        response = client.get_parameter(Name=name, WithDecryption=True)
        value = response.get("Parameter", {}).get("Value")
    except (ClientError, BotoCoreError) as exc:  # pragma: no cover - AWS error passthrough
        logger.error("Failed to load %s from SSM: %s", name, exc)
        raise RuntimeError(f"Unable to load {name} from SSM") from exc

    if not value:
        logger.error("Received empty value for %s from SSM", name)
        raise RuntimeError(f"{name} not configured in SSM")

    return value


@dataclass
class Settings:
    """Application configuration loaded from environment variables."""

    tracker_env: str = os.getenv("TRACKER_ENV", "local")
    log_level: str = os.getenv("TRACKER_LOG_LEVEL", "INFO")
    db_url: str = os.getenv("TRACKER_DB_URL", "sqlite:///./aircraft_tracker.db")

    # Retention and track assembly
    retention_hours: int = int(os.getenv("TRACKER_RETENTION_HOURS", "24"))
    track_gap_seconds: float = float(os.getenv("TRACKER_TRACK_GAP_SECONDS", "300"))
    live_window_minutes: int = int(os.getenv("TRACKER_LIVE_WINDOW_MINUTES", "5"))

    # Scheduling
    enable_scheduler: bool = _get_bool("TRACKER_ENABLE_SCHEDULER", default=True)
    fetch_interval_seconds: float = float(os.getenv("TRACKER_FETCH_INTERVAL_SECONDS", "30"))
    initial_fetch_delay_seconds: float = float(
        os.getenv("TRACKER_INITIAL_FETCH_DELAY_SECONDS", "2")
    )

    # Classification
    military_hex_path: str = os.getenv(
        "TRACKER_MILITARY_HEX_PATH", "assets/military_hex.json"
    )
    origin_country: str = os.getenv("TRACKER_ORIGIN_COUNTRY", "Russia")

    # Feeds, listed in priority order
    feeds: list[str] = field(default_factory=lambda: _get_list("TRACKER_FEEDS", "adsbone,opensky"))
    feed_timeout: float = float(os.getenv("FEED_TIMEOUT", "10.0"))
    feed_region_timeout: float = float(os.getenv("FEED_REGION_TIMEOUT", "15.0"))
    feed_adapter_timeout: float = float(os.getenv("FEED_ADAPTER_TIMEOUT", "45.0"))
    feed_max_concurrency: int = int(os.getenv("FEED_MAX_CONCURRENCY", "4"))
    feed_user_agent: str = os.getenv("FEED_USER_AGENT", "AircraftTracker/1.0")

    adsbone_base_url: str = os.getenv("ADSBONE_BASE_URL", "https://api.adsb.one/v2")
    opensky_base_url: str = os.getenv(
        "OPENSKY_BASE_URL", "https://opensky-network.org/api/states/all"
    )
    opensky_username: str | None = os.getenv("OPENSKY_USERNAME")
    opensky_password: str | None = os.getenv("OPENSKY_PASSWORD")
    opensky_ssm_prefix: str | None = os.getenv("OPENSKY_SSM_PREFIX")


settings = Settings()

# Pull OpenSky credentials from SSM only when a prefix is configured
if settings.opensky_ssm_prefix and not settings.opensky_username:
    try:
        prefix = settings.opensky_ssm_prefix.rstrip("/")
        settings.opensky_username = get_ssm_parameter(f"{prefix}/username")
        settings.opensky_password = get_ssm_parameter(f"{prefix}/password")
    except RuntimeError:
        logger.warning("OpenSky credentials not available; using anonymous access")

__all__ = ["settings", "Settings", "get_ssm_parameter"]
