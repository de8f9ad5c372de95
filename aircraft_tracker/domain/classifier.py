"""Nationality and military classification of ICAO24 addresses."""

from __future__ import annotations

import json
import logging
from pathlib import Path

from aircraft_tracker.config import settings

logger = logging.getLogger("aircraft_tracker.classifier")

# ICAO 24-bit block allocated to Russia (hex prefixes 140-157)
INTEREST_PREFIXES: frozenset[str] = frozenset(
    [f"14{digit}" for digit in "0123456789abcdef"]
    + [f"15{digit}" for digit in "01234567"]
)


def is_of_interest(icao24: str | None) -> bool:
    """Return True if the address falls inside the tracked nationality block."""

    if not icao24:
        return False
    return icao24.lower()[:3] in INTEREST_PREFIXES


def load_military_hex_codes(path: str | Path | None) -> frozenset[str]:
    """Load the optional military hex dataset.

    The dataset is a JSON list of objects, each optionally carrying a ``hex``
    field. A missing or malformed file yields an empty set.
    """

    if not path:
        return frozenset()

    dataset_path = Path(path)
    try:
        raw = json.loads(dataset_path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        logger.info(
            "No military hex database found at %s, continuing without military classification",
            dataset_path,
        )
        return frozenset()
    except (OSError, ValueError) as exc:
        logger.warning("Failed to load military hex database from %s: %s", dataset_path, exc)
        return frozenset()

    if not isinstance(raw, list):
        logger.warning("Military hex database at %s is not a list; ignoring", dataset_path)
        return frozenset()

    codes = frozenset(
        item["hex"].lower()
        for item in raw
        if isinstance(item, dict) and isinstance(item.get("hex"), str) and item["hex"]
    )
    logger.info("Loaded %s military hex codes", len(codes))
    return codes


military_hex_codes: frozenset[str] = load_military_hex_codes(settings.military_hex_path)


def is_military(icao24: str | None, codes: frozenset[str] | None = None) -> bool:
    """Return True if the address is listed in the military dataset."""

    if not icao24:
        return False
    lookup = military_hex_codes if codes is None else codes
    return icao24.lower() in lookup


__all__ = [
    "INTEREST_PREFIXES",
    "is_military",
    "is_of_interest",
    "load_military_hex_codes",
    "military_hex_codes",
]
