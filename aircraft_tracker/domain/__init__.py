"""Pure domain rules: classification and geometry."""

from .classifier import INTEREST_PREFIXES, is_military, is_of_interest, load_military_hex_codes
from .geo import EARTH_RADIUS_KM, haversine_km, within_radius

__all__ = [
    "EARTH_RADIUS_KM",
    "INTEREST_PREFIXES",
    "haversine_km",
    "is_military",
    "is_of_interest",
    "load_military_hex_codes",
    "within_radius",
]
