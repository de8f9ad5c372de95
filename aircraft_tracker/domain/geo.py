"""Great-circle helpers."""

from __future__ import annotations

import math

EARTH_RADIUS_KM = 6371.0


def haversine_km(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Distance between two points in kilometres using the Haversine formula."""

    d_lat = math.radians(lat2 - lat1)
    d_lon = math.radians(lon2 - lon1)
    a = (
        math.sin(d_lat / 2) ** 2
        + math.cos(math.radians(lat1)) * math.cos(math.radians(lat2)) * math.sin(d_lon / 2) ** 2
    )
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_KM * c


def within_radius(
    lat: float | None,
    lon: float | None,
    center_lat: float,
    center_lon: float,
    radius_km: float,
) -> bool:
    """True when the point exists and lies on or inside the circle."""

    if lat is None or lon is None:
        return False
    return haversine_km(center_lat, center_lon, lat, lon) <= radius_km


__all__ = ["EARTH_RADIUS_KM", "haversine_km", "within_radius"]
