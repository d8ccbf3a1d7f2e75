# hotzones/geo.py
# Geometry and decay helpers for zones and proximity checks
# - pure functions; timestamps are Unix ms and ages use an explicit now_ms
# - Haversine distance, zone stability, recency decay, distance labels

from __future__ import annotations

import math
from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from hotzones.models import GeoLocation, Zone

EARTH_RADIUS_M = 6_371_000.0


class ZoneStability(str, Enum):
    ACTIVE = "active"
    STABLE = "stable"
    FADING = "fading"


def distance_meters(a: GeoLocation, b: GeoLocation) -> float:
    """Great-circle distance between two locations using the Haversine formula.

    Args:
        a: First location.
        b: Second location.

    Returns:
        Distance in meters on a mean-radius spherical Earth.
    """
    lat1 = math.radians(a.lat)
    lat2 = math.radians(b.lat)
    d_lat = lat2 - lat1
    d_lng = math.radians(b.lng - a.lng)

    h = math.sin(d_lat / 2) ** 2 + math.cos(lat1) * math.cos(lat2) * math.sin(d_lng / 2) ** 2
    return 2 * EARTH_RADIUS_M * math.atan2(math.sqrt(h), math.sqrt(1 - h))


def recency_decay(last_activity_ms: int, now_ms: int) -> float:
    """Presentation multiplier in [0.1, 1.0] that fades with the age of the last activity.

    Piecewise over age in seconds:
        age < 30          -> 1.0
        30 <= age < 120   -> 0.7 .. 1.0 (linear)
        120 <= age < 300  -> 0.3 .. 0.7 (linear)
        age >= 300        -> 0.3 .. 0.1 (linear, floored at 0.1)
    """
    age = (now_ms - last_activity_ms) / 1000

    if age < 30:
        return 1.0
    if age < 120:
        return 0.7 + 0.3 * (1 - (age - 30) / 90)
    if age < 300:
        return 0.3 + 0.4 * (1 - (age - 120) / 180)
    return max(0.1, 0.3 * (1 - (age - 300) / 300))


def zone_stability(last_activity_ms: int, intensity: float, now_ms: int) -> ZoneStability:
    age = (now_ms - last_activity_ms) / 1000

    if age < 60 and intensity > 0.6:
        return ZoneStability.ACTIVE
    if age < 120:
        return ZoneStability.STABLE
    return ZoneStability.FADING


def decayed_intensity(zone: Zone, now_ms: int) -> float:
    """Stored zone intensity projected through the recency decay curve."""
    return zone.intensity * recency_decay(zone.last_activity, now_ms)


def format_distance(meters: float) -> str:
    if meters < 1000:
        return f"{round(meters)}m"
    return f"{meters / 1000:.1f}km"
