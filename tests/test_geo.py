import pytest

from hotzones.geo import (
    ZoneStability,
    decayed_intensity,
    distance_meters,
    format_distance,
    recency_decay,
    zone_stability,
)
from hotzones.models import GeoLocation, Zone

from .conftest import FAR_AWAY, SF, SF_NEARBY, START_MS


def test_distance_to_self_is_zero():
    assert distance_meters(SF, SF) == 0.0


def test_distance_is_symmetric():
    assert distance_meters(SF, FAR_AWAY) == pytest.approx(distance_meters(FAR_AWAY, SF))


def test_distance_nearby_points():
    assert distance_meters(SF, SF_NEARBY) == pytest.approx(14.1, abs=0.5)


def test_one_degree_latitude():
    d = distance_meters(GeoLocation(0.0, 0.0), GeoLocation(1.0, 0.0))
    assert d == pytest.approx(111_195, rel=1e-3)


@pytest.mark.parametrize(
    "age_seconds, expected",
    [
        (0, 1.0),
        (29, 1.0),
        (30, 1.0),
        (75, 0.85),
        (120, 0.7),
        (210, 0.5),
        (300, 0.3),
        (450, 0.15),
        (600, 0.1),
        (3600, 0.1),
    ],
)
def test_recency_decay_curve(age_seconds, expected):
    assert recency_decay(START_MS, START_MS + age_seconds * 1000) == pytest.approx(expected)


def test_recency_decay_is_non_increasing():
    samples = [recency_decay(START_MS, START_MS + s * 1000) for s in range(0, 900, 5)]
    assert all(a >= b for a, b in zip(samples, samples[1:]))


def test_zone_stability():
    assert zone_stability(START_MS, 0.8, START_MS + 10_000) == ZoneStability.ACTIVE
    assert zone_stability(START_MS, 0.5, START_MS + 10_000) == ZoneStability.STABLE
    assert zone_stability(START_MS, 0.8, START_MS + 90_000) == ZoneStability.STABLE
    assert zone_stability(START_MS, 0.8, START_MS + 120_000) == ZoneStability.FADING


def test_decayed_intensity_does_not_touch_stored_value():
    zone = Zone(id="zone-1", location=SF, intensity=0.8, radius=100, session_count=4, last_activity=START_MS)
    assert decayed_intensity(zone, START_MS + 600_000) == pytest.approx(0.08)
    assert zone.intensity == 0.8


def test_format_distance():
    assert format_distance(42.4) == "42m"
    assert format_distance(1500) == "1.5km"


def test_geolocation_rejects_out_of_range():
    with pytest.raises(ValueError):
        GeoLocation(lat=91.0, lng=0.0)
    with pytest.raises(ValueError):
        GeoLocation(lat=0.0, lng=-181.0)
