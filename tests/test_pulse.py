from hotzones.models import Zone
from hotzones.pulse import calculate_pulses

from .conftest import FAR_AWAY, SF, START_MS


def seed_zones(store):
    store.zones.add(Zone("zone-a", SF, 0.5, 100, 1, START_MS))
    store.zones.add(Zone("zone-b", FAR_AWAY, 0.5, 100, 1, START_MS))


def test_pulse_signals(store, clock, settings, add_video):
    seed_zones(store)
    for i in range(7):
        add_video(video_id=f"v{i}")
    clock.advance(settings.VIDEO_PULSE_IMMEDIATE_MS - 1)

    signals = {s.zone_id: s for s in calculate_pulses(store.zones, store.videos, settings)}

    assert signals["zone-a"].should_pulse is True
    assert signals["zone-a"].recent_video_count == 7
    assert signals["zone-a"].pulse_intensity == 5
    assert signals["zone-a"].last_video_timestamp == START_MS

    assert signals["zone-b"].should_pulse is False
    assert signals["zone-b"].recent_video_count == 0
    assert signals["zone-b"].last_video_timestamp is None


def test_pulse_stops_after_immediate_window(store, clock, settings, add_video):
    seed_zones(store)
    add_video()
    clock.advance(settings.VIDEO_PULSE_IMMEDIATE_MS)

    signal = calculate_pulses(store.zones, store.videos, settings)[0]
    assert signal.should_pulse is False
    assert signal.recent_video_count == 1
    assert signal.pulse_intensity == 1


def test_recent_count_drops_after_window(store, clock, settings, add_video):
    seed_zones(store)
    add_video()
    clock.advance(settings.VIDEO_PULSE_WINDOW_MS)

    signal = calculate_pulses(store.zones, store.videos, settings)[0]
    assert signal.recent_video_count == 0
    assert signal.last_video_timestamp == START_MS
