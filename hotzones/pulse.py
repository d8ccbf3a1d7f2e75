# hotzones/pulse.py
# Map pulse signals derived from recent uploads per zone (read-only)

from __future__ import annotations

from typing import Optional

from hotzones.config import Settings
from hotzones.models import PulseSignal
from hotzones.registries import VideoRegistry, ZoneRegistry


def calculate_pulses(zones: ZoneRegistry, videos: VideoRegistry, settings: Settings, now: Optional[int] = None) -> list[PulseSignal]:
    """One pulse signal per zone, in zone registry order."""
    now = videos.clock() if now is None else now

    signals = []
    for zone in zones.list():
        last_upload = videos.last_upload_timestamp_in_zone(zone.id, now)
        recent_count = videos.recent_upload_count_in_zone(zone.id, settings.VIDEO_PULSE_WINDOW_MS, now)
        signals.append(
            PulseSignal(
                zone_id=zone.id,
                should_pulse=last_upload is not None and now - last_upload < settings.VIDEO_PULSE_IMMEDIATE_MS,
                recent_video_count=recent_count,
                last_video_timestamp=last_upload,
                pulse_intensity=min(recent_count, settings.PULSE_INTENSITY_CAP),
            )
        )
    return signals
