# hotzones/registries.py
# In-memory registries for the core entities
# - SessionRegistry: append-only check-in sessions
# - ZoneRegistry: presence zones, nearest-zone lookup, check-in clustering
# - VideoRegistry: uploads, one-time zone assignment, storage TTL views

from __future__ import annotations

import json
import logging
import threading
from dataclasses import replace
from pathlib import Path
from typing import Callable, Optional

from hotzones.config import Settings
from hotzones.exceptions import ConfigError
from hotzones.geo import distance_meters
from hotzones.models import CheckInSession, GeoLocation, ProximalStream, VideoUpload, Zone
from hotzones.utils import Clock, generate_id, generate_token, now_ms

logger = logging.getLogger(__name__)

ZONE_BASE_RADIUS_M = 100.0
ZONE_RADIUS_PER_SESSION_M = 20.0


class SessionRegistry:
    """Check-in sessions, kept for the lifetime of the process.

    There is no update or delete: a re-check-in creates a new session. Time-windowed
    views (``active``, ``nearby``) filter on read instead of evicting.
    """

    def __init__(self, settings: Settings, clock: Clock = now_ms):
        self.settings = settings
        self.clock = clock
        self._sessions: dict[str, CheckInSession] = {}
        self._lock = threading.Lock()

    def create(self, location: GeoLocation, alias: Optional[str] = None) -> CheckInSession:
        session = CheckInSession(
            id=generate_id("session"),
            location=location,
            timestamp=self.clock(),
            token=generate_token(),
            alias=alias,
        )
        self.add(session)
        return session

    def add(self, session: CheckInSession) -> None:
        with self._lock:
            self._sessions[session.id] = session

    def get(self, session_id: str) -> Optional[CheckInSession]:
        return self._sessions.get(session_id)

    def __len__(self) -> int:
        return len(self._sessions)

    def active(self, now: Optional[int] = None) -> list[CheckInSession]:
        now = self.clock() if now is None else now
        window = self.settings.SESSION_ACTIVE_WINDOW_MS
        return [s for s in list(self._sessions.values()) if now - s.timestamp < window]

    def nearby(self, location: GeoLocation, max_distance: float, now: Optional[int] = None) -> list[ProximalStream]:
        """Active sessions within ``max_distance`` meters, closest first."""
        now = self.clock() if now is None else now

        streams = []
        for session in self.active(now):
            distance = distance_meters(location, session.location)
            if distance > max_distance:
                continue
            age_seconds = (now - session.timestamp) / 1000
            streams.append(
                ProximalStream(
                    id=session.id,
                    alias=session.alias or "anonymous",
                    distance=distance,
                    stability=max(0.4, 1 - age_seconds / 1800),
                    last_seen=session.timestamp,
                    location=session.location,
                )
            )
        streams.sort(key=lambda s: s.distance)
        return streams


class ZoneRegistry:
    """Presence zones ("heat bubbles").

    Zones are seeded from a JSON file and grown by check-in activity. Zone ids are
    stable for the lifetime of the process, so a video's ``zone_id`` never dangles.
    """

    def __init__(self, settings: Settings, clock: Clock = now_ms):
        self.settings = settings
        self.clock = clock
        self._zones: dict[str, Zone] = {}
        self._sequence = 0
        self._lock = threading.Lock()

    def list(self) -> list[Zone]:
        return [replace(zone) for zone in list(self._zones.values())]

    def get(self, zone_id: str) -> Optional[Zone]:
        zone = self._zones.get(zone_id)
        return replace(zone) if zone else None

    def add(self, zone: Zone) -> None:
        with self._lock:
            self._zones[zone.id] = replace(zone)

    def seed_from_file(self, path: str | Path) -> int:
        """Load zones from a JSON list of zone objects. Returns the number loaded."""
        seed_path = Path(path)
        if not seed_path.exists():
            logger.warning("Zone seed file not found: %s", seed_path)
            return 0

        try:
            with open(seed_path, "r", encoding="utf-8") as f:
                data = json.load(f)
            zones = [Zone.from_dict(item) for item in data]
        except (json.JSONDecodeError, KeyError, TypeError, ValueError) as e:
            raise ConfigError(f"Invalid zone seed file {seed_path}: {e}") from e

        for zone in zones:
            self.add(zone)
        logger.info("Seeded %d zones from %s", len(zones), seed_path)
        return len(zones)

    def find_nearest(self, location: GeoLocation, max_distance: Optional[float] = None) -> Optional[tuple[str, float]]:
        """Closest zone within ``max_distance`` meters as ``(zone_id, distance)``.

        Defaults to ``ZONE_ASSIGNMENT_MAX_DISTANCE_M``. On exactly equal distances the
        zone inserted first wins.
        """
        if max_distance is None:
            max_distance = self.settings.ZONE_ASSIGNMENT_MAX_DISTANCE_M

        nearest: Optional[tuple[str, float]] = None
        for zone in list(self._zones.values()):
            distance = distance_meters(location, zone.location)
            if distance > max_distance:
                continue
            if nearest is None or distance < nearest[1]:
                nearest = (zone.id, distance)
        return nearest

    def record_activity(self, location: GeoLocation, timestamp: int) -> Zone:
        """Fold a check-in into the nearest zone, or open a new zone around it."""
        with self._lock:
            nearest = self.find_nearest(location, self.settings.ZONE_CLUSTER_RADIUS_M)
            if nearest is None:
                zone = self._new_zone(location, timestamp)
                self._zones[zone.id] = zone
                logger.debug("Opened %s at (%.5f, %.5f)", zone.id, location.lat, location.lng)
            else:
                zone = self._zones[nearest[0]]
                self._merge(zone, location, timestamp)
            return replace(zone)

    def _new_zone(self, location: GeoLocation, timestamp: int) -> Zone:
        self._sequence += 1
        while f"zone-{self._sequence}" in self._zones:
            self._sequence += 1
        zone = Zone(
            id=f"zone-{self._sequence}",
            location=location,
            intensity=0.0,
            radius=ZONE_BASE_RADIUS_M,
            session_count=0,
            last_activity=timestamp,
            label=f"Zone {self._sequence}",
        )
        self._merge(zone, location, timestamp)
        return zone

    def _merge(self, zone: Zone, location: GeoLocation, timestamp: int) -> None:
        zone.session_count += 1
        n = zone.session_count
        # Running centroid of all check-ins folded into the zone
        zone.location = GeoLocation(
            lat=zone.location.lat + (location.lat - zone.location.lat) / n,
            lng=zone.location.lng + (location.lng - zone.location.lng) / n,
        )
        zone.last_activity = max(zone.last_activity, timestamp)
        zone.intensity = min(1.0, n / self.settings.ZONE_DENSITY_SATURATION)
        zone.radius = min(self.settings.ZONE_CLUSTER_RADIUS_M, ZONE_BASE_RADIUS_M + n * ZONE_RADIUS_PER_SESSION_M)


class VideoRegistry:
    """Uploaded video records.

    ``add`` resolves the video's location from its session and assigns the nearest
    zone exactly once. Listeners are notified after insertion (the engagement store
    uses this to zero-initialize reaction counts).
    """

    def __init__(self, sessions: SessionRegistry, zones: ZoneRegistry, settings: Settings, clock: Clock = now_ms):
        self.sessions = sessions
        self.zones = zones
        self.settings = settings
        self.clock = clock
        self._videos: dict[str, VideoUpload] = {}
        self._listeners: list[Callable[[VideoUpload], None]] = []
        self._lock = threading.Lock()

    def add_listener(self, callback: Callable[[VideoUpload], None]) -> None:
        self._listeners.append(callback)

    def add(self, video: VideoUpload) -> VideoUpload:
        with self._lock:
            if video.location is None and video.session_id:
                session = self.sessions.get(video.session_id)
                if session is not None:
                    nearest = self.zones.find_nearest(session.location)
                    video = replace(
                        video,
                        location=session.location,
                        zone_id=nearest[0] if nearest else None,
                    )
            else:
                video = replace(video)

            self._videos[video.id] = video
            for listener in self._listeners:
                listener(video)

        logger.info("Video %s stored (zone=%s)", video.id, video.zone_id)
        return video

    def get(self, video_id: str) -> Optional[VideoUpload]:
        return self._videos.get(video_id)

    def all(self) -> list[VideoUpload]:
        return list(self._videos.values())

    def is_expired(self, video: VideoUpload, now: Optional[int] = None) -> bool:
        now = self.clock() if now is None else now
        return now - video.timestamp >= self.settings.VIDEO_STORAGE_TTL_MS

    def active_only(self, now: Optional[int] = None) -> list[VideoUpload]:
        now = self.clock() if now is None else now
        return [v for v in self.all() if not self.is_expired(v, now)]

    def in_zone(self, zone_id: str, now: Optional[int] = None) -> list[VideoUpload]:
        return [v for v in self.active_only(now) if v.zone_id == zone_id]

    def last_upload_timestamp_in_zone(self, zone_id: str, now: Optional[int] = None) -> Optional[int]:
        videos = self.in_zone(zone_id, now)
        if not videos:
            return None
        return max(v.timestamp for v in videos)

    def recent_upload_count_in_zone(self, zone_id: str, window_ms: int, now: Optional[int] = None) -> int:
        now = self.clock() if now is None else now
        return sum(1 for v in self.in_zone(zone_id, now) if now - v.timestamp < window_ms)
