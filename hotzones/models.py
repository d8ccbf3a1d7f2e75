# hotzones/models.py
# In-memory domain entities
# - GeoLocation, CheckInSession, Zone, VideoUpload
# - ReactionCounts, VoteCounts, Comment
# - AIVideoMetadata (AI analysis side table)

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Literal, Optional

ReactionType = Literal["eyes", "risky", "resolved", "unclear"]
REACTION_TYPES: tuple[str, ...] = ("eyes", "risky", "resolved", "unclear")

VoteDirection = Literal["up", "down", "none"]
VOTE_DIRECTIONS: tuple[str, ...] = ("up", "down", "none")


class AIStatus(str, Enum):
    NONE = "none"
    PENDING = "pending"
    AVAILABLE = "available"
    ERROR = "error"


@dataclass(frozen=True)
class GeoLocation:
    lat: float
    lng: float

    def __post_init__(self):
        if not -90.0 <= self.lat <= 90.0:
            raise ValueError(f"Latitude out of range: {self.lat}")
        if not -180.0 <= self.lng <= 180.0:
            raise ValueError(f"Longitude out of range: {self.lng}")

    def to_dict(self) -> dict[str, float]:
        return {"lat": self.lat, "lng": self.lng}


@dataclass(frozen=True)
class CheckInSession:
    """A check-in at a location. Never refreshed; a re-check-in creates a new session."""

    id: str
    location: GeoLocation
    timestamp: int
    token: str
    alias: Optional[str] = None


@dataclass
class Zone:
    """A coarse geographic cell aggregating nearby activity (a "heat bubble").

    ``intensity`` is the stored activity level. It is never pre-decayed: readers apply
    ``geo.recency_decay`` against ``last_activity`` at read time.
    """

    id: str
    location: GeoLocation
    intensity: float
    radius: float
    session_count: int
    last_activity: int
    label: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "location": self.location.to_dict(),
            "intensity": self.intensity,
            "radius": self.radius,
            "sessionCount": self.session_count,
            "lastActivity": self.last_activity,
            "label": self.label,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Zone":
        location = data["location"]
        return cls(
            id=str(data["id"]),
            location=GeoLocation(lat=float(location["lat"]), lng=float(location["lng"])),
            intensity=float(data.get("intensity", 0.0)),
            radius=float(data.get("radius", 100.0)),
            session_count=int(data.get("sessionCount", 0)),
            last_activity=int(data.get("lastActivity", 0)),
            label=data.get("label"),
        )


@dataclass
class VideoUpload:
    id: str
    session_id: str
    timestamp: int
    duration: float
    size: int
    filename: str
    cloud_url: Optional[str] = None
    file_path: Optional[str] = None
    location: Optional[GeoLocation] = None
    zone_id: Optional[str] = None

    @property
    def url(self) -> Optional[str]:
        return self.cloud_url or self.file_path


@dataclass
class ReactionCounts:
    video_id: str
    eyes: int = 0
    risky: int = 0
    resolved: int = 0
    unclear: int = 0


@dataclass
class VoteCounts:
    video_id: str
    upvotes: int = 0
    downvotes: int = 0


@dataclass(frozen=True)
class Comment:
    id: str
    video_id: str
    session_id: str
    text: str
    timestamp: int


@dataclass(frozen=True)
class AIError:
    code: str
    message: str


@dataclass
class AIVideoMetadata:
    """Result of one AI analysis run. ``error`` set means the content is absent or degraded."""

    video_id: str
    summary: str
    tags: list[str]
    counts: dict[str, str]
    activity_level: str
    confidence: float
    analyzed_at: int
    model_version: str
    error: Optional[AIError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def failure(cls, video_id: str, code: str, message: str, analyzed_at: int, model_version: str) -> "AIVideoMetadata":
        return cls(
            video_id=video_id,
            summary="",
            tags=[],
            counts={"people": "0", "vehicles": "0"},
            activity_level="low",
            confidence=0.0,
            analyzed_at=analyzed_at,
            model_version=model_version,
            error=AIError(code=code, message=message),
        )


@dataclass(frozen=True)
class ProximalStream:
    id: str
    alias: str
    distance: float
    stability: float
    last_seen: int
    location: GeoLocation


@dataclass(frozen=True)
class PulseSignal:
    zone_id: str
    should_pulse: bool
    recent_video_count: int
    last_video_timestamp: Optional[int]
    pulse_intensity: int

