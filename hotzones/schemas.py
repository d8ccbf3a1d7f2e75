# hotzones/schemas.py
# Pydantic models for request validation and response serialization
# - field names are camelCase to match the web client's JSON

from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, Field

from hotzones.models import (
    AIVideoMetadata,
    Comment,
    GeoLocation,
    ProximalStream,
    PulseSignal,
    ReactionCounts,
    VideoUpload,
    VoteCounts,
    Zone,
)


class Location(BaseModel):
    lat: float = Field(ge=-90.0, le=90.0)
    lng: float = Field(ge=-180.0, le=180.0)

    @classmethod
    def from_geo(cls, location: GeoLocation) -> "Location":
        return cls(lat=location.lat, lng=location.lng)


# Requests


class CheckInRequest(BaseModel):
    lat: float = Field(ge=-90.0, le=90.0)
    lng: float = Field(ge=-180.0, le=180.0)
    alias: Optional[str] = Field(default=None, max_length=40)


class ReactionRequest(BaseModel):
    videoId: str = Field(min_length=1)
    reactionType: str = Field(min_length=1)


class VoteRequest(BaseModel):
    videoId: str = Field(min_length=1)
    direction: str
    previousDirection: str = "none"


class CommentRequest(BaseModel):
    videoId: str = Field(min_length=1)
    sessionId: str = Field(min_length=1)
    text: str


# Responses


class CheckInResponse(BaseModel):
    success: bool = True
    sessionId: str
    token: str
    zoneId: Optional[str] = None
    message: str = "Checked in successfully"


class Reactions(BaseModel):
    videoId: str
    eyes: int = 0
    risky: int = 0
    resolved: int = 0
    unclear: int = 0

    @classmethod
    def from_counts(cls, counts: ReactionCounts) -> "Reactions":
        return cls(
            videoId=counts.video_id,
            eyes=counts.eyes,
            risky=counts.risky,
            resolved=counts.resolved,
            unclear=counts.unclear,
        )


class Votes(BaseModel):
    videoId: str
    upvotes: int = 0
    downvotes: int = 0

    @classmethod
    def from_counts(cls, counts: VoteCounts) -> "Votes":
        return cls(videoId=counts.video_id, upvotes=counts.upvotes, downvotes=counts.downvotes)


class VideoItem(BaseModel):
    """Feed entry: the video plus its engagement summary"""

    id: str
    sessionId: str
    timestamp: int
    duration: float
    size: int
    filename: str
    url: Optional[str] = None
    location: Optional[Location] = None
    zoneId: Optional[str] = None
    reactionCounts: Optional[Reactions] = None
    commentCount: int = 0
    votes: Votes
    aiStatus: Literal["none", "pending", "available", "error"] = "none"

    @classmethod
    def from_video(cls, video: VideoUpload, **extra) -> "VideoItem":
        return cls(
            id=video.id,
            sessionId=video.session_id,
            timestamp=video.timestamp,
            duration=video.duration,
            size=video.size,
            filename=video.filename,
            url=video.cloud_url or f"/api/video/{video.id}",
            location=Location.from_geo(video.location) if video.location else None,
            zoneId=video.zone_id,
            **extra,
        )


class VideosResponse(BaseModel):
    success: bool = True
    videos: List[VideoItem]


class UploadResponse(BaseModel):
    success: bool = True
    videoId: str
    url: str
    zoneId: Optional[str] = None
    message: str = "Video uploaded successfully"


class ReactionsResponse(BaseModel):
    success: bool = True
    reactions: Reactions


class VotesResponse(BaseModel):
    success: bool = True
    votes: Votes


class CommentItem(BaseModel):
    """Anonymized comment: no session id"""

    id: str
    text: str
    timestamp: int

    @classmethod
    def from_comment(cls, comment: Comment) -> "CommentItem":
        return cls(id=comment.id, text=comment.text, timestamp=comment.timestamp)


class CommentResponse(BaseModel):
    success: bool = True
    comment: CommentItem


class CommentsResponse(BaseModel):
    success: bool = True
    comments: List[CommentItem]


class HeatBubble(BaseModel):
    id: str
    location: Location
    intensity: float
    storedIntensity: float
    radius: float
    sessionCount: int
    lastActivity: int
    label: Optional[str] = None
    stability: Literal["active", "stable", "fading"]

    @classmethod
    def from_zone(cls, zone: Zone, intensity: float, stability: str) -> "HeatBubble":
        return cls(
            id=zone.id,
            location=Location.from_geo(zone.location),
            intensity=intensity,
            storedIntensity=zone.intensity,
            radius=zone.radius,
            sessionCount=zone.session_count,
            lastActivity=zone.last_activity,
            label=zone.label,
            stability=stability,
        )


class HeatmapResponse(BaseModel):
    success: bool = True
    bubbles: List[HeatBubble]


class Pulse(BaseModel):
    zoneId: str
    shouldPulse: bool
    recentVideoCount: int
    lastVideoTimestamp: Optional[int] = None
    pulseIntensity: int

    @classmethod
    def from_signal(cls, signal: PulseSignal) -> "Pulse":
        return cls(
            zoneId=signal.zone_id,
            shouldPulse=signal.should_pulse,
            recentVideoCount=signal.recent_video_count,
            lastVideoTimestamp=signal.last_video_timestamp,
            pulseIntensity=signal.pulse_intensity,
        )


class PulseResponse(BaseModel):
    success: bool = True
    pulseData: List[Pulse]


class Stream(BaseModel):
    id: str
    alias: str
    distance: float
    distanceLabel: str
    stability: float
    lastSeen: int
    location: Location

    @classmethod
    def from_stream(cls, stream: ProximalStream, distance_label: str) -> "Stream":
        return cls(
            id=stream.id,
            alias=stream.alias,
            distance=stream.distance,
            distanceLabel=distance_label,
            stability=stream.stability,
            lastSeen=stream.last_seen,
            location=Location.from_geo(stream.location),
        )


class ProximalStreamsResponse(BaseModel):
    success: bool = True
    streams: List[Stream]


class AIErrorInfo(BaseModel):
    code: str
    message: str


class AIMetadata(BaseModel):
    videoId: str
    summary: str
    tags: List[str]
    counts: Dict[str, str]
    activityLevel: str
    confidence: float
    analyzedAt: int
    modelVersion: str
    error: Optional[AIErrorInfo] = None

    @classmethod
    def from_metadata(cls, metadata: AIVideoMetadata) -> "AIMetadata":
        return cls(
            videoId=metadata.video_id,
            summary=metadata.summary,
            tags=metadata.tags,
            counts=metadata.counts,
            activityLevel=metadata.activity_level,
            confidence=metadata.confidence,
            analyzedAt=metadata.analyzed_at,
            modelVersion=metadata.model_version,
            error=AIErrorInfo(code=metadata.error.code, message=metadata.error.message) if metadata.error else None,
        )


class AIMetadataResponse(BaseModel):
    success: bool = True
    status: Literal["none", "pending", "available", "error"]
    metadata: Optional[AIMetadata] = None


class HealthResponse(BaseModel):
    status: str = "ok"
    version: str
    sessions: int
    zones: int
    videos: int
    analysisEnabled: bool
