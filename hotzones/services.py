# hotzones/services.py
# Business logic behind the HTTP routes, grouped into service classes
# - CheckInService: creates sessions and folds them into presence zones
# - VideoUploadService: validates, stores and registers uploads, then queues AI analysis
# - FeedService: active video feed with engagement summaries
# - CommentService: gated comment posting and anonymized listing

import logging
import math
import threading
from typing import Any, List, Optional, Tuple

from fastapi import HTTPException

from hotzones.analyzer import AnalysisScheduler
from hotzones.config import Settings
from hotzones.exceptions import StorageError
from hotzones.gatekeeper import authorize_comment
from hotzones.models import CheckInSession, Comment, GeoLocation, VideoUpload, Zone
from hotzones.schemas import CheckInRequest, CommentRequest, Reactions, VideoItem, Votes
from hotzones.storage import VideoStorage, extension_for
from hotzones.store import DataStore
from hotzones.utils import generate_id

logger = logging.getLogger(__name__)


class CheckInService:
    def __init__(self, store: DataStore):
        self.store = store

    def check_in(self, request: CheckInRequest) -> Tuple[CheckInSession, Zone]:
        try:
            location = GeoLocation(lat=request.lat, lng=request.lng)
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))

        alias = request.alias.strip() if request.alias else None
        session = self.store.sessions.create(location, alias or "anonymous")
        zone = self.store.zones.record_activity(location, session.timestamp)
        logger.info("Session %s checked in (zone=%s)", session.id, zone.id)
        return session, zone


class VideoUploadService:
    """Validates and stores an uploaded clip, then queues its AI analysis."""

    def __init__(
        self,
        store: DataStore,
        storage: VideoStorage,
        settings: Settings,
        scheduler: Optional[AnalysisScheduler] = None,
    ):
        self.store = store
        self.storage = storage
        self.settings = settings
        self.scheduler = scheduler

    def upload(self, file: Any, session_id: str, duration: float) -> VideoUpload:
        """
        Store an uploaded video and register it.

        Args:
            file: FastAPI UploadFile
            session_id: uploader's check-in session
            duration: clip length in seconds, as reported by the recorder

        Returns:
            The registered VideoUpload, with location and zone resolved from the session
        """
        if not session_id:
            raise HTTPException(status_code=400, detail="Invalid session or duration data")
        if not math.isfinite(duration) or duration < 0:
            raise HTTPException(status_code=400, detail="Invalid session or duration data")

        content_type = (file.content_type or "video/webm").split(";")[0].strip().lower()
        if content_type not in self.settings.ALLOWED_VIDEO_TYPES:
            raise HTTPException(status_code=400, detail=f"Unsupported video type: {content_type}")

        data = file.file.read()
        if not data:
            raise HTTPException(status_code=400, detail="No video file provided")
        if len(data) > self.settings.MAX_VIDEO_SIZE:
            raise HTTPException(status_code=400, detail="Video file too large")

        video_id = generate_id("video")
        try:
            url = self.storage.persist_video_bytes(video_id, content_type, data)
        except StorageError as e:
            logger.error("Video upload failed: %s", e)
            raise HTTPException(status_code=500, detail="Failed to store video")

        video = self.store.videos.add(
            VideoUpload(
                id=video_id,
                session_id=session_id,
                timestamp=self.store.now(),
                duration=duration,
                size=len(data),
                filename=f"{video_id}.{extension_for(content_type)}",
                file_path=url,
            )
        )

        if self.scheduler is not None and self.settings.ANALYSIS_ENABLED:
            self.scheduler.schedule(video.id, video.url)
        return video


class FeedService:
    def __init__(self, store: DataStore):
        self.store = store

    def list_videos(self, zone_id: Optional[str] = None) -> List[VideoItem]:
        now = self.store.now()
        if zone_id:
            videos = self.store.videos.in_zone(zone_id, now)
        else:
            videos = self.store.videos.active_only(now)
        videos.sort(key=lambda v: v.timestamp, reverse=True)

        items = []
        for video in videos:
            reactions = self.store.engagement.get_reactions(video.id)
            items.append(
                VideoItem.from_video(
                    video,
                    reactionCounts=Reactions.from_counts(reactions) if reactions else None,
                    commentCount=len(self.store.engagement.comments_for_video(video.id)),
                    votes=Votes.from_counts(self.store.engagement.get_votes(video.id)),
                    aiStatus=self.store.ai_metadata.status(video.id).value,
                )
            )
        return items


class CommentService:
    def __init__(self, store: DataStore, settings: Settings):
        self.store = store
        self.settings = settings
        # Serializes the rate-limit check with the insert it guards
        self._lock = threading.Lock()

    def post(self, request: CommentRequest) -> Comment:
        text = request.text.strip()
        if not text:
            raise HTTPException(status_code=400, detail="Missing videoId, sessionId, or text")

        with self._lock:
            now = self.store.now()
            video = self.store.videos.get(request.videoId)
            # Past the engagement TTL a video takes no new comments
            if video is not None and now - video.timestamp > self.settings.VIDEO_TTL_MS:
                video = None
            decision = authorize_comment(
                video=video,
                session=self.store.sessions.get(request.sessionId),
                text=text,
                last_comment_at=self.store.engagement.last_comment_timestamp(request.sessionId),
                now=now,
                settings=self.settings,
            )
            if not decision.allowed:
                logger.info("Comment denied for %s: %s", request.videoId, decision.reason.value)
                raise HTTPException(status_code=decision.status_code, detail=decision.message)

            comment = Comment(
                id=generate_id("comment"),
                video_id=request.videoId,
                session_id=request.sessionId,
                text=text,
                timestamp=now,
            )
            self.store.engagement.add_comment(comment)
        return comment

    def list(self, video_id: str) -> List[Comment]:
        return self.store.engagement.comments_for_video(video_id)
