# hotzones/engagement.py
# Per-video engagement state
# - reactions: anonymous counters, engagement TTL
# - votes: client-tracked up/down toggles, storage TTL
# - comments: unconditional insert, engagement-TTL gated reads
# - AI metadata side table keyed by video id

from __future__ import annotations

import logging
import threading
from dataclasses import replace
from typing import Optional

from hotzones.config import Settings
from hotzones.models import (
    REACTION_TYPES,
    AIStatus,
    AIVideoMetadata,
    Comment,
    ReactionCounts,
    ReactionType,
    VideoUpload,
    VoteCounts,
    VoteDirection,
)
from hotzones.registries import VideoRegistry
from hotzones.utils import Clock, now_ms

logger = logging.getLogger(__name__)


class EngagementStore:
    """Reactions, votes and comments, each keyed by video id.

    Every read and write is gated against the owning video's timestamp. Reactions and
    comments use the engagement TTL (``VIDEO_TTL_MS``); votes use the longer storage
    TTL (``VIDEO_STORAGE_TTL_MS``). A missing or expired video yields ``None`` or an
    empty list, never an exception.
    """

    def __init__(self, videos: VideoRegistry, settings: Settings, clock: Clock = now_ms):
        self.videos = videos
        self.settings = settings
        self.clock = clock
        self._reactions: dict[str, ReactionCounts] = {}
        self._votes: dict[str, VoteCounts] = {}
        self._comments: dict[str, Comment] = {}
        self._lock = threading.Lock()

        videos.add_listener(self.initialize_reactions)

    def _live_video(self, video_id: str, ttl_ms: int, now: int) -> Optional[VideoUpload]:
        video = self.videos.get(video_id)
        if video is None or now - video.timestamp > ttl_ms:
            return None
        return video

    # Reactions

    def initialize_reactions(self, video: VideoUpload) -> None:
        self._reactions[video.id] = ReactionCounts(video_id=video.id)

    def add_reaction(self, video_id: str, reaction_type: ReactionType) -> Optional[ReactionCounts]:
        """Increment one reaction counter by exactly one.

        Reactions are anonymous and unlimited per session.

        Returns:
            The full updated counts, or None if the video is missing or engagement-expired.
        """
        if reaction_type not in REACTION_TYPES:
            raise ValueError(f"Unknown reaction type: {reaction_type}")

        if self._live_video(video_id, self.settings.VIDEO_TTL_MS, self.clock()) is None:
            return None

        with self._lock:
            counts = self._reactions.setdefault(video_id, ReactionCounts(video_id=video_id))
            setattr(counts, reaction_type, getattr(counts, reaction_type) + 1)
            return replace(counts)

    def get_reactions(self, video_id: str) -> Optional[ReactionCounts]:
        """Current counts, or None if the video is missing or engagement-expired."""
        if self._live_video(video_id, self.settings.VIDEO_TTL_MS, self.clock()) is None:
            return None
        counts = self._reactions.get(video_id)
        return replace(counts) if counts else None

    # Votes

    def cast_vote(
        self, video_id: str, new_direction: VoteDirection, previous_direction: VoteDirection
    ) -> Optional[VoteCounts]:
        """Apply a vote change reported by the client.

        The previous direction is removed (floored at zero) and the new one added. Toggling
        off is the caller's job: it sends ``new_direction="none"``.

        Returns:
            Updated counts, or None if the video is missing or storage-expired.
        """
        if self._live_video(video_id, self.settings.VIDEO_STORAGE_TTL_MS, self.clock()) is None:
            return None

        with self._lock:
            counts = self._votes.setdefault(video_id, VoteCounts(video_id=video_id))

            if previous_direction == "up":
                counts.upvotes = max(0, counts.upvotes - 1)
            elif previous_direction == "down":
                counts.downvotes = max(0, counts.downvotes - 1)

            if new_direction == "up":
                counts.upvotes += 1
            elif new_direction == "down":
                counts.downvotes += 1

            return replace(counts)

    def get_votes(self, video_id: str) -> VoteCounts:
        counts = self._votes.get(video_id)
        return replace(counts) if counts else VoteCounts(video_id=video_id)

    # Comments

    def add_comment(self, comment: Comment) -> None:
        with self._lock:
            self._comments[comment.id] = comment

    def comments_for_video(self, video_id: str) -> list[Comment]:
        """Comments newest first; empty once the video is engagement-expired."""
        if self._live_video(video_id, self.settings.VIDEO_TTL_MS, self.clock()) is None:
            return []

        comments = [c for c in list(self._comments.values()) if c.video_id == video_id]
        comments.sort(key=lambda c: c.timestamp, reverse=True)
        return comments

    def last_comment_timestamp(self, session_id: str) -> Optional[int]:
        timestamps = [c.timestamp for c in list(self._comments.values()) if c.session_id == session_id]
        return max(timestamps) if timestamps else None


class AIMetadataStore:
    """AI analysis results, one record per video id (a later write replaces the earlier one)."""

    def __init__(self):
        self._metadata: dict[str, AIVideoMetadata] = {}
        self._pending: set[str] = set()
        self._lock = threading.Lock()

    def mark_pending(self, video_id: str) -> None:
        with self._lock:
            self._pending.add(video_id)

    def set(self, metadata: AIVideoMetadata) -> None:
        with self._lock:
            self._metadata[metadata.video_id] = metadata
            self._pending.discard(metadata.video_id)

    def get(self, video_id: str) -> Optional[AIVideoMetadata]:
        return self._metadata.get(video_id)

    def __len__(self) -> int:
        return len(self._metadata)

    def status(self, video_id: str) -> AIStatus:
        metadata = self._metadata.get(video_id)
        if metadata is not None:
            return AIStatus.AVAILABLE if metadata.ok else AIStatus.ERROR
        if video_id in self._pending:
            return AIStatus.PENDING
        return AIStatus.NONE
