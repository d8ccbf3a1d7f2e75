# hotzones/gatekeeper.py
# Comment authorization
# - allowed only from a fresh check-in near the video, once per rate-limit window,
#   within the length limit
# - checks run in a fixed order; the first failing check decides the denial

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from hotzones.config import Settings
from hotzones.geo import distance_meters
from hotzones.models import CheckInSession, VideoUpload


class DenyReason(str, Enum):
    NOT_FOUND = "video not found or unlocated"
    NO_SESSION = "no active session"
    SESSION_EXPIRED = "session expired"
    TOO_FAR = "too far"
    RATE_LIMITED = "rate limited"
    TOO_LONG = "too long"


# HTTP status the route layer answers with for each denial
DENY_STATUS_CODES: dict[DenyReason, int] = {
    DenyReason.NOT_FOUND: 404,
    DenyReason.NO_SESSION: 403,
    DenyReason.SESSION_EXPIRED: 403,
    DenyReason.TOO_FAR: 403,
    DenyReason.RATE_LIMITED: 429,
    DenyReason.TOO_LONG: 400,
}


@dataclass(frozen=True)
class CommentDecision:
    allowed: bool
    reason: Optional[DenyReason] = None
    message: str = ""

    @property
    def status_code(self) -> int:
        return 200 if self.allowed else DENY_STATUS_CODES[self.reason]

    @classmethod
    def allow(cls) -> "CommentDecision":
        return cls(allowed=True)

    @classmethod
    def deny(cls, reason: DenyReason, message: str) -> "CommentDecision":
        return cls(allowed=False, reason=reason, message=message)


def authorize_comment(
    video: Optional[VideoUpload],
    session: Optional[CheckInSession],
    text: str,
    last_comment_at: Optional[int],
    now: int,
    settings: Settings,
) -> CommentDecision:
    """Decide whether ``session`` may comment on ``video`` at ``now``.

    Args:
        video: Target video, or None if it does not exist.
        session: Commenter's check-in session, or None if unknown.
        text: Comment text (already stripped by the caller).
        last_comment_at: The session's most recent comment timestamp, if any.
        now: Current time in milliseconds.
        settings: Source of the proximity, freshness, rate-limit and length thresholds.

    Returns:
        CommentDecision, allowed or carrying the first failing DenyReason.
    """
    if video is None or video.location is None:
        return CommentDecision.deny(DenyReason.NOT_FOUND, "Video not found or has no location")

    if session is None:
        return CommentDecision.deny(DenyReason.NO_SESSION, "Session not found - please check in first")

    session_age = now - session.timestamp
    if session_age > settings.COMMENT_SESSION_FRESHNESS_MS:
        minutes = session_age // 60000
        return CommentDecision.deny(
            DenyReason.SESSION_EXPIRED,
            f"Session too old ({minutes} minutes). Check in again to comment.",
        )

    distance = distance_meters(session.location, video.location)
    if distance > settings.COMMENT_PROXIMITY_RADIUS_M:
        return CommentDecision.deny(
            DenyReason.TOO_FAR,
            f"Too far from video location ({round(distance)}m away, max {settings.COMMENT_PROXIMITY_RADIUS_M:g}m)",
        )

    if last_comment_at is not None:
        since_last = now - last_comment_at
        if since_last < settings.COMMENT_RATE_LIMIT_MS:
            wait_seconds = math.ceil((settings.COMMENT_RATE_LIMIT_MS - since_last) / 1000)
            return CommentDecision.deny(
                DenyReason.RATE_LIMITED,
                f"Please wait {wait_seconds} seconds before commenting again",
            )

    if len(text) > settings.COMMENT_MAX_LENGTH:
        return CommentDecision.deny(
            DenyReason.TOO_LONG,
            f"Comment too long (max {settings.COMMENT_MAX_LENGTH} characters)",
        )

    return CommentDecision.allow()
