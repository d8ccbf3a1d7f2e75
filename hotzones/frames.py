# hotzones/frames.py
# Still-frame extraction for AI analysis
# - fetches the video through the storage boundary into a temp file
# - picks timestamps (10%/50%/90% by default) and grabs a still at each with OpenCV
# - letterboxes to a fixed resolution and encodes as base64 JPEG data URLs

from __future__ import annotations

import base64
import logging
import os
import tempfile
from dataclasses import dataclass
from typing import Callable, Literal, Optional
from urllib.parse import urlparse

import cv2
import numpy as np

from hotzones.config import Settings
from hotzones.exceptions import FrameExtractionError

logger = logging.getLogger(__name__)

FrameStrategy = Literal["first-middle-last", "evenly-spaced"]

# Skips black lead-in and tail-out frames
FIRST_MIDDLE_LAST = (0.1, 0.5, 0.9)


@dataclass(frozen=True)
class ExtractedFrame:
    timestamp: float
    data_url: str

    @property
    def base64_data(self) -> str:
        return self.data_url.split(",", 1)[1]


def select_timestamps(duration: float, frame_count: int, strategy: FrameStrategy) -> list[float]:
    """Timestamps (seconds) at which to grab stills."""
    if strategy == "evenly-spaced":
        step = duration / (frame_count + 1)
        return [step * (i + 1) for i in range(frame_count)]
    return [duration * fraction for fraction in FIRST_MIDDLE_LAST][:frame_count]


def letterbox(frame: np.ndarray, target_width: int, target_height: int) -> np.ndarray:
    """Resize keeping aspect ratio and pad with black to exactly target size."""
    if frame.ndim == 2:
        frame = cv2.cvtColor(frame, cv2.COLOR_GRAY2BGR)

    src_height, src_width = frame.shape[:2]
    scale = min(target_width / src_width, target_height / src_height)
    new_width = max(1, min(target_width, round(src_width * scale)))
    new_height = max(1, min(target_height, round(src_height * scale)))

    interpolation = cv2.INTER_AREA if scale < 1 else cv2.INTER_LINEAR
    resized = cv2.resize(frame, (new_width, new_height), interpolation=interpolation)

    canvas = np.zeros((target_height, target_width, 3), dtype=np.uint8)
    x = (target_width - new_width) // 2
    y = (target_height - new_height) // 2
    canvas[y : y + new_height, x : x + new_width] = resized
    return canvas


def encode_jpeg_data_url(image: np.ndarray, quality: int = 85) -> str:
    ok, buffer = cv2.imencode(".jpg", image, [int(cv2.IMWRITE_JPEG_QUALITY), int(quality)])
    if not ok:
        raise FrameExtractionError("Failed to encode frame as JPEG")
    return "data:image/jpeg;base64," + base64.b64encode(buffer.tobytes()).decode("utf-8")


class FrameExtractor:
    """Pulls a handful of representative stills out of an uploaded video."""

    def __init__(
        self,
        fetch: Callable[[str], bytes],
        frame_count: int = 3,
        target_width: int = 512,
        target_height: int = 512,
        strategy: FrameStrategy = "first-middle-last",
        jpeg_quality: int = 85,
        fallback_duration: float = 10.0,
    ):
        self.fetch = fetch
        self.frame_count = frame_count
        self.target_width = target_width
        self.target_height = target_height
        self.strategy = strategy
        self.jpeg_quality = jpeg_quality
        self.fallback_duration = fallback_duration

    @classmethod
    def from_settings(cls, settings: Settings, fetch: Callable[[str], bytes]) -> "FrameExtractor":
        return cls(
            fetch=fetch,
            frame_count=settings.FRAME_COUNT,
            target_width=settings.FRAME_TARGET_WIDTH,
            target_height=settings.FRAME_TARGET_HEIGHT,
            strategy=settings.FRAME_STRATEGY,
            jpeg_quality=settings.FRAME_JPEG_QUALITY,
            fallback_duration=settings.FRAME_FALLBACK_DURATION_S,
        )

    def extract(self, video_url: str) -> list[ExtractedFrame]:
        """Extract and encode stills from the video at ``video_url``.

        Args:
            video_url: Reference returned by the storage boundary.

        Returns:
            Encoded frames in timestamp order. Frames that fail to decode are skipped.

        Raises:
            FrameExtractionError: If the video cannot be opened or no frame is extracted.
        """
        data = self.fetch(video_url)
        suffix = os.path.splitext(urlparse(video_url).path)[1] or ".webm"

        frames: list[ExtractedFrame] = []
        with tempfile.TemporaryDirectory(prefix="hotzones-frames-") as temp_dir:
            video_path = os.path.join(temp_dir, f"video{suffix}")
            with open(video_path, "wb") as f:
                f.write(data)

            cap = cv2.VideoCapture(video_path)
            try:
                if not cap.isOpened():
                    raise FrameExtractionError(f"Could not open video: {video_url}")

                fps = cap.get(cv2.CAP_PROP_FPS)
                duration = self._probe_duration(cap, fps)
                timestamps = select_timestamps(duration, self.frame_count, self.strategy)
                logger.debug("Frame timestamps for %s: %s", video_url, timestamps)

                for timestamp in timestamps:
                    frame = self._grab(cap, timestamp, fps)
                    if frame is None:
                        logger.warning("Failed to extract frame at %.2fs from %s", timestamp, video_url)
                        continue
                    image = letterbox(frame, self.target_width, self.target_height)
                    frames.append(ExtractedFrame(timestamp, encode_jpeg_data_url(image, self.jpeg_quality)))
            finally:
                cap.release()

        if not frames:
            raise FrameExtractionError("Failed to extract any frames from video")

        logger.info("Extracted %d frames from %s", len(frames), video_url)
        return frames

    def _probe_duration(self, cap: cv2.VideoCapture, fps: float) -> float:
        frame_total = cap.get(cv2.CAP_PROP_FRAME_COUNT)
        if fps > 0 and frame_total > 0:
            return frame_total / fps

        # WebM from MediaRecorder often has no duration in its header
        logger.warning("Video reports no duration, assuming %.1fs", self.fallback_duration)
        return self.fallback_duration

    @staticmethod
    def _grab(cap: cv2.VideoCapture, timestamp: float, fps: float) -> Optional[np.ndarray]:
        cap.set(cv2.CAP_PROP_POS_MSEC, timestamp * 1000)
        ok, frame = cap.read()
        if ok and frame is not None:
            return frame

        if fps > 0:
            cap.set(cv2.CAP_PROP_POS_FRAMES, int(timestamp * fps))
            ok, frame = cap.read()
            if ok and frame is not None:
                return frame
        return None
