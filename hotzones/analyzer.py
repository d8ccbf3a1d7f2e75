# hotzones/analyzer.py
# AI analysis pipeline for uploaded videos
# - frames -> vision model -> privacy filter -> metadata store
# - every run stores exactly one record: a result or an error record
# - AnalysisScheduler runs analyses on a thread pool, off the upload request

from __future__ import annotations

import logging
from concurrent.futures import Future, ThreadPoolExecutor
from enum import Enum
from typing import Optional

from hotzones.config import Settings
from hotzones.engagement import AIMetadataStore
from hotzones.frames import FrameExtractor
from hotzones.models import AIVideoMetadata
from hotzones.privacy import redact, validate_ai_metadata
from hotzones.storage import VideoStorage
from hotzones.utils import Clock, now_ms
from hotzones.vision import VisionClient

logger = logging.getLogger(__name__)

ANALYSIS_FAILED = "analysis_failed"
PRIVACY_VIOLATION = "privacy_violation"


class AnalysisState(str, Enum):
    IDLE = "idle"
    FRAMES_EXTRACTED = "frames_extracted"
    MODEL_CALLED = "model_called"
    PRIVACY_CHECKED = "privacy_checked"
    STORED = "stored"


class VideoAnalyzer:
    """Runs one video through the analysis pipeline and stores the outcome."""

    def __init__(
        self,
        frames: FrameExtractor,
        vision: VisionClient,
        metadata: AIMetadataStore,
        clock: Clock = now_ms,
    ):
        self.frames = frames
        self.vision = vision
        self.metadata = metadata
        self.clock = clock

    @classmethod
    def from_settings(
        cls, settings: Settings, storage: VideoStorage, metadata: AIMetadataStore, clock: Clock = now_ms
    ) -> "VideoAnalyzer":
        return cls(
            frames=FrameExtractor.from_settings(settings, storage.fetch_video_bytes),
            vision=VisionClient.from_settings(settings),
            metadata=metadata,
            clock=clock,
        )

    def analyze(self, video_id: str, video_url: str) -> AIVideoMetadata:
        """Analyze a video and store the resulting metadata.

        Never raises: any failure becomes an ``analysis_failed`` record, and a privacy
        filter hit becomes a ``privacy_violation`` record. A later run for the same
        video replaces the earlier record.
        """
        state = AnalysisState.IDLE
        logger.info("Starting analysis for video %s", video_id)

        try:
            frames = self.frames.extract(video_url)
            state = AnalysisState.FRAMES_EXTRACTED
            logger.debug("Video %s: %s (%d frames)", video_id, state.value, len(frames))

            scene = self.vision.analyze_frames([frame.data_url for frame in frames])
            state = AnalysisState.MODEL_CALLED
            logger.debug("Video %s: %s", video_id, state.value)

            check = validate_ai_metadata(scene.summary, scene.tags)
            state = AnalysisState.PRIVACY_CHECKED
            if not check.is_clean:
                logger.warning(
                    "Privacy filter rejected analysis for video %s (%d violations): %s",
                    video_id,
                    len(check.violations),
                    redact(scene.summary),
                )
                record = self.failure_record(
                    video_id,
                    PRIVACY_VIOLATION,
                    f"AI output contained potentially identifying information ({len(check.violations)} violations)",
                )
            else:
                record = AIVideoMetadata(
                    video_id=video_id,
                    summary=scene.summary,
                    tags=list(scene.tags),
                    counts={"people": scene.counts.people, "vehicles": scene.counts.vehicles},
                    activity_level=scene.activity_level,
                    confidence=scene.confidence,
                    analyzed_at=self.clock(),
                    model_version=self.vision.model_version,
                )
        except Exception as e:
            logger.exception("Analysis failed for video %s after state %s", video_id, state.value)
            record = self.failure_record(video_id, ANALYSIS_FAILED, str(e) or e.__class__.__name__)

        self.metadata.set(record)
        state = AnalysisState.STORED
        logger.info(
            "Video %s: %s (%s)",
            video_id,
            state.value,
            "ok" if record.ok else record.error.code,
        )
        return record

    def failure_record(self, video_id: str, code: str, message: str) -> AIVideoMetadata:
        return AIVideoMetadata.failure(
            video_id=video_id,
            code=code,
            message=message,
            analyzed_at=self.clock(),
            model_version=self.vision.model_version,
        )


class AnalysisScheduler:
    """Fire-and-forget execution of analyses on a worker pool."""

    def __init__(self, analyzer: VideoAnalyzer, max_workers: int = 4):
        self.analyzer = analyzer
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="analysis")

    def schedule(self, video_id: str, video_url: str) -> Optional[Future]:
        """Queue an analysis. Scheduling problems are logged, never raised."""
        self.analyzer.metadata.mark_pending(video_id)
        try:
            future = self._executor.submit(self.analyzer.analyze, video_id, video_url)
        except RuntimeError:
            logger.exception("Could not schedule analysis for video %s", video_id)
            self.analyzer.metadata.set(
                self.analyzer.failure_record(video_id, ANALYSIS_FAILED, "Analysis could not be scheduled")
            )
            return None

        future.add_done_callback(lambda f: self._log_outcome(video_id, f))
        return future

    @staticmethod
    def _log_outcome(video_id: str, future: Future) -> None:
        error = future.exception()
        if error is not None:
            logger.error("Analysis job for video %s crashed: %s", video_id, error)

    def shutdown(self, wait: bool = False) -> None:
        self._executor.shutdown(wait=wait)
