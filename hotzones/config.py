# hotzones/config.py
# Application settings
# - loads environment variables and .env
# - TTLs, proximity radius, rate limits and other tuning constants
# - frame extraction and vision model settings

from typing import List, Literal, Optional

from pydantic import model_validator
from pydantic_settings import BaseSettings

MINUTE_MS = 60 * 1000


class Settings(BaseSettings):
    PROJECT_NAME: str = "Hotzones API Server"
    VERSION: str = "1.0.0"
    API_PREFIX: str = "/api"

    BACKEND_CORS_ORIGINS: List[str] = ["*"]

    OPENAPI_URL: str = "/api/openapi.json"
    DOCS_URL: str = "/api/docs"
    REDOC_URL: str = "/api/redoc"

    LOG_LEVEL: str = "info"

    # Event/video TTLs. Engagement (reactions/comments) goes quiet before the file expires.
    VIDEO_TTL_MS: int = 30 * MINUTE_MS
    VIDEO_STORAGE_TTL_MS: int = 120 * MINUTE_MS

    # Map pulse windows
    VIDEO_PULSE_WINDOW_MS: int = 5 * MINUTE_MS
    VIDEO_PULSE_IMMEDIATE_MS: int = 20 * 1000
    PULSE_INTENSITY_CAP: int = 5

    # Comment gating
    COMMENT_PROXIMITY_RADIUS_M: float = 200.0
    COMMENT_SESSION_FRESHNESS_MS: int = 10 * MINUTE_MS
    COMMENT_MAX_LENGTH: int = 120
    COMMENT_RATE_LIMIT_MS: int = 5 * 1000

    # Zones
    ZONE_ASSIGNMENT_MAX_DISTANCE_M: float = 300.0
    ZONE_CLUSTER_RADIUS_M: float = 500.0
    ZONE_DENSITY_SATURATION: int = 5
    ZONE_SEED_FILE: Optional[str] = None

    # Sessions
    SESSION_ACTIVE_WINDOW_MS: int = 30 * MINUTE_MS
    PROXIMAL_MAX_DISTANCE_M: float = 1000.0

    # Uploads
    VIDEO_STORAGE_PATH: str = "static/videos"
    ALLOWED_VIDEO_TYPES: List[str] = ["video/webm", "video/mp4", "video/quicktime", "video/x-msvideo"]
    MAX_VIDEO_SIZE: int = 100 * 1024 * 1024  # 100MB

    # Frame extraction
    FRAME_COUNT: int = 3
    FRAME_TARGET_WIDTH: int = 512
    FRAME_TARGET_HEIGHT: int = 512
    FRAME_STRATEGY: Literal["first-middle-last", "evenly-spaced"] = "first-middle-last"
    FRAME_JPEG_QUALITY: int = 85
    FRAME_FALLBACK_DURATION_S: float = 10.0
    FETCH_TIMEOUT_S: float = 30.0

    # Vision model
    VISION_PROVIDER: Literal["llama", "gemini"] = "llama"
    # Model and endpoint default per provider when unset
    VISION_MODEL: Optional[str] = None
    VISION_ENDPOINT: Optional[str] = None
    VISION_API_KEY: str = ""
    VISION_TIMEOUT_S: float = 30.0
    VISION_MAX_RETRIES: int = 3
    VISION_BACKOFF_MS: int = 1000
    VISION_TEMPERATURE: float = 0.3
    VISION_MAX_TOKENS: int = 500

    ANALYSIS_ENABLED: bool = True
    ANALYSIS_WORKERS: int = 4

    model_config = {
        "case_sensitive": True,
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }

    @model_validator(mode="after")
    def _check_ranges(self) -> "Settings":
        positive = (
            "VIDEO_TTL_MS",
            "VIDEO_STORAGE_TTL_MS",
            "VIDEO_PULSE_WINDOW_MS",
            "VIDEO_PULSE_IMMEDIATE_MS",
            "COMMENT_SESSION_FRESHNESS_MS",
            "COMMENT_MAX_LENGTH",
            "FRAME_COUNT",
            "FRAME_TARGET_WIDTH",
            "FRAME_TARGET_HEIGHT",
            "VISION_TIMEOUT_S",
            "FETCH_TIMEOUT_S",
            "ANALYSIS_WORKERS",
        )
        for name in positive:
            if getattr(self, name) <= 0:
                raise ValueError(f"{name} must be positive, got {getattr(self, name)}")
        for name in ("COMMENT_RATE_LIMIT_MS", "VISION_MAX_RETRIES", "VISION_BACKOFF_MS"):
            if getattr(self, name) < 0:
                raise ValueError(f"{name} must not be negative, got {getattr(self, name)}")
        if self.VIDEO_STORAGE_TTL_MS < self.VIDEO_TTL_MS:
            raise ValueError("VIDEO_STORAGE_TTL_MS must be at least VIDEO_TTL_MS")
        if not 1 <= self.FRAME_JPEG_QUALITY <= 100:
            raise ValueError("FRAME_JPEG_QUALITY must be within 1..100")
        return self


settings = Settings()
