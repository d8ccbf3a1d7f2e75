# hotzones/exceptions.py
# Exception hierarchy for the hotzones service
# - missing or expired entities are not errors: registries return None or []
# - exceptions cover configuration mistakes and AI analysis pipeline failures


class HotzonesError(Exception):
    """Base exception for all hotzones errors."""

    pass


class ConfigError(HotzonesError):
    """Raised when configuration or seed data is malformed."""

    pass


class StorageError(HotzonesError):
    """Raised when video bytes cannot be persisted or fetched."""

    pass


class AnalysisError(HotzonesError):
    """Base exception for AI analysis pipeline failures."""

    pass


class FrameExtractionError(AnalysisError):
    """Raised when no usable frame could be extracted from a video."""

    pass


class MissingAPIKeyError(AnalysisError):
    """Raised when the vision model API key is not configured."""

    def __init__(self, provider: str):
        super().__init__(
            f"API key for '{provider}' not found. Set the VISION_API_KEY environment variable or pass api_key."
        )
        self.provider = provider


class VisionModelError(AnalysisError):
    """Raised when a vision model call fails.

    ``retryable`` marks transient failures (timeouts, connection errors, 5xx, 429)
    that the client may retry with backoff.
    """

    def __init__(self, message: str, status_code: int | None = None, retryable: bool = False):
        super().__init__(message)
        self.status_code = status_code
        self.retryable = retryable


class VisionResponseError(AnalysisError):
    """Raised when the model response does not match the expected schema."""

    pass
