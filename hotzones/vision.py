# hotzones/vision.py
# Vision model client for scene analysis
# - sends base64 JPEG frames with a privacy-constrained prompt
# - providers: llama (OpenAI-compatible chat completions) and gemini (generateContent)
# - transient failures (timeout, connection, 429, 5xx) are retried with exponential backoff
# - the reply must be JSON matching SceneAnalysis

from __future__ import annotations

import json
import logging
import re
import time
from typing import Any, Callable, Literal, Optional

import requests
from pydantic import BaseModel, ConfigDict, Field, ValidationError
from tenacity import RetryCallState, Retrying, retry_if_exception, stop_after_attempt, wait_exponential

from hotzones.config import Settings
from hotzones.exceptions import MissingAPIKeyError, VisionModelError, VisionResponseError

logger = logging.getLogger(__name__)

Provider = Literal["llama", "gemini"]

DEFAULT_MODELS: dict[str, str] = {
    "llama": "llama-3.2-90b-vision-instruct",
    "gemini": "gemini-1.5-flash",
}

DEFAULT_ENDPOINTS: dict[str, str] = {
    "llama": "https://api.llama-api.com/chat/completions",
    "gemini": "https://generativelanguage.googleapis.com/v1beta/models",
}

SYSTEM_PROMPT = """You are analyzing a short video clip from an anonymous event reporting system.
Your task is to provide a brief, factual scene description following strict privacy rules.

CRITICAL PRIVACY RULES:
- NEVER describe specific individuals, faces, or identifiable people
- NEVER mention license plates, vehicle IDs, or registration numbers
- NEVER describe specific clothing, accessories, or personal items
- NEVER mention badge numbers, agency identifiers, or unit numbers
- NEVER include age, ethnicity, height, or physical characteristics
- NEVER track individuals across frames

WHAT TO INCLUDE:
- Scene type (e.g., urban street, park, intersection)
- Approximate counts using ONLY these ranges: "0", "1-3", "4-10", "10-20", "20+"
- Time of day (daytime, nighttime, dawn, dusk)
- Weather conditions (clear, cloudy, rainy, foggy)
- Activity level (low, medium, high)
- General movement patterns (stationary, pedestrian-traffic, vehicle-traffic)

OUTPUT FORMAT:
Return ONLY valid JSON with this exact structure:
{
  "summary": "1-2 sentence factual description",
  "tags": ["tag1", "tag2", "tag3"],
  "counts": {
    "people": "1-3",
    "vehicles": "0"
  },
  "activityLevel": "low",
  "confidence": 0.85
}

Remember: This is for aggregate situational awareness, not individual tracking.
Be factual, neutral, and privacy-preserving."""

USER_PROMPT = "Analyze these frames from a video event:"

_CODE_FENCE = re.compile(r"```(?:json)?\n?|\n?```")


class SceneCounts(BaseModel):
    people: str = "0"
    vehicles: str = "0"


class SceneAnalysis(BaseModel):
    """Validated model reply."""

    model_config = ConfigDict(populate_by_name=True)

    summary: str = Field(min_length=1)
    tags: list[str]
    counts: SceneCounts = Field(default_factory=SceneCounts)
    activity_level: Literal["low", "medium", "high"] = Field(alias="activityLevel")
    confidence: float = Field(ge=0.0, le=1.0)


def parse_scene_analysis(content: str) -> SceneAnalysis:
    """Parse the model's text reply, tolerating markdown code fences."""
    cleaned = _CODE_FENCE.sub("", content).strip()
    try:
        data = json.loads(cleaned)
    except json.JSONDecodeError as e:
        raise VisionResponseError(f"Failed to parse JSON from model response: {e}") from e

    try:
        return SceneAnalysis.model_validate(data)
    except ValidationError as e:
        raise VisionResponseError(f"Model response does not match the expected schema: {e}") from e


def _is_transient(error: BaseException) -> bool:
    return isinstance(error, VisionModelError) and error.retryable


def _strip_data_url(frame: str) -> str:
    return frame.split(",", 1)[1] if frame.startswith("data:") else frame


class VisionClient:
    """Calls a hosted vision model to describe a handful of frames."""

    def __init__(
        self,
        provider: Provider = "llama",
        api_key: str = "",
        model: Optional[str] = None,
        endpoint: Optional[str] = None,
        timeout: float = 30.0,
        max_retries: int = 3,
        backoff_ms: int = 1000,
        temperature: float = 0.3,
        max_tokens: int = 500,
        http: Optional[requests.Session] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        if provider not in DEFAULT_MODELS:
            raise ValueError(f"Unknown vision provider: {provider}")
        self.provider = provider
        self.api_key = api_key
        self.model = model or DEFAULT_MODELS[provider]
        self.endpoint = endpoint or DEFAULT_ENDPOINTS[provider]
        self.timeout = timeout
        self.max_retries = max_retries
        self.backoff_ms = backoff_ms
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.http = http or requests.Session()
        self.sleep = sleep

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        http: Optional[requests.Session] = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> "VisionClient":
        return cls(
            provider=settings.VISION_PROVIDER,
            api_key=settings.VISION_API_KEY,
            model=settings.VISION_MODEL,
            endpoint=settings.VISION_ENDPOINT,
            timeout=settings.VISION_TIMEOUT_S,
            max_retries=settings.VISION_MAX_RETRIES,
            backoff_ms=settings.VISION_BACKOFF_MS,
            temperature=settings.VISION_TEMPERATURE,
            max_tokens=settings.VISION_MAX_TOKENS,
            http=http,
            sleep=sleep,
        )

    @property
    def model_version(self) -> str:
        return self.model

    def analyze_frames(self, frames: list[str]) -> SceneAnalysis:
        """Describe ``frames`` (JPEG data URLs) with the configured model.

        ``max_retries`` counts retries, so ``max_retries=3`` allows four attempts with
        ``backoff_ms * 2**n`` between them.

        Raises:
            MissingAPIKeyError: If no API key is configured.
            VisionModelError: If the call fails (after retries for transient errors).
            VisionResponseError: If the reply is not valid scene JSON. Not retried.
        """
        if not self.api_key:
            raise MissingAPIKeyError(self.provider)

        retrying = Retrying(
            stop=stop_after_attempt(self.max_retries + 1),
            wait=wait_exponential(multiplier=self.backoff_ms / 1000),
            retry=retry_if_exception(_is_transient),
            sleep=self.sleep,
            before_sleep=self._log_retry,
            reraise=True,
        )
        content = retrying(self._call, frames)
        return parse_scene_analysis(content)

    def _log_retry(self, retry_state: RetryCallState) -> None:
        logger.warning(
            "%s call failed (attempt %d/%d), retrying in %.1fs: %s",
            self.provider,
            retry_state.attempt_number,
            self.max_retries + 1,
            retry_state.next_action.sleep if retry_state.next_action else 0.0,
            retry_state.outcome.exception() if retry_state.outcome else None,
        )

    def _call(self, frames: list[str]) -> str:
        if self.provider == "gemini":
            url = f"{self.endpoint}/{self.model}:generateContent"
            headers = {"Content-Type": "application/json"}
            params = {"key": self.api_key}
            payload = self._gemini_payload(frames)
        else:
            url = self.endpoint
            headers = {"Content-Type": "application/json", "Authorization": f"Bearer {self.api_key}"}
            params = None
            payload = self._llama_payload(frames)

        try:
            response = self.http.post(url, headers=headers, params=params, json=payload, timeout=self.timeout)
        except requests.exceptions.Timeout as e:
            raise VisionModelError(f"{self.provider} API timed out after {self.timeout}s", retryable=True) from e
        except requests.exceptions.ConnectionError as e:
            raise VisionModelError(f"{self.provider} API connection failed: {e}", retryable=True) from e

        if response.status_code != 200:
            status = response.status_code
            raise VisionModelError(
                f"{self.provider} API error ({status}): {response.text[:200]}",
                status_code=status,
                retryable=status == 429 or status >= 500,
            )

        try:
            data = response.json()
        except ValueError as e:
            raise VisionResponseError(f"{self.provider} API returned a non-JSON body") from e

        return self._reply_text(data)

    def _llama_payload(self, frames: list[str]) -> dict[str, Any]:
        return {
            "model": self.model,
            "messages": [
                {"role": "system", "content": SYSTEM_PROMPT},
                {
                    "role": "user",
                    "content": [{"type": "text", "text": USER_PROMPT}]
                    + [{"type": "image_url", "image_url": {"url": frame}} for frame in frames],
                },
            ],
            "max_tokens": self.max_tokens,
            "temperature": self.temperature,
        }

    def _gemini_payload(self, frames: list[str]) -> dict[str, Any]:
        parts: list[dict[str, Any]] = [{"text": f"{SYSTEM_PROMPT}\n\n{USER_PROMPT}"}]
        for frame in frames:
            parts.append({"inline_data": {"mime_type": "image/jpeg", "data": _strip_data_url(frame)}})
        return {
            "contents": [{"parts": parts}],
            "generationConfig": {
                "temperature": self.temperature,
                "maxOutputTokens": self.max_tokens,
            },
        }

    def _reply_text(self, data: dict[str, Any]) -> str:
        try:
            if self.provider == "gemini":
                text = data["candidates"][0]["content"]["parts"][0]["text"]
            else:
                text = data["choices"][0]["message"]["content"]
        except (IndexError, KeyError, TypeError) as e:
            raise VisionResponseError(f"Unexpected {self.provider} response structure: {str(data)[:200]}") from e

        if not text:
            raise VisionResponseError(f"{self.provider} response contained no text")
        return text
