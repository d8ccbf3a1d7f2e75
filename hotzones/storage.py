# hotzones/storage.py
# Storage boundary for uploaded video bytes
# - persist: writes the upload under VIDEO_STORAGE_PATH and returns a stable reference
# - fetch: reads bytes back from a local path or an http(s) URL (with timeout)

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Optional
from urllib.parse import urlparse

import requests

from hotzones.exceptions import StorageError

logger = logging.getLogger(__name__)

CONTENT_TYPE_EXTENSIONS: dict[str, str] = {
    "video/webm": "webm",
    "video/mp4": "mp4",
    "video/quicktime": "mov",
    "video/x-msvideo": "avi",
}


def extension_for(content_type: str) -> str:
    return CONTENT_TYPE_EXTENSIONS.get(content_type.split(";")[0].strip().lower(), "webm")


class VideoStorage:
    """Local-disk video storage with HTTP(S) fetch support."""

    def __init__(self, base_dir: str, fetch_timeout: float = 30.0, http: Optional[requests.Session] = None):
        self.base_dir = Path(base_dir)
        self.fetch_timeout = fetch_timeout
        self.http = http or requests.Session()

    def persist_video_bytes(self, video_id: str, content_type: str, data: bytes) -> str:
        """Write the video and return its path as the reference URL.

        The storage directory is created on first write.
        """
        file_path = self.base_dir / f"{video_id}.{extension_for(content_type)}"
        try:
            os.makedirs(self.base_dir, exist_ok=True)
            with open(file_path, "wb") as buffer:
                buffer.write(data)
        except OSError as e:
            raise StorageError(f"Failed to store video {video_id}: {e}") from e

        logger.info("Stored video %s (%d bytes) at %s", video_id, len(data), file_path)
        return str(file_path)

    def fetch_video_bytes(self, url: str) -> bytes:
        scheme = urlparse(url).scheme
        if scheme in ("http", "https"):
            return self._fetch_remote(url)

        path = Path(url[len("file://"):] if scheme == "file" else url)
        try:
            return path.read_bytes()
        except OSError as e:
            raise StorageError(f"Failed to read video at {path}: {e}") from e

    def _fetch_remote(self, url: str) -> bytes:
        try:
            response = self.http.get(url, timeout=self.fetch_timeout)
        except requests.RequestException as e:
            raise StorageError(f"Failed to fetch video: {e}") from e

        if response.status_code != 200:
            raise StorageError(f"Failed to fetch video: {response.status_code} {response.reason}")
        return response.content
