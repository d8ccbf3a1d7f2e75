import pytest
import requests

from hotzones.exceptions import StorageError
from hotzones.storage import VideoStorage, extension_for


class FakeResponse:
    def __init__(self, status_code, content=b"", reason="OK"):
        self.status_code = status_code
        self.content = content
        self.reason = reason


class FakeHTTP:
    def __init__(self, response):
        self.response = response
        self.calls = []

    def get(self, url, timeout=None):
        self.calls.append((url, timeout))
        if isinstance(self.response, Exception):
            raise self.response
        return self.response


def test_extension_for():
    assert extension_for("video/mp4") == "mp4"
    assert extension_for("video/webm;codecs=vp9") == "webm"
    assert extension_for("application/octet-stream") == "webm"


def test_persist_and_fetch_local(tmp_path):
    storage = VideoStorage(str(tmp_path / "videos"))
    url = storage.persist_video_bytes("video-1", "video/mp4", b"data")

    assert url.endswith("video-1.mp4")
    assert storage.fetch_video_bytes(url) == b"data"
    assert storage.fetch_video_bytes("file://" + url) == b"data"


def test_storage_directory_created_on_first_write(tmp_path):
    base_dir = tmp_path / "videos" / "nested"
    storage = VideoStorage(str(base_dir))
    assert not base_dir.exists()

    storage.persist_video_bytes("video-1", "video/webm", b"data")
    assert (base_dir / "video-1.webm").read_bytes() == b"data"


def test_fetch_missing_file(tmp_path):
    storage = VideoStorage(str(tmp_path))
    with pytest.raises(StorageError):
        storage.fetch_video_bytes(str(tmp_path / "missing.webm"))


def test_fetch_remote(tmp_path):
    http = FakeHTTP(FakeResponse(200, b"remote"))
    storage = VideoStorage(str(tmp_path), fetch_timeout=7.0, http=http)

    assert storage.fetch_video_bytes("https://cdn.example.com/v.webm") == b"remote"
    assert http.calls == [("https://cdn.example.com/v.webm", 7.0)]


@pytest.mark.parametrize(
    "response",
    [FakeResponse(404, reason="Not Found"), requests.exceptions.ConnectionError("down")],
)
def test_fetch_remote_failures(tmp_path, response):
    storage = VideoStorage(str(tmp_path), http=FakeHTTP(response))
    with pytest.raises(StorageError):
        storage.fetch_video_bytes("https://cdn.example.com/v.webm")
