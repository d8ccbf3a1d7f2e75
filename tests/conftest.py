import pytest

from hotzones.config import Settings
from hotzones.models import GeoLocation, VideoUpload
from hotzones.store import DataStore

START_MS = 1_700_000_000_000

SF = GeoLocation(lat=37.7749, lng=-122.4194)
SF_NEARBY = GeoLocation(lat=37.7750, lng=-122.4195)
FAR_AWAY = GeoLocation(lat=37.9, lng=-122.9)


class FakeClock:
    def __init__(self, now: int = START_MS):
        self.now = now

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int) -> int:
        self.now += ms
        return self.now


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def settings(tmp_path):
    return Settings(
        _env_file=None,
        ANALYSIS_ENABLED=False,
        VIDEO_STORAGE_PATH=str(tmp_path / "videos"),
    )


@pytest.fixture
def store(settings, clock):
    return DataStore(settings, clock)


@pytest.fixture
def add_video(store):
    """Register a video for a fresh session at ``location``."""

    def _add_video(location=SF, video_id="video-1"):
        session = store.sessions.create(location)
        return store.videos.add(
            VideoUpload(
                id=video_id,
                session_id=session.id,
                timestamp=store.now(),
                duration=5.0,
                size=1024,
                filename=f"{video_id}.webm",
            )
        )

    return _add_video
