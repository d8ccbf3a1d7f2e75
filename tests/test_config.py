import pytest
from pydantic import ValidationError

from hotzones.config import Settings


def test_defaults():
    settings = Settings(_env_file=None)
    assert settings.VIDEO_TTL_MS == 30 * 60 * 1000
    assert settings.VIDEO_STORAGE_TTL_MS == 2 * 60 * 60 * 1000
    assert settings.COMMENT_PROXIMITY_RADIUS_M == 200.0
    assert settings.VISION_MAX_RETRIES == 3


def test_env_override(monkeypatch):
    monkeypatch.setenv("COMMENT_MAX_LENGTH", "80")
    assert Settings(_env_file=None).COMMENT_MAX_LENGTH == 80


@pytest.mark.parametrize(
    "overrides",
    [
        {"VIDEO_TTL_MS": 0},
        {"FRAME_COUNT": 0},
        {"VISION_MAX_RETRIES": -1},
        {"VIDEO_TTL_MS": 10_000, "VIDEO_STORAGE_TTL_MS": 5_000},
        {"FRAME_JPEG_QUALITY": 101},
    ],
)
def test_rejects_bad_values(overrides):
    with pytest.raises(ValidationError):
        Settings(_env_file=None, **overrides)
