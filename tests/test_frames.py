import base64
from pathlib import Path

import cv2
import numpy as np
import pytest

from hotzones.exceptions import FrameExtractionError
from hotzones.frames import FrameExtractor, encode_jpeg_data_url, letterbox, select_timestamps


@pytest.fixture
def sample_video(tmp_path):
    """Three seconds of 64x48 MJPG frames at 10 fps."""
    path = tmp_path / "clip.avi"
    writer = cv2.VideoWriter(str(path), cv2.VideoWriter_fourcc(*"MJPG"), 10.0, (64, 48))
    for i in range(30):
        frame = np.full((48, 64, 3), i * 8, dtype=np.uint8)
        writer.write(frame)
    writer.release()
    return path


def read_bytes(url):
    return Path(url).read_bytes()


def test_first_middle_last_timestamps():
    assert select_timestamps(10.0, 3, "first-middle-last") == pytest.approx([1.0, 5.0, 9.0])
    assert select_timestamps(10.0, 2, "first-middle-last") == pytest.approx([1.0, 5.0])


def test_evenly_spaced_timestamps():
    assert select_timestamps(8.0, 3, "evenly-spaced") == pytest.approx([2.0, 4.0, 6.0])


def test_letterbox_keeps_aspect_ratio():
    frame = np.full((100, 200, 3), 255, dtype=np.uint8)
    boxed = letterbox(frame, 512, 512)

    assert boxed.shape == (512, 512, 3)
    # 200x100 scales to 512x256, centered vertically
    assert boxed[0, 256].sum() == 0
    assert boxed[255, 256].min() == 255
    assert boxed[511, 256].sum() == 0


def test_letterbox_grayscale():
    assert letterbox(np.zeros((10, 10), dtype=np.uint8), 32, 16).shape == (16, 32, 3)


def test_encode_jpeg_data_url():
    url = encode_jpeg_data_url(np.zeros((8, 8, 3), dtype=np.uint8))
    prefix = "data:image/jpeg;base64,"
    assert url.startswith(prefix)
    assert base64.b64decode(url[len(prefix):])[:2] == b"\xff\xd8"


def test_extract_frames_from_video(sample_video):
    extractor = FrameExtractor(read_bytes, frame_count=3, target_width=128, target_height=128)

    frames = extractor.extract(str(sample_video))

    assert len(frames) == 3
    assert [f.timestamp for f in frames] == pytest.approx([0.3, 1.5, 2.7])
    decoded = cv2.imdecode(np.frombuffer(base64.b64decode(frames[0].base64_data), np.uint8), cv2.IMREAD_COLOR)
    assert decoded.shape == (128, 128, 3)


def test_unreadable_video_raises(tmp_path):
    path = tmp_path / "broken.webm"
    path.write_bytes(b"not a video")
    extractor = FrameExtractor(read_bytes)

    with pytest.raises(FrameExtractionError):
        extractor.extract(str(path))
