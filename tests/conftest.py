import math

import numpy as np
import pytest

from liveguard.vision.samples import EyeLandmarks, FaceBox, FaceLandmarks, FrameSample

FRAME_WIDTH = 640
FRAME_HEIGHT = 480


def _eye(closed=False, origin=(0.0, 0.0)):
    ox, oy = origin
    lid = 0.1 if closed else 5.0
    # corner, upper lid x2, corner, lower lid x2
    return EyeLandmarks.from_points([
        (ox, oy),
        (ox + 3, oy - lid),
        (ox + 7, oy - lid),
        (ox + 10, oy),
        (ox + 7, oy + lid),
        (ox + 3, oy + lid),
    ])


def _sample(index, *, x=220.0, y=140.0, width=200.0, height=200.0, blink=False,
            frame_width=FRAME_WIDTH, frame_height=FRAME_HEIGHT, landmarks=None):
    if landmarks is None:
        landmarks = FaceLandmarks(left=_eye(blink), right=_eye(blink, origin=(40.0, 0.0)))
    return FrameSample(
        box=FaceBox(x, y, width, height),
        landmarks=landmarks,
        frame_width=frame_width,
        frame_height=frame_height,
        sequence_index=index,
    )


@pytest.fixture
def make_eye():
    return _eye


@pytest.fixture
def make_sample():
    return _sample


@pytest.fixture
def live_frames():
    """300 frames: eyes closed over 5..14, one 20px jump at frame 101."""
    def build(count=300, blink_frames=range(5, 15), jump_at=101):
        frames = []
        for i in range(1, count + 1):
            x = 240.0 if i == jump_at else 220.0
            frames.append(_sample(i, x=x, blink=i in blink_frames))
        return frames
    return build


@pytest.fixture
def vector():
    def build(*values, size=4):
        v = np.zeros(size, dtype=np.float32)
        v[:len(values)] = values
        return v
    return build


@pytest.fixture
def equidistant_query(vector):
    """0.7 from both (0, 0) and (1.2, 0)."""
    return vector(0.6, math.sqrt(0.13))
