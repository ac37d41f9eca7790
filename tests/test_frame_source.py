import numpy as np
import pytest

from liveguard.attendance.capture import run_camera_session
from liveguard.attendance.orchestrator import LIVENESS_FAILED, SessionOrchestrator
from liveguard.vision.frame_source import CameraConfig, CameraError, CameraFrameSource, CameraManager
from liveguard.vision.samples import sample_from_landmarks68


class FakeCapture:
    def __init__(self, frames):
        self._frames = list(frames)
        self.released = False
        self.props = {}

    def isOpened(self):
        return not self.released

    def set(self, prop, value):
        self.props[prop] = value
        return True

    def get(self, prop):
        return self.props.get(prop, 0)

    def read(self):
        if not self._frames:
            return False, None
        return True, self._frames.pop(0)

    def release(self):
        self.released = True


class FakeProvider:
    def __init__(self, capture):
        self.capture = capture
        self.opened = []

    def open(self, index):
        self.opened.append(index)
        return self.capture


def _points68(eye_lid=5.0):
    points = [(0.0, 0.0)] * 68
    for start, ox in ((36, 100.0), (42, 140.0)):
        points[start:start + 6] = [
            (ox, 100.0),
            (ox + 3, 100.0 - eye_lid),
            (ox + 7, 100.0 - eye_lid),
            (ox + 10, 100.0),
            (ox + 7, 100.0 + eye_lid),
            (ox + 3, 100.0 + eye_lid),
        ]
    return points


@pytest.fixture
def frames():
    return [np.zeros((480, 640, 3), dtype=np.uint8) for _ in range(3)]


def test_frame_source_yields_samples_until_camera_runs_dry(frames):
    capture = FakeCapture(frames)
    camera = CameraManager(CameraConfig(index=2, width=640, height=480, warmup_frames=0), FakeProvider(capture))
    detections = iter([((200, 120, 200, 220), _points68()), None, ((0, 0, 0, 10), _points68())])

    with CameraFrameSource(camera, lambda frame: next(detections)) as source:
        samples = list(source)

    assert len(samples) == 3
    first = samples[0]
    assert first.sequence_index == 1
    assert (first.frame_width, first.frame_height) == (640, 480)
    assert first.landmarks.left.aspect_ratio() == pytest.approx(1.0)
    assert first.image is frames[0]
    assert samples[1] is None
    assert samples[2] is None
    assert capture.released


def test_camera_is_configured_on_start():
    capture = FakeCapture([])
    provider = FakeProvider(capture)
    camera = CameraManager(CameraConfig(index=1, width=720, height=560, warmup_frames=0), provider)
    assert camera.start() is capture
    assert camera.start() is capture
    assert provider.opened == [1]
    assert 720 in capture.props.values()
    assert 560 in capture.props.values()


def test_read_failure_raises_camera_error():
    camera = CameraManager(CameraConfig(warmup_frames=0), FakeProvider(FakeCapture([])))
    with pytest.raises(CameraError):
        camera.read()


def test_landmark_adapter_needs_68_points():
    assert sample_from_landmarks68(
        box=(0, 0, 10, 10), points=_points68()[:10], frame_width=640, frame_height=480, sequence_index=1
    ) is None


def test_warmup_frames_are_discarded(frames):
    capture = FakeCapture(frames)
    camera = CameraManager(CameraConfig(warmup_frames=2), FakeProvider(capture), warmup_delay=0)
    assert camera.read() is frames[2]
    assert camera.frames_read == 1
    with pytest.raises(CameraError):
        camera.read()


def test_camera_session_ends_when_camera_runs_dry(frames):
    capture = FakeCapture(frames)
    camera = CameraManager(CameraConfig(warmup_frames=0), FakeProvider(capture))
    orchestrator = SessionOrchestrator(gallery_provider=tuple)

    outcome = run_camera_session(orchestrator, lambda frame: ((200, 120, 200, 220), _points68()), camera=camera)

    assert outcome.outcome == LIVENESS_FAILED
    assert outcome.reason == "source_exhausted"
    assert camera.frames_read == 3
    assert capture.released
    assert not orchestrator.is_active()
