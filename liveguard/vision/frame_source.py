"""Camera-backed frame source producing FrameSamples for the liveness loop."""
from __future__ import annotations

import itertools
import logging
import time
from dataclasses import dataclass
from typing import Any, Callable, Iterator, List, Optional, Protocol, Sequence, Tuple

import cv2

from .samples import FrameSample, sample_from_landmarks68


logger = logging.getLogger(__name__)

# (x, y, w, h) box plus a 68-point landmark set, or None when nothing was found
Detection = Optional[Tuple[Tuple[float, float, float, float], Sequence[Sequence[float]]]]
Detector = Callable[[Any], Detection]


class CameraError(RuntimeError):
    """Raised when camera operations fail."""


class CameraProvider(Protocol):
    """Abstraction for objects that can supply cv2.VideoCapture."""

    def open(self, index: int) -> cv2.VideoCapture:
        ...


class DefaultCameraProvider:
    """Real provider that uses OpenCV to create VideoCapture objects."""

    def open(self, index: int) -> cv2.VideoCapture:
        capture = cv2.VideoCapture(index)
        if not capture or not capture.isOpened():
            raise CameraError(f"Cannot open camera index {index}")
        return capture


@dataclass
class CameraConfig:
    index: int = 0
    width: Optional[int] = None
    height: Optional[int] = None
    warmup_frames: int = 3
    buffer_size: Optional[int] = 2


class CameraManager:
    """Opens the verification camera lazily and hands out raw frames.

    Property requests are best effort: drivers may ignore them, so the
    effective frame size is read back and logged. ``frames_read`` counts
    frames delivered to callers, warmup frames excluded.
    """

    def __init__(
        self,
        config: Optional[CameraConfig] = None,
        provider: Optional[CameraProvider] = None,
        *,
        warmup_delay: float = 0.05,
    ):
        self.config = config or CameraConfig()
        self.provider = provider or DefaultCameraProvider()
        self.warmup_delay = warmup_delay
        self.frames_read = 0
        self._capture: Optional[cv2.VideoCapture] = None

    @property
    def is_open(self) -> bool:
        return self._capture is not None and self._capture.isOpened()

    def _requested_properties(self) -> List[Tuple[int, float]]:
        cfg = self.config
        requested = []
        if cfg.width:
            requested.append((cv2.CAP_PROP_FRAME_WIDTH, cfg.width))
        if cfg.height:
            requested.append((cv2.CAP_PROP_FRAME_HEIGHT, cfg.height))
        if cfg.buffer_size is not None and hasattr(cv2, "CAP_PROP_BUFFERSIZE"):
            requested.append((cv2.CAP_PROP_BUFFERSIZE, cfg.buffer_size))
        return requested

    def start(self) -> cv2.VideoCapture:
        if self.is_open:
            return self._capture

        capture = self.provider.open(self.config.index)
        try:
            for prop, value in self._requested_properties():
                capture.set(prop, value)
            logger.info(
                "[Camera] Opened index %s at %sx%s",
                self.config.index,
                int(capture.get(cv2.CAP_PROP_FRAME_WIDTH)),
                int(capture.get(cv2.CAP_PROP_FRAME_HEIGHT)),
            )
            self._warm_up(capture)
        except cv2.error as exc:
            logger.warning("[Camera] Could not apply settings: %s", exc)
        self._capture = capture
        return capture

    def _warm_up(self, capture: cv2.VideoCapture) -> None:
        # auto-exposure settles over the first frames; they are discarded
        warmup = max(0, self.config.warmup_frames)
        delivered = 0
        for _ in range(warmup):
            ok, _frame = capture.read()
            delivered += bool(ok)
            if self.warmup_delay:
                time.sleep(self.warmup_delay)
        if warmup:
            logger.debug("[Camera] Discarded %d/%d warmup frames", delivered, warmup)

    def read(self):
        capture = self.start()
        ok, frame = capture.read()
        if not ok or frame is None:
            raise CameraError(f"Camera {self.config.index} stopped delivering frames")
        self.frames_read += 1
        return frame

    def stop(self) -> None:
        capture, self._capture = self._capture, None
        if capture is not None:
            capture.release()
            logger.info("[Camera] Released index %s after %d frames", self.config.index, self.frames_read)


class CameraFrameSource:
    """Iterates camera frames through an external detector.

    Yields one item per captured frame: a FrameSample, or None when the
    detector found no usable face. The stream ends when the camera stops
    delivering frames.
    """

    def __init__(
        self,
        camera: CameraManager,
        detector: Detector,
        *,
        start_index: int = 1,
    ) -> None:
        self.camera = camera
        self.detector = detector
        self.start_index = start_index

    def __iter__(self) -> Iterator[Optional[FrameSample]]:
        for index in itertools.count(self.start_index):
            try:
                frame = self.camera.read()
            except CameraError as exc:
                logger.warning("[Camera] Frame source ended at frame %d: %s", index, exc)
                return
            yield self._to_sample(frame, index)

    def _to_sample(self, frame, index: int) -> Optional[FrameSample]:
        detection = self.detector(frame)
        if detection is None:
            return None
        box, points = detection
        height, width = frame.shape[:2]
        return sample_from_landmarks68(
            box=box,
            points=points,
            frame_width=width,
            frame_height=height,
            sequence_index=index,
            image=frame,
        )

    def close(self) -> None:
        self.camera.stop()

    def __enter__(self) -> "CameraFrameSource":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()


__all__ = [
    "CameraConfig",
    "CameraError",
    "CameraFrameSource",
    "CameraManager",
    "CameraProvider",
    "DefaultCameraProvider",
]
