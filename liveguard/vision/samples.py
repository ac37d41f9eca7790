"""Per-frame detection records consumed by the liveness engine."""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import Any, Mapping, Optional, Sequence, Tuple

logger = logging.getLogger(__name__)

Point = Tuple[float, float]

EYE_POINTS = 6
# Eye ranges in the 68-point landmark layout
LEFT_EYE_68 = slice(36, 42)
RIGHT_EYE_68 = slice(42, 48)


def distance(a: Point, b: Point) -> float:
    """Euclidean distance between two 2D points."""
    return math.hypot(a[0] - b[0], a[1] - b[1])


def _as_point(value: Any) -> Point:
    if isinstance(value, Mapping):
        return (float(value["x"]), float(value["y"]))
    return (float(value[0]), float(value[1]))


@dataclass(frozen=True)
class FaceBox:
    x: float
    y: float
    width: float
    height: float

    def __post_init__(self) -> None:
        if not (self.width > 0 and self.height > 0):
            raise ValueError(f"FaceBox requires positive size, got {self.width}x{self.height}")

    @property
    def area(self) -> float:
        return self.width * self.height

    @property
    def center(self) -> Point:
        return (self.x + self.width / 2.0, self.y + self.height / 2.0)


@dataclass(frozen=True)
class EyeLandmarks:
    """Six eye points: corner, two upper lid, corner, two lower lid."""

    points: Tuple[Point, ...]

    @classmethod
    def from_points(cls, points: Sequence[Any]) -> "EyeLandmarks":
        """Accepts ``(x, y)`` pairs or ``{"x": .., "y": ..}`` objects."""
        return cls(tuple(_as_point(p) for p in points))

    def is_well_formed(self) -> bool:
        if len(self.points) != EYE_POINTS:
            return False
        return distance(self.points[0], self.points[3]) > 0.0

    def aspect_ratio(self) -> float:
        p = self.points
        vertical = distance(p[1], p[5]) + distance(p[2], p[4])
        return vertical / (2.0 * distance(p[0], p[3]))


@dataclass(frozen=True)
class FaceLandmarks:
    left: Optional[EyeLandmarks]
    right: Optional[EyeLandmarks]

    def is_well_formed(self) -> bool:
        return bool(
            self.left is not None
            and self.right is not None
            and self.left.is_well_formed()
            and self.right.is_well_formed()
        )


@dataclass(frozen=True)
class FrameSample:
    box: FaceBox
    landmarks: FaceLandmarks
    frame_width: int
    frame_height: int
    sequence_index: int
    # Raw pixels handed to the embedding extractor, never compared
    image: Any = field(default=None, compare=False, repr=False)

    def is_well_formed(self) -> bool:
        return self.frame_width > 0 and self.frame_height > 0 and self.landmarks.is_well_formed()


def sample_from_landmarks68(
    *,
    box: Tuple[float, float, float, float],
    points: Sequence[Sequence[float]],
    frame_width: int,
    frame_height: int,
    sequence_index: int,
    image: Any = None,
) -> Optional[FrameSample]:
    """Build a FrameSample from an (x, y, w, h) box and a 68-point landmark set.

    Returns None when the detection cannot be represented (degenerate box or
    a landmark set that is not 68 points); callers treat that as a frame
    without detection.
    """
    if len(points) != 68:
        logger.debug("Frame %s: expected 68 landmarks, got %d", sequence_index, len(points))
        return None
    try:
        face_box = FaceBox(*(float(v) for v in box))
    except (TypeError, ValueError) as exc:
        logger.debug("Frame %s: invalid face box %r: %s", sequence_index, box, exc)
        return None
    return FrameSample(
        box=face_box,
        landmarks=FaceLandmarks(
            left=EyeLandmarks.from_points(points[LEFT_EYE_68]),
            right=EyeLandmarks.from_points(points[RIGHT_EYE_68]),
        ),
        frame_width=int(frame_width),
        frame_height=int(frame_height),
        sequence_index=int(sequence_index),
        image=image,
    )


__all__ = [
    "Point",
    "FaceBox",
    "EyeLandmarks",
    "FaceLandmarks",
    "FrameSample",
    "distance",
    "sample_from_landmarks68",
]
