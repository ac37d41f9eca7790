"""
Request helpers for the verification API
"""
import logging

from flask import request

from liveguard.vision.samples import EyeLandmarks, FaceBox, FaceLandmarks, FrameSample

logger = logging.getLogger(__name__)


def get_request_data():
    """JSON body as a dict (empty dict when absent or not an object)."""
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


def _parse_eye(points):
    if not isinstance(points, (list, tuple)):
        return None
    try:
        return EyeLandmarks.from_points(points)
    except (TypeError, ValueError, IndexError, KeyError):
        return None


def parse_frame(payload):
    """
    Convert one JSON frame into a FrameSample.

    ``null`` means the detector found nothing. A frame with an unusable box
    is also treated as "no detection"; bad eye points are kept and skipped
    by the tracker. Missing frame metadata raises ValueError.
    """
    if payload is None:
        return None
    if not isinstance(payload, dict):
        raise ValueError("Frame must be an object or null")

    try:
        sequence_index = int(payload['sequenceIndex'])
        frame_width = int(payload['frameWidth'])
        frame_height = int(payload['frameHeight'])
    except (KeyError, TypeError, ValueError) as exc:
        raise ValueError(f"Frame metadata missing or invalid: {exc}") from exc

    box = payload.get('box') or {}
    try:
        face_box = FaceBox(
            x=float(box['x']),
            y=float(box['y']),
            width=float(box['width']),
            height=float(box['height']),
        )
    except (KeyError, TypeError, ValueError) as exc:
        logger.debug("Frame %s: unusable box (%s), treated as no detection", sequence_index, exc)
        return None

    landmarks = payload.get('landmarks')
    if not isinstance(landmarks, dict):
        landmarks = {}
    return FrameSample(
        box=face_box,
        landmarks=FaceLandmarks(
            left=_parse_eye(landmarks.get('left')),
            right=_parse_eye(landmarks.get('right')),
        ),
        frame_width=frame_width,
        frame_height=frame_height,
        sequence_index=sequence_index,
    )


def parse_embedding(values):
    if not isinstance(values, (list, tuple)) or not values:
        raise ValueError("Embedding must be a non-empty list of numbers")
    try:
        return [float(v) for v in values]
    except (TypeError, ValueError) as exc:
        raise ValueError(f"Embedding must contain only numbers: {exc}") from exc
