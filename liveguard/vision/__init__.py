"""Per-frame liveness and anti-spoofing components."""

from .liveness import (
    LivenessConfig,
    LivenessSession,
    LivenessSessionError,
    LivenessTracker,
    LivenessVerdict,
    Observation,
)
from .samples import EyeLandmarks, FaceBox, FaceLandmarks, FrameSample, sample_from_landmarks68
from .spoof import SpoofConfig, SpoofHeuristic, SpoofVerdict

__all__ = [
    "EyeLandmarks",
    "FaceBox",
    "FaceLandmarks",
    "FrameSample",
    "LivenessConfig",
    "LivenessSession",
    "LivenessSessionError",
    "LivenessTracker",
    "LivenessVerdict",
    "Observation",
    "SpoofConfig",
    "SpoofHeuristic",
    "SpoofVerdict",
    "sample_from_landmarks68",
]
