"""
Geometric anti-spoofing heuristic.

Scores a single detection against two cues that separate a live face from a
printed photo or a screen held up to the camera:
- Face size relative to the frame (too near / too far reads as a flat image)
- Position stability between consecutive frames (real faces jitter a little,
  prints are either frozen or jump around)

The scorer keeps no state: the caller passes the previous face center and
carries the returned center forward.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple

from .samples import FaceBox, Point, distance


@dataclass(frozen=True)
class SpoofConfig:
    min_face_ratio: float = 0.05
    max_face_ratio: float = 0.4
    min_movement: float = 5.0
    max_movement: float = 50.0
    natural_stability: float = 0.8
    suspicious_stability: float = 0.3
    consistent_base_score: float = 0.2
    inconsistent_base_score: float = 0.6
    stability_weight: float = 0.3
    spoof_threshold: float = 0.5


@dataclass(frozen=True)
class SpoofVerdict:
    is_spoofed: bool
    confidence: float
    size_consistency: bool
    position_stability: float

    def to_dict(self) -> dict:
        return {
            "isSpoofed": self.is_spoofed,
            "confidence": self.confidence,
            "sizeConsistency": self.size_consistency,
            "positionStability": self.position_stability,
        }


class SpoofHeuristic:
    """Pure per-frame spoof scorer."""

    def __init__(self, config: Optional[SpoofConfig] = None) -> None:
        self.config = config or SpoofConfig()

    def score(
        self,
        box: FaceBox,
        frame_width: float,
        frame_height: float,
        previous_center: Optional[Point] = None,
    ) -> SpoofVerdict:
        verdict, _ = self.score_with_center(box, frame_width, frame_height, previous_center)
        return verdict

    def score_with_center(
        self,
        box: FaceBox,
        frame_width: float,
        frame_height: float,
        previous_center: Optional[Point] = None,
    ) -> Tuple[SpoofVerdict, Point]:
        """Score a detection and return the center to pass on the next call."""
        cfg = self.config
        frame_area = float(frame_width) * float(frame_height)
        if frame_area <= 0:
            raise ValueError(f"Frame size must be positive, got {frame_width}x{frame_height}")

        face_ratio = box.area / frame_area
        size_consistency = cfg.min_face_ratio < face_ratio < cfg.max_face_ratio

        current_center = box.center
        position_stability = 1.0
        if previous_center is not None:
            movement = distance(current_center, previous_center)
            if cfg.min_movement < movement < cfg.max_movement:
                position_stability = cfg.natural_stability
            else:
                position_stability = cfg.suspicious_stability

        base_score = cfg.consistent_base_score if size_consistency else cfg.inconsistent_base_score
        final_score = base_score * (1.0 - position_stability * cfg.stability_weight)
        final_score = max(0.0, min(1.0, final_score))

        verdict = SpoofVerdict(
            is_spoofed=final_score > cfg.spoof_threshold,
            confidence=final_score,
            size_consistency=size_consistency,
            position_stability=position_stability,
        )
        return verdict, current_center


__all__ = ["SpoofConfig", "SpoofHeuristic", "SpoofVerdict"]
