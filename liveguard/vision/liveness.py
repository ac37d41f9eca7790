"""Blink and head-movement liveness tracking over one verification attempt."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

from .samples import FrameSample, Point, distance
from .spoof import SpoofHeuristic, SpoofVerdict


class LivenessSessionError(RuntimeError):
    """Raised when a liveness session is used outside its lifecycle."""


@dataclass(frozen=True)
class LivenessConfig:
    max_frames: int = 300
    required_blinks: int = 2
    ear_threshold: float = 0.25
    blink_debounce_frames: int = 5
    head_movement_threshold: float = 10.0


@dataclass
class LivenessSession:
    """Mutable counters owned by exactly one verification attempt."""

    max_frames: int
    required_blinks: int
    blink_count: int = 0
    head_movement_detected: bool = False
    last_center: Optional[Point] = None
    frame_count: int = 0
    last_sequence_index: Optional[int] = None
    scored_frames: int = 0
    spoofed_frames: int = 0
    spoof_score_total: float = 0.0
    stopped: bool = False

    @property
    def spoof_confidence(self) -> float:
        if not self.scored_frames:
            return 0.0
        return self.spoof_score_total / self.scored_frames


@dataclass(frozen=True)
class Observation:
    blink_detected: bool
    face_detected: bool = False
    head_movement: bool = False
    spoof: Optional[SpoofVerdict] = None


@dataclass(frozen=True)
class LivenessVerdict:
    success: bool
    blinks: int
    head_movement: bool
    frames: int = 0
    spoof_confidence: float = 0.0
    scored_frames: int = 0
    spoofed_frames: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "success": self.success,
            "blinks": self.blinks,
            "headMovement": self.head_movement,
            "frames": self.frames,
            "spoofConfidence": round(self.spoof_confidence, 4),
            "spoofedFrames": self.spoofed_frames,
            "scoredFrames": self.scored_frames,
        }


class LivenessTracker:
    """Single-use state machine: Collecting -> Complete.

    Every observed frame counts toward ``max_frames``, including frames where
    the detector found nothing or returned malformed landmarks. Completion
    is terminal; observing afterwards is a programming error.
    """

    def __init__(
        self,
        config: Optional[LivenessConfig] = None,
        *,
        spoof_heuristic: Optional[SpoofHeuristic] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.config = config or LivenessConfig()
        self._spoof = spoof_heuristic or SpoofHeuristic()
        self._logger = logger or logging.getLogger(__name__)
        self.session = LivenessSession(
            max_frames=self.config.max_frames,
            required_blinks=self.config.required_blinks,
        )

    # ------------------------------------------------------------------
    # Lifecycle
    def is_complete(self) -> bool:
        s = self.session
        return s.stopped or s.frame_count >= s.max_frames

    def stop(self) -> None:
        if not self.session.stopped:
            self._logger.debug(
                "[Liveness] Stopped at frame %d (blinks=%d, movement=%s)",
                self.session.frame_count,
                self.session.blink_count,
                self.session.head_movement_detected,
            )
        self.session.stopped = True

    # ------------------------------------------------------------------
    # Frame processing
    def observe(self, sample: Optional[FrameSample]) -> Observation:
        """Fold one frame into the session. ``None`` means no detection."""
        if self.is_complete():
            raise LivenessSessionError("Liveness session already complete")

        s = self.session
        if sample is not None:
            if s.last_sequence_index is not None and sample.sequence_index <= s.last_sequence_index:
                raise LivenessSessionError(
                    f"Frame sequence must increase: {sample.sequence_index} after {s.last_sequence_index}"
                )
            s.last_sequence_index = sample.sequence_index
        s.frame_count += 1

        if sample is None or not sample.is_well_formed():
            if sample is not None:
                self._logger.debug("[Liveness] Frame %d: malformed landmarks, skipped", sample.sequence_index)
            return Observation(blink_detected=False)

        left_ear = sample.landmarks.left.aspect_ratio()
        right_ear = sample.landmarks.right.aspect_ratio()
        avg_ear = (left_ear + right_ear) / 2.0

        blink_counted = (
            avg_ear < self.config.ear_threshold
            and sample.sequence_index % self.config.blink_debounce_frames == 0
        )
        if blink_counted:
            s.blink_count += 1
            self._logger.debug(
                "[Liveness] Blink %d/%d at frame %d (EAR=%.3f)",
                s.blink_count, s.required_blinks, sample.sequence_index, avg_ear,
            )

        verdict, center = self._spoof.score_with_center(
            sample.box, sample.frame_width, sample.frame_height, s.last_center
        )
        moved = (
            s.last_center is not None
            and distance(center, s.last_center) > self.config.head_movement_threshold
        )
        if moved and not s.head_movement_detected:
            s.head_movement_detected = True
            self._logger.debug("[Liveness] Head movement at frame %d", sample.sequence_index)
        s.last_center = center

        s.scored_frames += 1
        s.spoof_score_total += verdict.confidence
        if verdict.is_spoofed:
            s.spoofed_frames += 1

        return Observation(
            blink_detected=blink_counted,
            face_detected=True,
            head_movement=moved,
            spoof=verdict,
        )

    # ------------------------------------------------------------------
    # Results
    def final_verdict(self) -> LivenessVerdict:
        if not self.is_complete():
            raise LivenessSessionError("Liveness session still collecting frames")
        s = self.session
        return LivenessVerdict(
            success=s.blink_count >= s.required_blinks and s.head_movement_detected,
            blinks=s.blink_count,
            head_movement=s.head_movement_detected,
            frames=s.frame_count,
            spoof_confidence=s.spoof_confidence,
            scored_frames=s.scored_frames,
            spoofed_frames=s.spoofed_frames,
        )


__all__ = [
    "LivenessConfig",
    "LivenessSession",
    "LivenessSessionError",
    "LivenessTracker",
    "LivenessVerdict",
    "Observation",
]
