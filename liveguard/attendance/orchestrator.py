"""Verification session: liveness over a frame stream, then identity matching."""
from __future__ import annotations

import logging
import math
import threading
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Generator, Iterable, Optional, Sequence

from liveguard.inference.matcher import GalleryEntry, IdentityMatcher
from liveguard.logging_config import LivenessAuditLogger
from liveguard.vision.liveness import LivenessConfig, LivenessTracker, LivenessVerdict
from liveguard.vision.samples import FrameSample
from liveguard.vision.spoof import SpoofHeuristic

SPOOF_REJECTED = "spoof_rejected"
LIVENESS_FAILED = "liveness_failed"
RECOGNIZED = "recognized"
UNRECOGNIZED = "unrecognized"

EmbeddingExtractor = Callable[[FrameSample], Optional[Any]]
GalleryProvider = Callable[[], Sequence[GalleryEntry]]
OutcomeConsumer = Callable[["SessionOutcome"], None]


def _finite(value: Optional[float]) -> Optional[float]:
    if value is None or math.isinf(value):
        return None
    return float(value)


class SessionBusyError(RuntimeError):
    """Raised when a session is started while another one is running."""


@dataclass(frozen=True)
class SessionOutcome:
    outcome: str
    label: Optional[str] = None
    distance: Optional[float] = None
    blinks: Optional[int] = None
    head_movement: Optional[bool] = None
    spoof_confidence: Optional[float] = None
    reason: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"outcome": self.outcome}
        if self.outcome == SPOOF_REJECTED:
            payload["spoofConfidence"] = self.spoof_confidence
        elif self.outcome == LIVENESS_FAILED:
            payload.update(blinks=self.blinks, headMovement=self.head_movement, reason=self.reason)
        elif self.outcome == RECOGNIZED:
            payload.update(label=self.label, distance=_finite(self.distance))
        else:
            payload["distance"] = _finite(self.distance)
        return payload


@dataclass(frozen=True)
class SessionProgress:
    frames: int
    blinks: int
    head_movement: bool
    blink_detected: bool
    face_detected: bool
    spoof_confidence: float


class SessionOrchestrator:
    """Runs one verification attempt at a time for a single camera stream.

    ``iter_session`` is a generator that yields a :class:`SessionProgress`
    after every frame and returns the :class:`SessionOutcome`; callers that
    do not need per-frame control use :meth:`run`. ``stop`` may be called
    from another thread and is honoured before the next frame is pulled.
    """

    def __init__(
        self,
        *,
        gallery_provider: GalleryProvider,
        extractor: Optional[EmbeddingExtractor] = None,
        matcher: Optional[IdentityMatcher] = None,
        liveness_config: Optional[LivenessConfig] = None,
        spoof_heuristic: Optional[SpoofHeuristic] = None,
        spoof_frame_ratio: float = 0.5,
        max_seconds: Optional[float] = None,
        consumer: Optional[OutcomeConsumer] = None,
        audit: Optional[LivenessAuditLogger] = None,
        clock: Callable[[], float] = time.monotonic,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self._extractor = extractor
        self._gallery_provider = gallery_provider
        self._matcher = matcher or IdentityMatcher()
        self._liveness_config = liveness_config or LivenessConfig()
        self._spoof = spoof_heuristic or SpoofHeuristic()
        self._spoof_frame_ratio = spoof_frame_ratio
        self._max_seconds = max_seconds if max_seconds and max_seconds > 0 else None
        self._consumer = consumer
        self._audit = audit or LivenessAuditLogger()
        self._clock = clock
        self._logger = logger or logging.getLogger(__name__)

        self._lock = threading.Lock()
        self._active = False
        self._stop_event = threading.Event()

    # ------------------------------------------------------------------
    # Control
    def is_active(self) -> bool:
        with self._lock:
            return self._active

    def stop(self) -> None:
        """Request cancellation of the running session."""
        with self._lock:
            if self._active:
                self._stop_event.set()

    def run(
        self,
        frames: Iterable[Optional[FrameSample]],
        extractor: Optional[EmbeddingExtractor] = None,
    ) -> SessionOutcome:
        session = self.iter_session(frames, extractor)
        while True:
            try:
                next(session)
            except StopIteration as done:
                return done.value

    # ------------------------------------------------------------------
    # Session loop
    def iter_session(
        self,
        frames: Iterable[Optional[FrameSample]],
        extractor: Optional[EmbeddingExtractor] = None,
    ) -> Generator[SessionProgress, None, SessionOutcome]:
        with self._lock:
            if self._active:
                raise SessionBusyError("A verification session is already running")
            self._active = True
            self._stop_event.clear()

        try:
            gallery = tuple(self._gallery_provider())
            tracker = LivenessTracker(self._liveness_config, spoof_heuristic=self._spoof, logger=self._logger)
            started = self._clock()
            last_face: Optional[FrameSample] = None
            end_reason: Optional[str] = None
            source = iter(frames)

            while not tracker.is_complete():
                if self._stop_event.is_set():
                    end_reason = "cancelled"
                    tracker.stop()
                    break
                if self._max_seconds is not None and self._clock() - started > self._max_seconds:
                    end_reason = "timeout"
                    tracker.stop()
                    break
                try:
                    sample = next(source)
                except StopIteration:
                    end_reason = "source_exhausted"
                    tracker.stop()
                    break

                observation = tracker.observe(sample)
                if observation.face_detected:
                    last_face = sample
                session = tracker.session
                yield SessionProgress(
                    frames=session.frame_count,
                    blinks=session.blink_count,
                    head_movement=session.head_movement_detected,
                    blink_detected=observation.blink_detected,
                    face_detected=observation.face_detected,
                    spoof_confidence=session.spoof_confidence,
                )

            outcome = self._decide(
                tracker.final_verdict(), end_reason, last_face, gallery, extractor or self._extractor
            )
        finally:
            with self._lock:
                self._active = False
                self._stop_event.clear()

        self._publish(outcome)
        return outcome

    def _decide(
        self,
        verdict: LivenessVerdict,
        end_reason: Optional[str],
        last_face: Optional[FrameSample],
        gallery: Sequence[GalleryEntry],
        extractor: Optional[EmbeddingExtractor],
    ) -> SessionOutcome:
        if verdict.scored_frames and verdict.spoofed_frames / verdict.scored_frames > self._spoof_frame_ratio:
            self._audit.log_spoof_rejected(verdict.spoof_confidence, verdict.spoofed_frames, verdict.scored_frames)
            return SessionOutcome(outcome=SPOOF_REJECTED, spoof_confidence=verdict.spoof_confidence)

        if not verdict.success or end_reason == "source_exhausted":
            return self._liveness_failed(verdict, end_reason or "insufficient_liveness")

        embedding = self._extract(extractor, last_face)
        if embedding is None:
            return self._liveness_failed(verdict, "no_embedding")

        result = self._matcher.match(embedding, gallery)
        if result.is_known:
            self._audit.log_recognized(result.label, result.distance)
            return SessionOutcome(outcome=RECOGNIZED, label=result.label, distance=result.distance)
        self._audit.log_unrecognized(result.distance)
        return SessionOutcome(outcome=UNRECOGNIZED, distance=result.distance)

    def _liveness_failed(self, verdict: LivenessVerdict, reason: str) -> SessionOutcome:
        self._audit.log_liveness_failed(reason, verdict.blinks, verdict.head_movement)
        return SessionOutcome(
            outcome=LIVENESS_FAILED,
            blinks=verdict.blinks,
            head_movement=verdict.head_movement,
            reason=reason,
        )

    def _extract(
        self, extractor: Optional[EmbeddingExtractor], sample: Optional[FrameSample]
    ) -> Optional[Any]:
        if extractor is None or sample is None:
            return None
        try:
            return extractor(sample)
        except Exception:
            self._logger.exception("[Session] Embedding extraction failed at frame %d", sample.sequence_index)
            return None

    def _publish(self, outcome: SessionOutcome) -> None:
        if self._consumer is None:
            return
        try:
            self._consumer(outcome)
        except Exception:
            self._logger.exception("[Session] Outcome consumer failed for %s", outcome.outcome)


__all__ = [
    "LIVENESS_FAILED",
    "RECOGNIZED",
    "SPOOF_REJECTED",
    "UNRECOGNIZED",
    "SessionBusyError",
    "SessionOrchestrator",
    "SessionOutcome",
    "SessionProgress",
]
