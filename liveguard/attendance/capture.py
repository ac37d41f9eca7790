"""Run a verification session straight from a local camera."""
from __future__ import annotations

import logging
from typing import Optional

from liveguard import config
from liveguard.vision.frame_source import CameraFrameSource, CameraManager, Detector

from .orchestrator import EmbeddingExtractor, SessionOrchestrator, SessionOutcome

logger = logging.getLogger(__name__)


def run_camera_session(
    orchestrator: SessionOrchestrator,
    detector: Detector,
    extractor: Optional[EmbeddingExtractor] = None,
    *,
    camera: Optional[CameraManager] = None,
) -> SessionOutcome:
    """Feed camera frames through ``detector`` into one session.

    The camera is released when the session ends, whatever the outcome.
    """
    camera = camera or CameraManager(config.build_camera_config())
    with CameraFrameSource(camera, detector) as source:
        outcome = orchestrator.run(source, extractor=extractor)
    logger.info("[Camera] Session finished after %d frames: %s", camera.frames_read, outcome.outcome)
    return outcome


__all__ = ["run_camera_session"]
