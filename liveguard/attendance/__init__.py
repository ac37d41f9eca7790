"""Verification sessions and attendance recording."""

from .orchestrator import (
    LIVENESS_FAILED,
    RECOGNIZED,
    SPOOF_REJECTED,
    UNRECOGNIZED,
    SessionBusyError,
    SessionOrchestrator,
    SessionOutcome,
    SessionProgress,
)
from .recorder import AttendanceRecorder

__all__ = [
    "AttendanceRecorder",
    "LIVENESS_FAILED",
    "RECOGNIZED",
    "SPOOF_REJECTED",
    "UNRECOGNIZED",
    "SessionBusyError",
    "SessionOrchestrator",
    "SessionOutcome",
    "SessionProgress",
]
