"""Attendance recording and CSV export for verification outcomes."""
from __future__ import annotations

import csv
import io
import logging
import math
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional

from .orchestrator import RECOGNIZED, SessionOutcome

CSV_HEADER = ["Name", "Date", "Time"]


class AttendanceRecorder:
    """Outcome consumer that stores every verification attempt."""

    def __init__(
        self,
        database: Any,
        *,
        now: Callable[[], datetime] = datetime.now,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self._db = database
        self._now = now
        self._logger = logger or logging.getLogger(__name__)

    def __call__(self, outcome: SessionOutcome) -> None:
        self.record(outcome)

    def record(self, outcome: SessionOutcome) -> int:
        distance = outcome.distance
        if distance is not None and math.isinf(distance):
            distance = None
        record_id = self._db.add_attendance(
            outcome.outcome,
            student_name=outcome.label,
            distance=distance,
            blinks=outcome.blinks,
            head_movement=outcome.head_movement,
            reason=outcome.reason,
            created_at=self._now(),
        )
        if outcome.outcome == RECOGNIZED:
            self._logger.info("[Attendance] Marked %s (distance=%.4f)", outcome.label, outcome.distance)
        else:
            self._logger.info("[Attendance] Recorded %s attempt", outcome.outcome)
        return record_id

    def list_records(self, outcome: Optional[str] = None, limit: Optional[int] = None) -> List[Dict[str, Any]]:
        return self._db.get_attendance(outcome=outcome, limit=limit)

    def export_csv(self) -> str:
        """Recognized attendance as ``Name,Date,Time`` rows, newest first."""
        buffer = io.StringIO()
        writer = csv.writer(buffer, lineterminator="\n")
        writer.writerow(CSV_HEADER)
        for row in self._db.get_attendance(outcome=RECOGNIZED):
            created = datetime.fromisoformat(row["created_at"])
            writer.writerow([
                row["student_name"],
                created.strftime("%Y-%m-%d"),
                created.strftime("%H:%M:%S"),
            ])
        return buffer.getvalue()


__all__ = ["AttendanceRecorder", "CSV_HEADER"]
