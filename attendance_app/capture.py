from contextlib import contextmanager
from dataclasses import dataclass
from typing import Iterator, Optional

from attendance_app.schemas import AttendanceRecord, Matched, RecognitionOutcome
from attendance_app.state import AttendanceState
from attendance_app.utils.logger import get_logger

logger = get_logger("capture")


@dataclass(frozen=True)
class CaptureResult:
    outcome: RecognitionOutcome
    record: Optional[AttendanceRecord]
    message: str

    @property
    def success(self) -> bool:
        return self.record is not None


class CaptureController:
    """
    Drives recognition for the capture screen.

    At most one recognition call is outstanding; a capture requested while one
    is pending is ignored, not queued. Results that come back after the screen
    stopped being active are dropped.
    """

    def __init__(self, state: AttendanceState):
        self.state = state
        self.active = False
        self.last_result: Optional[CaptureResult] = None
        self._busy = False
        self._generation = 0

    @property
    def busy(self) -> bool:
        return self._busy

    @contextmanager
    def session(self) -> Iterator["CaptureController"]:
        """Marks the capture screen (and its camera) as active while the block runs."""
        self._generation += 1
        self.active = True
        try:
            yield self
        finally:
            self.active = False
            self._generation += 1

    def capture(self, image: str) -> Optional[CaptureResult]:
        if self._busy:
            logger.debug("Capture ignored: recognition already in progress")
            return None
        if not self.active:
            logger.debug("Capture ignored: capture screen is not active")
            return None

        generation = self._generation
        self._busy = True
        try:
            outcome = self.state.recognize(image)
        finally:
            self._busy = False

        if not self.active or generation != self._generation:
            logger.info(f"Discarding stale recognition result: {outcome!r}")
            return None

        record = self.state.apply_outcome(outcome)
        result = CaptureResult(outcome=outcome, record=record, message=self._describe(outcome, record))
        self.last_result = result
        return result

    def reset(self):
        self.last_result = None

    def _describe(self, outcome: RecognitionOutcome, record: Optional[AttendanceRecord]) -> str:
        if isinstance(outcome, Matched):
            if record is None:
                return "Match found but data error."
            return f"Identified: {record.student_name} ({round(outcome.confidence * 100)}%)"
        return outcome.reason or "No match found."
