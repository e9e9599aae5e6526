from datetime import datetime, timezone
from typing import List, Optional, Sequence

import pytest

from attendance_app.face_engine.recognizer import Recognizer
from attendance_app.schemas import RecognitionOutcome, Student, Unmatched
from attendance_app.state import AttendanceState
from attendance_app.storage import SqlSlotStore

PHOTO_1 = "data:image/jpeg;base64,aW1nMQ=="
PHOTO_2 = "data:image/jpeg;base64,aW1nMg=="
CAPTURED = "data:image/jpeg;base64,Y2FwdHVyZWQ="

FIXED_NOW = datetime(2026, 10, 19, 9, 30, tzinfo=timezone.utc)


class StubRecognizer(Recognizer):
    """Returns a preset outcome and remembers every call."""

    def __init__(self, outcome: Optional[RecognitionOutcome] = None):
        self.outcome = outcome or Unmatched(reason="no match")
        self.calls: List[tuple] = []

    def identify(self, image: str, roster: Sequence[Student]) -> RecognitionOutcome:
        self.calls.append((image, list(roster)))
        return self.outcome


class BrokenStore(SqlSlotStore):
    """Reads fine, every write fails (e.g. quota exceeded)."""

    def write(self, slot: str, payload: str) -> bool:
        return False


@pytest.fixture
def store():
    return SqlSlotStore("sqlite://")


@pytest.fixture
def recognizer():
    return StubRecognizer()


@pytest.fixture
def state(store, recognizer):
    s = AttendanceState(store, recognizer, clock=lambda: FIXED_NOW)
    s.load_initial_state()
    return s


@pytest.fixture
def ana(state):
    return state.add_student({"id": "s1", "name": "Ana", "roll_number": "CS01", "photo_url": PHOTO_1})
