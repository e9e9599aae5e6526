import secrets
import string
import threading
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple, Union

from pydantic import ValidationError

from attendance_app.config import RECORDS_SLOT, STUDENTS_SLOT
from attendance_app.face_engine.recognizer import NO_STUDENTS_REASON, SERVICE_ERROR_REASON, Recognizer
from attendance_app.schemas import (
    AttendanceRecord,
    AttendanceStatus,
    Matched,
    RecognitionOutcome,
    RecordList,
    Student,
    StudentCreate,
    StudentList,
    Unmatched,
)
from attendance_app.storage import SlotStore
from attendance_app.utils.logger import get_logger

logger = get_logger("state")

ID_ALPHABET = string.ascii_lowercase + string.digits
ID_LENGTH = 9

Listener = Callable[[str], None]


class EnrollmentError(ValueError):
    """A student candidate is missing a required field or reuses an id."""


def generate_id(length: int = ID_LENGTH) -> str:
    return "".join(secrets.choice(ID_ALPHABET) for _ in range(length))


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AttendanceState:
    """
    Owns the roster and the attendance records.

    Every mutation is write-through: the in-memory collection changes, the
    affected slot is saved to the store, then listeners are notified. A failed
    save is kept in `persist_errors` and doesn't undo the change; the slot stays
    memory-only until its next successful save.

    Unknown ids passed to delete_student / log_attendance are silent no-ops.
    """

    def __init__(
        self,
        store: SlotStore,
        recognizer: Recognizer,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self.store = store
        self.recognizer = recognizer
        self.clock = clock
        self._students: List[Student] = []
        self._records: List[AttendanceRecord] = []  # most recent first
        self._listeners: List[Listener] = []
        self.persist_errors: Dict[str, Optional[str]] = {STUDENTS_SLOT: None, RECORDS_SLOT: None}
        self.loaded = False
        # Held from mutation through save and notify; one instance serves every session thread
        self._lock = threading.RLock()

    # -----------------------------
    # Read access
    # -----------------------------
    @property
    def students(self) -> Tuple[Student, ...]:
        with self._lock:
            return tuple(self._students)

    @property
    def records(self) -> Tuple[AttendanceRecord, ...]:
        with self._lock:
            return tuple(self._records)

    def get_student(self, student_id: str) -> Optional[Student]:
        with self._lock:
            for student in self._students:
                if student.id == student_id:
                    return student
        return None

    # -----------------------------
    # Listeners
    # -----------------------------
    def subscribe(self, listener: Listener):
        with self._lock:
            self._listeners.append(listener)

    def unsubscribe(self, listener: Listener):
        with self._lock:
            if listener in self._listeners:
                self._listeners.remove(listener)

    def _notify(self, slot: str):
        for listener in list(self._listeners):
            listener(slot)

    # -----------------------------
    # Hydration
    # -----------------------------
    def load_initial_state(self):
        """
        Reads both slots once. A missing or corrupt slot loads as an empty
        collection. Later calls are no-ops so a second caller can't replace
        changes made since the first load.
        """
        with self._lock:
            if self.loaded:
                logger.debug("State already loaded, skipping")
                return
            self._students = self._load_slot(STUDENTS_SLOT, StudentList)
            self._records = self._load_slot(RECORDS_SLOT, RecordList)
            self.loaded = True
            logger.info(f"Loaded {len(self._students)} students and {len(self._records)} records")

    def _load_slot(self, slot: str, adapter) -> list:
        raw = self.store.read(slot)
        if raw is None:
            return []
        try:
            return list(adapter.validate_json(raw))
        except ValidationError as e:
            logger.warning(f"Slot '{slot}' is corrupt, starting empty: {e.error_count()} error(s)")
            return []

    # -----------------------------
    # Persistence
    # -----------------------------
    def _persist(self, slot: str) -> bool:
        if slot == STUDENTS_SLOT:
            payload = StudentList.dump_json(self._students, by_alias=True)
        else:
            payload = RecordList.dump_json(self._records, by_alias=True)
        return self._saved(slot, self.store.write(slot, payload.decode("utf-8")))

    def _saved(self, slot: str, ok: bool) -> bool:
        if ok:
            if self.persist_errors.get(slot):
                logger.info(f"Slot '{slot}' saved again after earlier failure")
            self.persist_errors[slot] = None
        else:
            self.persist_errors[slot] = "Changes could not be saved; they are kept for this session only."
            logger.error(f"Slot '{slot}' not persisted, continuing in memory")
        return ok

    def _commit(self, slot: str):
        self._persist(slot)
        self._notify(slot)

    # -----------------------------
    # Mutations
    # -----------------------------
    def add_student(self, candidate: Union[StudentCreate, Mapping[str, Any]]) -> Student:
        if not isinstance(candidate, StudentCreate):
            try:
                candidate = StudentCreate.model_validate(candidate)
            except ValidationError as e:
                raise EnrollmentError("Please provide name, roll number, and a photo.") from e

        # StudentCreate doesn't validate on assignment
        required = (candidate.name, candidate.roll_number, candidate.photo_url)
        if not all(value and value.strip() for value in required):
            raise EnrollmentError("Please provide name, roll number, and a photo.")

        with self._lock:
            student_id = candidate.id
            if student_id:
                if self.get_student(student_id) is not None:
                    raise EnrollmentError(f"A student with id '{student_id}' already exists.")
            else:
                existing = {s.id for s in self._students}
                student_id = generate_id()
                while student_id in existing:
                    student_id = generate_id()

            student = Student(
                id=student_id,
                name=candidate.name,
                roll_number=candidate.roll_number,
                department=candidate.department,
                photo_url=candidate.photo_url,
            )
            self._students.append(student)
            logger.info(f"Enrolled student {student.id} ({student.name}, roll {student.roll_number})")
            self._commit(STUDENTS_SLOT)
        return student

    def delete_student(self, student_id: str) -> bool:
        with self._lock:
            remaining = [s for s in self._students if s.id != student_id]
            if len(remaining) == len(self._students):
                return False
            self._students = remaining
            logger.info(f"Deleted student {student_id}")
            self._commit(STUDENTS_SLOT)
        return True

    def log_attendance(self, student_id: str) -> Optional[AttendanceRecord]:
        with self._lock:
            student = self.get_student(student_id)
            if student is None:
                logger.debug(f"Ignoring attendance for unknown student {student_id}")
                return None

            record = AttendanceRecord(
                id=generate_id(),
                student_id=student.id,
                student_name=student.name,
                timestamp=self.clock(),
                status=AttendanceStatus.PRESENT,
            )
            self._records.insert(0, record)
            logger.info(f"Log: {student.id} | {student.name} | Status: {record.status.value}")
            self._commit(RECORDS_SLOT)
        return record

    def clear_records(self) -> int:
        """Drops every record and removes the records slot from the store."""
        with self._lock:
            count = len(self._records)
            self._records = []
            logger.info(f"Cleared {count} attendance records")
            self._saved(RECORDS_SLOT, self.store.clear(RECORDS_SLOT))
            self._notify(RECORDS_SLOT)
        return count

    # -----------------------------
    # Recognition
    # -----------------------------
    def recognize(self, image: str) -> RecognitionOutcome:
        """Asks the recognizer who is in `image`. Never raises."""
        roster = self.students
        if not roster:
            return Unmatched(reason=NO_STUDENTS_REASON)

        # identify() runs outside the lock
        try:
            outcome = self.recognizer.identify(image, roster)
        except Exception:
            logger.exception("Recognizer raised, treating as no match")
            return Unmatched(reason=SERVICE_ERROR_REASON)

        if isinstance(outcome, Matched) and self.get_student(outcome.student_id) is None:
            logger.warning(f"Recognizer matched unknown student id {outcome.student_id}")
            return Unmatched(reason="Match found but data error.")
        return outcome

    def apply_outcome(self, outcome: RecognitionOutcome) -> Optional[AttendanceRecord]:
        if isinstance(outcome, Matched):
            return self.log_attendance(outcome.student_id)
        return None
