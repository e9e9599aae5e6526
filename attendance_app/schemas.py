from pydantic import BaseModel, ConfigDict, Field, TypeAdapter
from pydantic.alias_generators import to_camel
from datetime import datetime
from enum import Enum
from typing import Collection, List, Optional, Union

# Stored payloads use camelCase keys (rollNumber, photoUrl, studentId, ...)
# while Python code uses snake_case attributes.


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# --- Student Schemas ---

class StudentCreate(CamelModel):
    """Enrollment candidate (input validation). Whitespace-only values count as empty."""
    model_config = ConfigDict(str_strip_whitespace=True)

    id: Optional[str] = Field(None, description="Leave empty to generate one.")
    name: str = Field(..., min_length=1, examples=["Ana Souza"])
    roll_number: str = Field(..., min_length=1, examples=["CS01"])
    department: str = Field("", examples=["Computer Science"])
    photo_url: str = Field(..., min_length=1, description="Reference photo as a data URL.")


class Student(CamelModel):
    """An enrolled student. Immutable once created."""
    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    roll_number: str = Field(..., min_length=1)
    department: str = ""
    photo_url: str = Field(..., min_length=1)

    @property
    def department_label(self) -> str:
        return self.department or "General"


# --- Attendance Schemas ---

class AttendanceStatus(str, Enum):
    PRESENT = "PRESENT"
    LATE = "LATE"  # reserved, nothing produces it yet


class AttendanceRecord(CamelModel):
    """One logged attendance event. Keeps a copy of the student's name at log time."""
    model_config = ConfigDict(frozen=True)

    id: str
    student_id: str
    student_name: str
    timestamp: datetime
    status: AttendanceStatus = AttendanceStatus.PRESENT


StudentList = TypeAdapter(List[Student])
RecordList = TypeAdapter(List[AttendanceRecord])


# --- Recognition Schemas ---

class Matched(BaseModel):
    model_config = ConfigDict(frozen=True)

    student_id: str
    confidence: float = Field(..., ge=0.0, le=1.0)


class Unmatched(BaseModel):
    model_config = ConfigDict(frozen=True)

    reason: str


RecognitionOutcome = Union[Matched, Unmatched]


class RecognitionResponse(CamelModel):
    """Structured answer expected from the recognition service. Nothing else is accepted."""
    model_config = ConfigDict(extra="forbid")

    student_id: Optional[str]
    confidence: float = Field(..., ge=0.0, le=1.0)
    reason: str

    def to_outcome(self, roster_ids: Collection[str]) -> RecognitionOutcome:
        if not self.student_id:
            return Unmatched(reason=self.reason or "No match found.")
        if self.student_id not in roster_ids:
            return Unmatched(reason=f"Match returned unknown student id '{self.student_id}'.")
        return Matched(student_id=self.student_id, confidence=self.confidence)
