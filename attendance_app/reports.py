import csv
import io
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Iterable, List, Sequence, Tuple

from attendance_app.schemas import AttendanceRecord, Student

CSV_HEADER = ["id", "student_id", "student_name", "date", "time", "status"]


@dataclass(frozen=True)
class DashboardStats:
    total_students: int
    present_today: int
    unique_present_today: int
    attendance_rate: float  # 0..1


def local_date(ts: datetime) -> date:
    # Stored timestamps are UTC; "today" means the operator's local day
    return ts.astimezone().date() if ts.tzinfo else ts.date()


def dashboard_stats(students: Sequence[Student], records: Iterable[AttendanceRecord], now: datetime) -> DashboardStats:
    today = local_date(now)
    todays = [r for r in records if local_date(r.timestamp) == today]
    roster_ids = {s.id for s in students}
    unique_present = {r.student_id for r in todays if r.student_id in roster_ids}

    rate = len(unique_present) / len(students) if students else 0.0
    return DashboardStats(
        total_students=len(students),
        present_today=len(todays),
        unique_present_today=len(unique_present),
        attendance_rate=rate,
    )


def recent_records(records: Sequence[AttendanceRecord], limit: int = 5) -> List[AttendanceRecord]:
    return list(records[:limit])


def weekly_trend(records: Iterable[AttendanceRecord], today: date, days: int = 7) -> List[Tuple[date, int]]:
    """Number of records per local day, oldest first, ending with `today`."""
    counts = {today - timedelta(days=offset): 0 for offset in range(days)}
    for record in records:
        day = local_date(record.timestamp)
        if day in counts:
            counts[day] += 1
    return sorted(counts.items())


def search_students(students: Sequence[Student], query: str) -> List[Student]:
    query = (query or "").strip().lower()
    if not query:
        return list(students)
    return [
        s for s in students
        if query in s.name.lower() or query in s.roll_number.lower() or query in s.department.lower()
    ]


def search_records(records: Sequence[AttendanceRecord], query: str) -> List[AttendanceRecord]:
    query = (query or "").strip().lower()
    if not query:
        return list(records)
    return [r for r in records if query in r.student_name.lower() or query in r.student_id.lower()]


def records_to_csv(records: Iterable[AttendanceRecord]) -> str:
    buffer = io.StringIO()
    writer = csv.writer(buffer)
    writer.writerow(CSV_HEADER)
    for r in records:
        ts = r.timestamp.astimezone() if r.timestamp.tzinfo else r.timestamp
        writer.writerow([
            r.id,
            r.student_id,
            r.student_name,
            ts.strftime("%Y-%m-%d"),
            ts.strftime("%H:%M:%S"),
            r.status.value,
        ])
    return buffer.getvalue()
