from __future__ import annotations

from dataclasses import dataclass
from datetime import time
from typing import Optional

from ..core.enums import AttendanceStatus
from ..students.model import Student


@dataclass(frozen=True)
class EffectiveRecord:
    """What the daily report shows for one student.

    synthesized is True when no row exists and the student is shown as absent.
    """

    status: AttendanceStatus
    check_in: Optional[time]
    check_out: Optional[time]
    notes: Optional[str]
    attendance_id: Optional[int] = None
    synthesized: bool = False


@dataclass(frozen=True)
class DailyReportRow:
    student: Student
    class_name: str
    record: EffectiveRecord


@dataclass(frozen=True)
class StatusCounts:
    present: int = 0
    late: int = 0
    sick: int = 0
    excused: int = 0
    # Only explicitly persisted ABSENT rows; never derived from a calendar.
    absent: int = 0


@dataclass(frozen=True)
class MonthlySummaryRow:
    student: Student
    class_name: str
    counts: StatusCounts


@dataclass(frozen=True)
class DashboardCounts:
    total_students: int
    present: int
    late: int
    sick: int
    excused: int
    absent: int
