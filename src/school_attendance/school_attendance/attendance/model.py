from __future__ import annotations

from dataclasses import dataclass
from datetime import date, time
from typing import Optional

from ..core.enums import AttendanceStatus, ScanResult
from ..students.model import SchoolClass, Student


@dataclass(frozen=True)
class AttendanceRecord:
    """Entitas domain: Catatan kehadiran, at most one per (student_id, att_date)."""

    attendance_id: int
    student_id: str
    att_date: date
    check_in: Optional[time]
    check_out: Optional[time]
    status: AttendanceStatus
    notes: Optional[str] = None


@dataclass(frozen=True)
class ScanOutcome:
    """Result of resolving one scan, ready for the scanner screen.

    time is the accepted check-in for ACCEPTED and the earlier, kept check-in
    for ALREADY_CHECKED_IN. conflict marks an ALREADY_CHECKED_IN that was only
    detected when the atomic write lost against a concurrent scan.
    """

    result: ScanResult
    student: Optional[Student] = None
    school_class: Optional[SchoolClass] = None
    time: Optional[time] = None
    status: Optional[AttendanceStatus] = None
    conflict: bool = False
