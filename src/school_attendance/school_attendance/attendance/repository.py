from __future__ import annotations

from datetime import date, time
from typing import Optional, Protocol, Sequence

from ..core.enums import AttendanceStatus
from .model import AttendanceRecord


class AttendanceRepository(Protocol):
    """Ledger kehadiran.

    Implementations must enforce uniqueness of (student_id, att_date) in the
    store itself and raise DuplicateRecordError when an insert collides.
    """

    def find_record(self, student_id: str, att_date: date) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def get_by_id(self, attendance_id: int) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def insert_checkin(self, *, student_id: str, att_date: date, check_in: time, status: AttendanceStatus) -> int:
        raise NotImplementedError

    def claim_checkin(self, *, attendance_id: int, check_in: time, status: AttendanceStatus) -> bool:
        """Overwrite a row with a scan, only while its check_in is still empty.

        Returns False when another writer set check_in first.
        """

        raise NotImplementedError

    def insert_record(
        self,
        *,
        student_id: str,
        att_date: date,
        check_in: Optional[time],
        status: AttendanceStatus,
        notes: Optional[str] = None,
    ) -> int:
        raise NotImplementedError

    def update_record(
        self,
        *,
        attendance_id: int,
        att_date: date,
        check_in: Optional[time],
        status: AttendanceStatus,
        notes: Optional[str] = None,
    ) -> bool:
        raise NotImplementedError

    def delete_record(self, attendance_id: int) -> bool:
        raise NotImplementedError

    def query_records(
        self,
        *,
        start_date: date,
        end_date: date,
        class_id: Optional[str] = None,
    ) -> Sequence[AttendanceRecord]:
        """Records with start_date <= att_date <= end_date."""

        raise NotImplementedError

    def list_for_student(self, student_id: str, *, start_date: date, end_date: date) -> Sequence[AttendanceRecord]:
        raise NotImplementedError
