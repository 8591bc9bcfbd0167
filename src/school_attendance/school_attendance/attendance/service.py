from __future__ import annotations

from datetime import date, datetime, time
from typing import Optional, Sequence

from ..common.datetime_utils import month_bounds, parse_iso_date, parse_time_of_day, parse_year_month
from ..common.validators import optional_text, require_non_empty
from ..core.enums import AttendanceStatus, ScanResult
from ..core.exceptions import ConcurrencyConflict, DuplicateRecordError, UnknownStudentError, ValidationError
from ..settings.service import SettingsService
from ..students.repository import ClassRepository, StudentRepository
from .factory import CheckinStrategyFactory
from .model import AttendanceRecord, ScanOutcome
from .repository import AttendanceRepository

# One retry covers the case where a competing row vanished (deleted) between
# our failed write and the re-read.
_SCAN_WRITE_ATTEMPTS = 2


def _as_time_of_day(value: datetime | time) -> time:
    if isinstance(value, datetime):
        value = value.time()
    return value.replace(microsecond=0, tzinfo=None)


def _parse_status(value: str | AttendanceStatus) -> AttendanceStatus:
    try:
        return AttendanceStatus(value)
    except ValueError:
        raise ValidationError("Status kehadiran tidak valid")


class AttendanceService:
    def __init__(
        self,
        attendance: AttendanceRepository,
        students: StudentRepository,
        classes: ClassRepository,
        settings: SettingsService,
        *,
        strategy_factory: CheckinStrategyFactory | None = None,
    ):
        self._attendance = attendance
        self._students = students
        self._classes = classes
        self._settings = settings
        self._factory = strategy_factory or CheckinStrategyFactory()

    def resolve_scan(self, student_id: str, scan_time: datetime | time, today: date) -> ScanOutcome:
        """Turn one scan into at most one check-in for (student, today).

        The first accepted scan of the day wins; later scans report the kept
        check-in time and never modify the record. A scan replaces a manual
        entry (sick, excused) that has no check-in yet.

        Raises PersistenceError when the ledger cannot be read or written; in
        that case nothing is guaranteed to be saved.
        """

        student = self._students.get_by_id(student_id)
        if not student:
            return ScanOutcome(result=ScanResult.UNKNOWN_STUDENT)

        school_class = self._classes.get_by_id(student.class_id) if student.class_id else None
        t = _as_time_of_day(scan_time)

        late_time = self._settings.late_time()
        strategy = self._factory.for_checkin(scan_time=t, late_time=late_time)
        decision = strategy.decide_checkin(scan_time=t, late_time=late_time)

        for attempt in range(_SCAN_WRITE_ATTEMPTS):
            existing = self._attendance.find_record(student.student_id, today)

            if existing and existing.check_in is not None:
                return ScanOutcome(
                    result=ScanResult.ALREADY_CHECKED_IN,
                    student=student,
                    school_class=school_class,
                    time=existing.check_in,
                    status=existing.status,
                    conflict=attempt > 0,
                )

            if existing is None:
                try:
                    self._attendance.insert_checkin(
                        student_id=student.student_id,
                        att_date=today,
                        check_in=t,
                        status=decision.status,
                    )
                except DuplicateRecordError:
                    continue
            elif not self._attendance.claim_checkin(
                attendance_id=existing.attendance_id,
                check_in=t,
                status=decision.status,
            ):
                continue

            return ScanOutcome(
                result=ScanResult.ACCEPTED,
                student=student,
                school_class=school_class,
                time=t,
                status=decision.status,
            )

        raise ConcurrencyConflict("Data kehadiran sedang diubah oleh proses lain, silakan scan ulang")

    def upsert_manual_record(
        self,
        *,
        student_id: str,
        att_date: date | str,
        status: str | AttendanceStatus,
        check_in: Optional[str | time] = None,
        notes: Optional[str] = None,
        record_id: Optional[int] = None,
    ) -> AttendanceRecord:
        """Create or edit a record by hand; status is taken as given.

        With record_id the exact row is edited. Without it, an existing row for
        (student, date) is edited in place, otherwise a new one is inserted.
        """

        student_id = require_non_empty(student_id, "Siswa")
        if not att_date:
            raise ValidationError("Tanggal wajib diisi")
        if not status:
            raise ValidationError("Status wajib diisi")
        day = att_date if isinstance(att_date, date) else parse_iso_date(att_date)
        st = _parse_status(status)
        t = parse_time_of_day(check_in) if check_in else None
        notes = optional_text(notes)

        student = self._students.get_by_id(student_id)
        if not student:
            raise UnknownStudentError("Siswa tidak terdaftar")

        if record_id is not None:
            target = self._attendance.get_by_id(record_id)
            if not target or target.student_id != student.student_id:
                raise ValidationError("Data kehadiran tidak ditemukan")
        else:
            target = self._attendance.find_record(student.student_id, day)

        try:
            if target:
                self._attendance.update_record(
                    attendance_id=target.attendance_id, att_date=day, check_in=t, status=st, notes=notes
                )
                attendance_id = target.attendance_id
            else:
                attendance_id = self._attendance.insert_record(
                    student_id=student.student_id, att_date=day, check_in=t, status=st, notes=notes
                )
        except DuplicateRecordError:
            raise ValidationError("Siswa sudah memiliki data kehadiran pada tanggal tersebut")

        saved = self._attendance.get_by_id(attendance_id)
        if not saved:
            raise ValidationError("Data kehadiran tidak ditemukan")
        return saved

    def delete_record(self, attendance_id: int) -> None:
        if not self._attendance.delete_record(attendance_id):
            raise ValidationError("Data kehadiran tidak ditemukan")

    def get_record(self, attendance_id: int) -> AttendanceRecord:
        record = self._attendance.get_by_id(attendance_id)
        if not record:
            raise ValidationError("Data kehadiran tidak ditemukan")
        return record

    def list_student_month_records(self, student_id: str, year_month: str) -> Sequence[AttendanceRecord]:
        student = self._students.get_by_id(student_id)
        if not student:
            raise UnknownStudentError("Siswa tidak terdaftar")
        start, end = month_bounds(*parse_year_month(year_month))
        records = self._attendance.list_for_student(student.student_id, start_date=start, end_date=end)
        return sorted(records, key=lambda r: r.att_date)
