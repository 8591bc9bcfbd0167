from __future__ import annotations

from datetime import date, datetime, time

import pytest

from src.school_attendance.school_attendance.attendance.service import AttendanceService
from src.school_attendance.school_attendance.core.enums import AttendanceStatus, ScanResult
from src.school_attendance.school_attendance.core.exceptions import ConcurrencyConflict, PersistenceError

DAY = date(2024, 3, 4)


def test_end_to_end_first_scan_accepted_second_rejected(attendance_service, attendance_repo):
    first = attendance_service.resolve_scan("1001", time(7, 5, 12), DAY)

    assert first.result == ScanResult.ACCEPTED
    assert first.status == AttendanceStatus.PRESENT
    assert first.time == time(7, 5, 12)
    assert first.student.full_name == "Budi Santoso"
    assert first.school_class.class_name == "7A"

    rec = attendance_repo.find_record("1001", DAY)
    assert rec.check_in == time(7, 5, 12)
    assert rec.check_out is None
    assert rec.status == AttendanceStatus.PRESENT
    assert rec.notes is None

    writes_before = attendance_repo.writes
    second = attendance_service.resolve_scan("1001", time(8, 0, 0), DAY)

    assert second.result == ScanResult.ALREADY_CHECKED_IN
    assert second.time == time(7, 5, 12)
    assert second.conflict is False
    assert attendance_repo.writes == writes_before
    assert len(attendance_repo.rows) == 1


def test_late_boundary_is_strict(attendance_service):
    on_time = attendance_service.resolve_scan("1001", time(7, 15, 0), DAY)
    late = attendance_service.resolve_scan("1002", time(7, 15, 1), DAY)

    assert on_time.status == AttendanceStatus.PRESENT
    assert late.status == AttendanceStatus.LATE


def test_unknown_student_performs_no_writes(attendance_service, attendance_repo):
    outcome = attendance_service.resolve_scan("no-such-id", time(7, 0), DAY)

    assert outcome.result == ScanResult.UNKNOWN_STUDENT
    assert outcome.student is None
    assert attendance_repo.writes == 0
    assert attendance_repo.rows == {}


def test_student_id_match_is_case_sensitive(attendance_service, students_repo):
    from src.school_attendance.school_attendance.students.model import Student

    students_repo.create(Student(student_id="A-77", full_name="Dodi", class_id=None))

    assert attendance_service.resolve_scan("a-77", time(7, 0), DAY).result == ScanResult.UNKNOWN_STUDENT
    assert attendance_service.resolve_scan("A-77", time(7, 0), DAY).result == ScanResult.ACCEPTED


def test_student_without_class_is_accepted(attendance_service, students_repo):
    from src.school_attendance.school_attendance.students.model import Student

    students_repo.create(Student(student_id="2001", full_name="Eka", class_id=None))
    outcome = attendance_service.resolve_scan("2001", time(7, 0), DAY)

    assert outcome.result == ScanResult.ACCEPTED
    assert outcome.school_class is None


def test_many_scans_keep_exactly_one_record_with_first_time(attendance_service, attendance_repo):
    times = [time(6, 55, 0), time(7, 20, 0), time(6, 50, 0), time(12, 0, 0)]
    for t in times:
        attendance_service.resolve_scan("1003", t, DAY)
        assert len([r for r in attendance_repo.rows.values() if r.student_id == "1003"]) == 1

    assert attendance_repo.find_record("1003", DAY).check_in == time(6, 55, 0)


def test_scan_accepts_datetime_and_truncates_microseconds(attendance_service, attendance_repo):
    outcome = attendance_service.resolve_scan("1001", datetime(2024, 3, 4, 7, 5, 12, 987654), DAY)

    assert outcome.time == time(7, 5, 12)
    assert attendance_repo.find_record("1001", DAY).check_in == time(7, 5, 12)


def test_scan_overrides_prior_sick_record_without_checkin(attendance_service, attendance_repo):
    rid = attendance_repo.insert_record(
        student_id="1001", att_date=DAY, check_in=None, status=AttendanceStatus.SICK, notes="Surat dokter"
    )

    outcome = attendance_service.resolve_scan("1001", time(7, 30, 0), DAY)

    assert outcome.result == ScanResult.ACCEPTED
    assert outcome.status == AttendanceStatus.LATE
    rec = attendance_repo.get_by_id(rid)
    assert rec.check_in == time(7, 30, 0)
    assert rec.status == AttendanceStatus.LATE
    assert rec.notes is None
    assert len(attendance_repo.rows) == 1


def test_scans_on_different_days_are_independent(attendance_service, attendance_repo):
    attendance_service.resolve_scan("1001", time(7, 0), DAY)
    outcome = attendance_service.resolve_scan("1001", time(7, 30), date(2024, 3, 5))

    assert outcome.result == ScanResult.ACCEPTED
    assert len(attendance_repo.rows) == 2


def test_late_threshold_comes_from_settings(attendance_service, settings_service):
    settings_service.update_times(entry_time="06:30", late_time="06:45", exit_time="14:00")

    outcome = attendance_service.resolve_scan("1001", time(7, 0), DAY)

    assert outcome.status == AttendanceStatus.LATE


class RacingInsertAttendance:
    """Simulates a competing device inserting between our read and our insert."""

    def __init__(self, inner, competitor_time: time):
        self._inner = inner
        self._competitor_time = competitor_time
        self._raced = False

    def __getattr__(self, name):
        return getattr(self._inner, name)

    def insert_checkin(self, *, student_id, att_date, check_in, status):
        if not self._raced:
            self._raced = True
            self._inner.insert_checkin(
                student_id=student_id, att_date=att_date, check_in=self._competitor_time, status=AttendanceStatus.PRESENT
            )
        return self._inner.insert_checkin(student_id=student_id, att_date=att_date, check_in=check_in, status=status)


class RacingClaimAttendance:
    """Simulates a competing scan claiming a manual row first."""

    def __init__(self, inner, competitor_time: time):
        self._inner = inner
        self._competitor_time = competitor_time
        self._raced = False

    def __getattr__(self, name):
        return getattr(self._inner, name)

    def claim_checkin(self, *, attendance_id, check_in, status):
        if not self._raced:
            self._raced = True
            self._inner.claim_checkin(
                attendance_id=attendance_id, check_in=self._competitor_time, status=AttendanceStatus.PRESENT
            )
        return self._inner.claim_checkin(attendance_id=attendance_id, check_in=check_in, status=status)


def test_concurrent_insert_keeps_first_writer(attendance_repo, students_repo, classes_repo, settings_service):
    racing = RacingInsertAttendance(attendance_repo, competitor_time=time(7, 1, 0))
    svc = AttendanceService(racing, students_repo, classes_repo, settings_service)

    outcome = svc.resolve_scan("1001", time(7, 1, 1), DAY)

    assert outcome.result == ScanResult.ALREADY_CHECKED_IN
    assert outcome.conflict is True
    assert outcome.time == time(7, 1, 0)
    assert len(attendance_repo.rows) == 1
    assert attendance_repo.find_record("1001", DAY).check_in == time(7, 1, 0)


def test_concurrent_claim_keeps_first_writer(attendance_repo, students_repo, classes_repo, settings_service):
    attendance_repo.insert_record(student_id="1001", att_date=DAY, check_in=None, status=AttendanceStatus.EXCUSED)
    racing = RacingClaimAttendance(attendance_repo, competitor_time=time(7, 2, 0))
    svc = AttendanceService(racing, students_repo, classes_repo, settings_service)

    outcome = svc.resolve_scan("1001", time(7, 2, 30), DAY)

    assert outcome.result == ScanResult.ALREADY_CHECKED_IN
    assert outcome.conflict is True
    assert attendance_repo.find_record("1001", DAY).check_in == time(7, 2, 0)


class AlwaysLosingAttendance:
    """Every write collides, yet the re-read never shows a check-in."""

    def __init__(self, inner):
        self._inner = inner

    def __getattr__(self, name):
        return getattr(self._inner, name)

    def find_record(self, student_id, att_date):
        return None

    def insert_checkin(self, **kwargs):
        from src.school_attendance.school_attendance.core.exceptions import DuplicateRecordError

        raise DuplicateRecordError("Duplicate entry")


def test_unresolvable_conflict_raises(attendance_repo, students_repo, classes_repo, settings_service):
    svc = AttendanceService(AlwaysLosingAttendance(attendance_repo), students_repo, classes_repo, settings_service)

    with pytest.raises(ConcurrencyConflict):
        svc.resolve_scan("1001", time(7, 0), DAY)


class FailingAttendance:
    def __init__(self, inner):
        self._inner = inner

    def __getattr__(self, name):
        return getattr(self._inner, name)

    def insert_checkin(self, **kwargs):
        raise PersistenceError("Lost connection to MySQL server during query")


def test_persistence_failure_is_surfaced(attendance_repo, students_repo, classes_repo, settings_service):
    svc = AttendanceService(FailingAttendance(attendance_repo), students_repo, classes_repo, settings_service)

    with pytest.raises(PersistenceError):
        svc.resolve_scan("1001", time(7, 0), DAY)

    assert attendance_repo.rows == {}
