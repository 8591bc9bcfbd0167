from __future__ import annotations

from dataclasses import replace
from datetime import date, datetime, time
from typing import Optional

import pytest

from src.school_attendance.school_attendance.academic_years.model import AcademicYear
from src.school_attendance.school_attendance.attendance.model import AttendanceRecord
from src.school_attendance.school_attendance.attendance.service import AttendanceService
from src.school_attendance.school_attendance.core.enums import AttendanceStatus, Role
from src.school_attendance.school_attendance.core.exceptions import DuplicateRecordError
from src.school_attendance.school_attendance.reports.service import ReportService
from src.school_attendance.school_attendance.settings.model import AppSettings
from src.school_attendance.school_attendance.settings.service import SettingsService
from src.school_attendance.school_attendance.students.model import SchoolClass, Student
from src.school_attendance.school_attendance.users.model import User


class InMemoryStudents:
    def __init__(self, students=()):
        self._by_id: dict[str, Student] = {s.student_id: s for s in students}

    def get_by_id(self, student_id: str) -> Optional[Student]:
        return self._by_id.get(student_id)

    def list_students(self, *, class_id=None):
        items = [s for s in self._by_id.values() if class_id is None or s.class_id == class_id]
        return sorted(items, key=lambda s: (s.full_name, s.student_id))

    def create(self, student: Student) -> None:
        if student.student_id in self._by_id:
            raise DuplicateRecordError("Duplicate entry")
        self._by_id[student.student_id] = student

    def update(self, student: Student) -> bool:
        if student.student_id not in self._by_id:
            return False
        self._by_id[student.student_id] = student
        return True

    def upsert_many(self, students) -> int:
        for s in students:
            current = self._by_id.get(s.student_id)
            self._by_id[s.student_id] = replace(s, photo_url=current.photo_url) if current else s
        return len(students)

    def set_photo_url(self, student_id: str, photo_url) -> bool:
        if student_id not in self._by_id:
            return False
        self._by_id[student_id] = replace(self._by_id[student_id], photo_url=photo_url)
        return True

    def delete_by_id(self, student_id: str) -> bool:
        return self._by_id.pop(student_id, None) is not None

    def detach_class(self, class_id: str) -> None:
        for sid, s in list(self._by_id.items()):
            if s.class_id == class_id:
                self._by_id[sid] = replace(s, class_id=None)


class InMemoryClasses:
    def __init__(self, classes=(), students: Optional[InMemoryStudents] = None):
        self._by_id: dict[str, SchoolClass] = {c.class_id: c for c in classes}
        self._students = students

    def list_all(self):
        return sorted(self._by_id.values(), key=lambda c: c.class_name)

    def get_by_id(self, class_id: str) -> Optional[SchoolClass]:
        return self._by_id.get(class_id)

    def create(self, *, class_id: str, class_name: str) -> None:
        if class_id in self._by_id:
            raise DuplicateRecordError("Duplicate entry")
        self._by_id[class_id] = SchoolClass(class_id=class_id, class_name=class_name)

    def delete_and_detach(self, class_id: str) -> bool:
        if self._students:
            self._students.detach_class(class_id)
        return self._by_id.pop(class_id, None) is not None


class InMemoryAttendance:
    """Ledger fake that enforces UNIQUE(student_id, att_date) like the MySQL table."""

    def __init__(self, students: Optional[InMemoryStudents] = None):
        self.rows: dict[int, AttendanceRecord] = {}
        self.writes = 0
        self._next_id = 1
        self._students = students

    def _key_taken(self, student_id: str, att_date: date, *, ignore_id: Optional[int] = None) -> bool:
        return any(
            r.student_id == student_id and r.att_date == att_date and r.attendance_id != ignore_id
            for r in self.rows.values()
        )

    def find_record(self, student_id: str, att_date: date) -> Optional[AttendanceRecord]:
        for r in self.rows.values():
            if r.student_id == student_id and r.att_date == att_date:
                return r
        return None

    def get_by_id(self, attendance_id: int) -> Optional[AttendanceRecord]:
        return self.rows.get(attendance_id)

    def insert_checkin(self, *, student_id, att_date, check_in, status) -> int:
        return self.insert_record(student_id=student_id, att_date=att_date, check_in=check_in, status=status)

    def claim_checkin(self, *, attendance_id, check_in, status) -> bool:
        r = self.rows.get(attendance_id)
        if not r or r.check_in is not None:
            return False
        self.writes += 1
        self.rows[attendance_id] = replace(r, check_in=check_in, check_out=None, status=status, notes=None)
        return True

    def insert_record(self, *, student_id, att_date, check_in, status, notes=None) -> int:
        if self._key_taken(student_id, att_date):
            raise DuplicateRecordError("Duplicate entry for key 'uq_attendance_student_date'")
        self.writes += 1
        rid = self._next_id
        self._next_id += 1
        self.rows[rid] = AttendanceRecord(
            attendance_id=rid,
            student_id=student_id,
            att_date=att_date,
            check_in=check_in,
            check_out=None,
            status=status,
            notes=notes,
        )
        return rid

    def update_record(self, *, attendance_id, att_date, check_in, status, notes=None) -> bool:
        r = self.rows.get(attendance_id)
        if not r:
            return False
        if self._key_taken(r.student_id, att_date, ignore_id=attendance_id):
            raise DuplicateRecordError("Duplicate entry for key 'uq_attendance_student_date'")
        self.writes += 1
        self.rows[attendance_id] = replace(r, att_date=att_date, check_in=check_in, status=status, notes=notes)
        return True

    def delete_record(self, attendance_id: int) -> bool:
        if attendance_id not in self.rows:
            return False
        self.writes += 1
        del self.rows[attendance_id]
        return True

    def query_records(self, *, start_date, end_date, class_id=None):
        out = []
        for r in self.rows.values():
            if not (start_date <= r.att_date <= end_date):
                continue
            if class_id is not None:
                s = self._students.get_by_id(r.student_id) if self._students else None
                if not s or s.class_id != class_id:
                    continue
            out.append(r)
        return sorted(out, key=lambda r: (r.att_date, r.student_id))

    def list_for_student(self, student_id, *, start_date, end_date):
        return [
            r
            for r in self.query_records(start_date=start_date, end_date=end_date)
            if r.student_id == student_id
        ]


class InMemorySettings:
    def __init__(self, settings: Optional[AppSettings] = None):
        self.settings = settings

    def get(self) -> Optional[AppSettings]:
        return self.settings

    def save_times(self, *, entry_time, late_time, exit_time) -> None:
        base = self.settings or AppSettings(entry_time=entry_time, late_time=late_time, exit_time=exit_time)
        self.settings = replace(base, entry_time=entry_time, late_time=late_time, exit_time=exit_time)

    def _base(self) -> AppSettings:
        return self.settings or AppSettings(entry_time=time(7, 0), late_time=time(7, 15), exit_time=time(15, 0))

    def save_identity(self, **identity) -> None:
        self.settings = replace(self._base(), **identity)

    def save_logo_url(self, logo_url) -> None:
        self.settings = replace(self._base(), logo_url=logo_url)


class InMemoryAcademicYears:
    def __init__(self):
        self.rows: dict[int, AcademicYear] = {}
        self._next_id = 1

    def list_all(self):
        return list(self.rows.values())

    def get_by_id(self, year_id: int):
        return self.rows.get(year_id)

    def get_active(self):
        return next((y for y in self.rows.values() if y.is_active), None)

    def create(self, *, year_label, semester, is_active) -> int:
        yid = self._next_id
        self._next_id += 1
        self.rows[yid] = AcademicYear(year_id=yid, year_label=year_label, semester=semester, is_active=is_active)
        return yid

    def update(self, *, year_id, year_label, semester) -> bool:
        if year_id not in self.rows:
            return False
        self.rows[year_id] = replace(self.rows[year_id], year_label=year_label, semester=semester)
        return True

    def delete_by_id(self, year_id: int) -> bool:
        return self.rows.pop(year_id, None) is not None

    def activate(self, year_id: int) -> bool:
        if year_id not in self.rows:
            return False
        for yid, y in list(self.rows.items()):
            self.rows[yid] = replace(y, is_active=(yid == year_id))
        return True


class InMemoryUsers:
    def __init__(self, users=()):
        self.rows: dict[int, User] = {u.user_id: u for u in users}
        self._next_id = max(self.rows, default=0) + 1

    def get_by_id(self, user_id: int):
        return self.rows.get(user_id)

    def get_by_username(self, username: str):
        return next((u for u in self.rows.values() if u.username == username), None)

    def list_all(self):
        return sorted(self.rows.values(), key=lambda u: u.user_id, reverse=True)

    def create_user(self, *, full_name, username, password_hash, role) -> int:
        uid = self._next_id
        self._next_id += 1
        self.rows[uid] = User(user_id=uid, full_name=full_name, username=username, password_hash=password_hash, role=role)
        return uid

    def set_role(self, user_id: int, role: Role) -> bool:
        if user_id not in self.rows:
            return False
        self.rows[user_id] = replace(self.rows[user_id], role=role)
        return True

    def count_admins(self) -> int:
        return sum(1 for u in self.rows.values() if u.role == Role.ADMIN)

    def delete_by_id(self, user_id: int) -> bool:
        return self.rows.pop(user_id, None) is not None


@pytest.fixture
def fixed_now() -> datetime:
    return datetime(2024, 3, 4, 7, 5, 12)


@pytest.fixture
def students_repo() -> InMemoryStudents:
    return InMemoryStudents(
        [
            Student(student_id="1001", full_name="Budi Santoso", class_id="cls-7a"),
            Student(student_id="1002", full_name="Ani Lestari", class_id="cls-7a"),
            Student(student_id="1003", full_name="Citra Dewi", class_id="cls-7b"),
        ]
    )


@pytest.fixture
def classes_repo(students_repo) -> InMemoryClasses:
    return InMemoryClasses(
        [
            SchoolClass(class_id="cls-7a", class_name="7A"),
            SchoolClass(class_id="cls-7b", class_name="7B"),
        ],
        students=students_repo,
    )


@pytest.fixture
def attendance_repo(students_repo) -> InMemoryAttendance:
    return InMemoryAttendance(students_repo)


@pytest.fixture
def settings_repo() -> InMemorySettings:
    return InMemorySettings(AppSettings(entry_time=time(7, 0), late_time=time(7, 15), exit_time=time(15, 0)))


@pytest.fixture
def settings_service(settings_repo) -> SettingsService:
    return SettingsService(settings_repo)


@pytest.fixture
def attendance_service(attendance_repo, students_repo, classes_repo, settings_service) -> AttendanceService:
    return AttendanceService(attendance_repo, students_repo, classes_repo, settings_service)


@pytest.fixture
def report_service(students_repo, classes_repo, attendance_repo) -> ReportService:
    return ReportService(students_repo, classes_repo, attendance_repo)
