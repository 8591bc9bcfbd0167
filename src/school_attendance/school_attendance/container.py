from __future__ import annotations

from dataclasses import dataclass

from .academic_years.mysql_academic_year_repository import MySQLAcademicYearRepository
from .academic_years.service import AcademicYearService
from .attendance.factory import CheckinStrategyFactory
from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.service import AttendanceService
from .database.connection import DBConfig, DatabaseConnection
from .reports.service import ReportService
from .settings.mysql_settings_repository import MySQLSettingsRepository
from .settings.service import SettingsService
from .students.mysql_class_repository import MySQLClassRepository
from .students.mysql_student_repository import MySQLStudentRepository
from .students.service import ClassService, StudentService
from .users.mysql_user_repository import MySQLUserRepository
from .users.service import AuthService, UserService


@dataclass(frozen=True)
class Container:
    conn: DatabaseConnection

    users_repo: MySQLUserRepository
    students_repo: MySQLStudentRepository
    classes_repo: MySQLClassRepository
    attendance_repo: MySQLAttendanceRepository
    settings_repo: MySQLSettingsRepository
    academic_years_repo: MySQLAcademicYearRepository

    auth_service: AuthService
    user_service: UserService
    student_service: StudentService
    class_service: ClassService
    settings_service: SettingsService
    attendance_service: AttendanceService
    report_service: ReportService
    academic_year_service: AcademicYearService


def build_container(*, db_config: dict) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(db_config))

    users_repo = MySQLUserRepository(conn)
    students_repo = MySQLStudentRepository(conn)
    classes_repo = MySQLClassRepository(conn)
    attendance_repo = MySQLAttendanceRepository(conn)
    settings_repo = MySQLSettingsRepository(conn)
    academic_years_repo = MySQLAcademicYearRepository(conn)

    settings_service = SettingsService(settings_repo)

    return Container(
        conn=conn,
        users_repo=users_repo,
        students_repo=students_repo,
        classes_repo=classes_repo,
        attendance_repo=attendance_repo,
        settings_repo=settings_repo,
        academic_years_repo=academic_years_repo,
        auth_service=AuthService(users_repo),
        user_service=UserService(users_repo),
        student_service=StudentService(students_repo, classes_repo),
        class_service=ClassService(classes_repo),
        settings_service=settings_service,
        attendance_service=AttendanceService(
            attendance_repo,
            students_repo,
            classes_repo,
            settings_service,
            strategy_factory=CheckinStrategyFactory(),
        ),
        report_service=ReportService(students_repo, classes_repo, attendance_repo),
        academic_year_service=AcademicYearService(academic_years_repo),
    )
