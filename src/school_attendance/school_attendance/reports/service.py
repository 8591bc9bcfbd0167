from __future__ import annotations

from collections import Counter
from datetime import date
from typing import Optional

from ..attendance.repository import AttendanceRepository
from ..common.datetime_utils import format_time, month_bounds, parse_year_month
from ..core.constants import DEFAULT_ABSENT_NOTE, STATUS_LABELS
from ..core.enums import AttendanceStatus
from ..students.model import Student
from ..students.repository import ClassRepository, StudentRepository
from .model import DailyReportRow, DashboardCounts, EffectiveRecord, MonthlySummaryRow, StatusCounts


def _by_name(students) -> list[Student]:
    return sorted(students, key=lambda s: (s.full_name, s.student_id))


class ReportService:
    """Read-only projections of the attendance ledger.

    Nothing here writes; calling a report twice gives the same result as
    long as the ledger did not change in between.
    """

    def __init__(self, students: StudentRepository, classes: ClassRepository, attendance: AttendanceRepository):
        self._students = students
        self._classes = classes
        self._attendance = attendance

    def _class_names(self) -> dict[str, str]:
        return {c.class_id: c.class_name for c in self._classes.list_all()}

    def build_daily_report(self, report_date: date, *, class_id: Optional[str] = None) -> list[DailyReportRow]:
        students = _by_name(self._students.list_students(class_id=class_id))
        records = {
            r.student_id: r
            for r in self._attendance.query_records(start_date=report_date, end_date=report_date, class_id=class_id)
        }
        class_names = self._class_names()

        rows: list[DailyReportRow] = []
        for s in students:
            r = records.get(s.student_id)
            if r:
                effective = EffectiveRecord(
                    status=r.status,
                    check_in=r.check_in,
                    check_out=r.check_out,
                    notes=r.notes,
                    attendance_id=r.attendance_id,
                )
            else:
                effective = EffectiveRecord(
                    status=AttendanceStatus.ABSENT,
                    check_in=None,
                    check_out=None,
                    notes=DEFAULT_ABSENT_NOTE,
                    synthesized=True,
                )
            rows.append(
                DailyReportRow(student=s, class_name=class_names.get(s.class_id or "", "-"), record=effective)
            )
        return rows

    def build_monthly_summary(self, year_month: str, *, class_id: Optional[str] = None) -> list[MonthlySummaryRow]:
        start, end = month_bounds(*parse_year_month(year_month))
        students = _by_name(self._students.list_students(class_id=class_id))

        per_student: dict[str, Counter] = {}
        for r in self._attendance.query_records(start_date=start, end_date=end, class_id=class_id):
            per_student.setdefault(r.student_id, Counter())[r.status] += 1

        class_names = self._class_names()
        rows: list[MonthlySummaryRow] = []
        for s in students:
            c = per_student.get(s.student_id, Counter())
            counts = StatusCounts(
                present=c[AttendanceStatus.PRESENT],
                late=c[AttendanceStatus.LATE],
                sick=c[AttendanceStatus.SICK],
                excused=c[AttendanceStatus.EXCUSED],
                absent=c[AttendanceStatus.ABSENT],
            )
            rows.append(MonthlySummaryRow(student=s, class_name=class_names.get(s.class_id or "", "-"), counts=counts))
        return rows

    def dashboard_counts(self, today: date) -> DashboardCounts:
        rows = self.build_daily_report(today)
        c = Counter(row.record.status for row in rows)
        return DashboardCounts(
            total_students=len(rows),
            present=c[AttendanceStatus.PRESENT],
            late=c[AttendanceStatus.LATE],
            sick=c[AttendanceStatus.SICK],
            excused=c[AttendanceStatus.EXCUSED],
            absent=c[AttendanceStatus.ABSENT],
        )

    @staticmethod
    def daily_csv_rows(rows: list[DailyReportRow]) -> list[dict]:
        return [
            {
                "NIS": row.student.student_id,
                "Nama Siswa": row.student.full_name,
                "Kelas": row.class_name,
                "Status": STATUS_LABELS[row.record.status.value],
                "Jam Masuk": format_time(row.record.check_in),
                "Jam Pulang": format_time(row.record.check_out),
                "Keterangan": row.record.notes or "",
            }
            for row in rows
        ]

    @staticmethod
    def monthly_csv_rows(rows: list[MonthlySummaryRow]) -> list[dict]:
        return [
            {
                "NIS": row.student.student_id,
                "Nama Siswa": row.student.full_name,
                "Kelas": row.class_name,
                "Hadir": row.counts.present,
                "Terlambat": row.counts.late,
                "Sakit": row.counts.sick,
                "Ijin": row.counts.excused,
            }
            for row in rows
        ]
