from __future__ import annotations

from datetime import date, time
from typing import Any, Dict, Optional, Sequence

from ..core.enums import AttendanceStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, to_date, to_time
from .model import AttendanceRecord
from .repository import AttendanceRepository

_COLUMNS = "a.attendance_id, a.student_id, a.att_date, a.check_in, a.check_out, a.status, a.notes"


def _row_to_record(r: Dict[str, Any]) -> AttendanceRecord:
    return AttendanceRecord(
        attendance_id=int(r["attendance_id"]),
        student_id=str(r["student_id"]),
        att_date=to_date(r["att_date"]),
        check_in=to_time(r.get("check_in")),
        check_out=to_time(r.get("check_out")),
        status=AttendanceStatus(r["status"]),
        notes=r.get("notes"),
    )


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def find_record(self, student_id: str, att_date: date) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM attendance_records a WHERE a.student_id=%s AND a.att_date=%s",
                (student_id, att_date),
            )
            r = fetchone(cur)
            return _row_to_record(r) if r else None

    def get_by_id(self, attendance_id: int) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM attendance_records a WHERE a.attendance_id=%s", (attendance_id,))
            r = fetchone(cur)
            return _row_to_record(r) if r else None

    def insert_checkin(self, *, student_id: str, att_date: date, check_in: time, status: AttendanceStatus) -> int:
        return self.insert_record(student_id=student_id, att_date=att_date, check_in=check_in, status=status)

    def claim_checkin(self, *, attendance_id: int, check_in: time, status: AttendanceStatus) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE attendance_records
                SET check_in=%s, check_out=NULL, status=%s, notes=NULL
                WHERE attendance_id=%s AND check_in IS NULL
                """,
                (check_in, status.value, attendance_id),
            )
            return cur.rowcount > 0

    def insert_record(
        self,
        *,
        student_id: str,
        att_date: date,
        check_in: Optional[time],
        status: AttendanceStatus,
        notes: Optional[str] = None,
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO attendance_records(student_id, att_date, check_in, status, notes)
                VALUES(%s,%s,%s,%s,%s)
                """,
                (student_id, att_date, check_in, status.value, notes),
            )
            return int(cur.lastrowid)

    def update_record(
        self,
        *,
        attendance_id: int,
        att_date: date,
        check_in: Optional[time],
        status: AttendanceStatus,
        notes: Optional[str] = None,
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE attendance_records
                SET att_date=%s, check_in=%s, status=%s, notes=%s
                WHERE attendance_id=%s
                """,
                (att_date, check_in, status.value, notes, attendance_id),
            )
            # rowcount is 0 when the values are unchanged; existence is what matters.
            cur.execute("SELECT 1 FROM attendance_records WHERE attendance_id=%s", (attendance_id,))
            return fetchone(cur) is not None

    def delete_record(self, attendance_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM attendance_records WHERE attendance_id=%s", (attendance_id,))
            return cur.rowcount > 0

    def query_records(
        self,
        *,
        start_date: date,
        end_date: date,
        class_id: Optional[str] = None,
    ) -> Sequence[AttendanceRecord]:
        sql = f"""
            SELECT {_COLUMNS}
            FROM attendance_records a
            JOIN students s ON s.student_id = a.student_id
            WHERE a.att_date BETWEEN %s AND %s
        """
        params: list = [start_date, end_date]
        if class_id is not None:
            sql += " AND s.class_id=%s"
            params.append(class_id)
        sql += " ORDER BY a.att_date ASC, a.student_id ASC"

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql, tuple(params))
            return [_row_to_record(r) for r in fetchall(cur)]

    def list_for_student(self, student_id: str, *, start_date: date, end_date: date) -> Sequence[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_records a
                WHERE a.student_id=%s AND a.att_date BETWEEN %s AND %s
                ORDER BY a.att_date ASC
                """,
                (student_id, start_date, end_date),
            )
            return [_row_to_record(r) for r in fetchall(cur)]
