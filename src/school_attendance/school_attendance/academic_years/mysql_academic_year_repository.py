from __future__ import annotations

from typing import Any, Dict, Optional, Sequence

from ..core.enums import Semester
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import AcademicYear
from .repository import AcademicYearRepository


def _row_to_year(r: Dict[str, Any]) -> AcademicYear:
    return AcademicYear(
        year_id=int(r["year_id"]),
        year_label=r["year_label"],
        semester=Semester(r["semester"]),
        is_active=bool(r.get("is_active")),
    )


class MySQLAcademicYearRepository(AcademicYearRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_all(self) -> Sequence[AcademicYear]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT year_id, year_label, semester, is_active FROM academic_years ORDER BY year_label DESC, semester"
            )
            return [_row_to_year(r) for r in fetchall(cur)]

    def get_by_id(self, year_id: int) -> Optional[AcademicYear]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT year_id, year_label, semester, is_active FROM academic_years WHERE year_id=%s",
                (year_id,),
            )
            r = fetchone(cur)
            return _row_to_year(r) if r else None

    def get_active(self) -> Optional[AcademicYear]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT year_id, year_label, semester, is_active FROM academic_years WHERE is_active=1 LIMIT 1")
            r = fetchone(cur)
            return _row_to_year(r) if r else None

    def create(self, *, year_label: str, semester: Semester, is_active: bool) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "INSERT INTO academic_years(year_label, semester, is_active) VALUES(%s,%s,%s)",
                (year_label, semester.value, 1 if is_active else 0),
            )
            return int(cur.lastrowid)

    def update(self, *, year_id: int, year_label: str, semester: Semester) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE academic_years SET year_label=%s, semester=%s WHERE year_id=%s",
                (year_label, semester.value, year_id),
            )
            return cur.rowcount > 0

    def delete_by_id(self, year_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM academic_years WHERE year_id=%s", (year_id,))
            return cur.rowcount > 0

    def activate(self, year_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT 1 FROM academic_years WHERE year_id=%s FOR UPDATE", (year_id,))
            if not fetchone(cur):
                return False
            # One statement flips every row, so there is never zero or two active years.
            cur.execute("UPDATE academic_years SET is_active = (year_id = %s)", (year_id,))
            return True
