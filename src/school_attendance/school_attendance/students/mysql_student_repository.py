from __future__ import annotations

from typing import Any, Dict, Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, to_date
from .model import Student
from .repository import StudentRepository

_COLUMNS = "student_id, full_name, class_id, nisn, birth_place, birth_date, address, photo_url"


def _row_to_student(r: Dict[str, Any]) -> Student:
    return Student(
        student_id=str(r["student_id"]),
        full_name=r["full_name"],
        class_id=r.get("class_id"),
        nisn=r.get("nisn"),
        birth_place=r.get("birth_place"),
        birth_date=to_date(r.get("birth_date")),
        address=r.get("address"),
        photo_url=r.get("photo_url"),
    )


def _params(s: Student) -> tuple:
    return (s.student_id, s.full_name, s.class_id, s.nisn, s.birth_place, s.birth_date, s.address, s.photo_url)


class MySQLStudentRepository(StudentRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, student_id: str) -> Optional[Student]:
        with db_cursor(self._conn_factory) as (_, cur):
            # BINARY: scanned identifiers match case-sensitively.
            cur.execute(f"SELECT {_COLUMNS} FROM students WHERE student_id = BINARY %s", (student_id,))
            r = fetchone(cur)
            return _row_to_student(r) if r else None

    def list_students(self, *, class_id: Optional[str] = None) -> Sequence[Student]:
        sql = f"SELECT {_COLUMNS} FROM students"
        params: tuple = ()
        if class_id is not None:
            sql += " WHERE class_id=%s"
            params = (class_id,)
        sql += " ORDER BY full_name ASC, student_id ASC"

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql, params)
            return [_row_to_student(r) for r in fetchall(cur)]

    def create(self, student: Student) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"INSERT INTO students({_COLUMNS}) VALUES(%s,%s,%s,%s,%s,%s,%s,%s)",
                _params(student),
            )

    def update(self, student: Student) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE students
                SET full_name=%s, class_id=%s, nisn=%s, birth_place=%s, birth_date=%s, address=%s, photo_url=%s
                WHERE student_id=%s
                """,
                (
                    student.full_name,
                    student.class_id,
                    student.nisn,
                    student.birth_place,
                    student.birth_date,
                    student.address,
                    student.photo_url,
                    student.student_id,
                ),
            )
            # rowcount is 0 when the values are unchanged; existence is what matters.
            cur.execute("SELECT 1 FROM students WHERE student_id=%s", (student.student_id,))
            return fetchone(cur) is not None

    def upsert_many(self, students: Sequence[Student]) -> int:
        if not students:
            return 0
        with db_cursor(self._conn_factory) as (_, cur):
            # Imports never carry photos, so photo_url is left untouched on update.
            cur.executemany(
                f"""
                INSERT INTO students({_COLUMNS}) VALUES(%s,%s,%s,%s,%s,%s,%s,%s)
                ON DUPLICATE KEY UPDATE
                    full_name=VALUES(full_name), class_id=VALUES(class_id), nisn=VALUES(nisn),
                    birth_place=VALUES(birth_place), birth_date=VALUES(birth_date), address=VALUES(address)
                """,
                [_params(s) for s in students],
            )
            return len(students)

    def set_photo_url(self, student_id: str, photo_url: Optional[str]) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("UPDATE students SET photo_url=%s WHERE student_id=%s", (photo_url, student_id))
            cur.execute("SELECT 1 FROM students WHERE student_id=%s", (student_id,))
            return fetchone(cur) is not None

    def delete_by_id(self, student_id: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM students WHERE student_id=%s", (student_id,))
            return cur.rowcount > 0
