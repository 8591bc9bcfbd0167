from __future__ import annotations

from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import SchoolClass
from .repository import ClassRepository


class MySQLClassRepository(ClassRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_all(self) -> Sequence[SchoolClass]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT class_id, class_name FROM classes ORDER BY class_name")
            return [SchoolClass(class_id=r["class_id"], class_name=r["class_name"]) for r in fetchall(cur)]

    def get_by_id(self, class_id: str) -> Optional[SchoolClass]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT class_id, class_name FROM classes WHERE class_id=%s", (class_id,))
            r = fetchone(cur)
            return SchoolClass(class_id=r["class_id"], class_name=r["class_name"]) if r else None

    def create(self, *, class_id: str, class_name: str) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("INSERT INTO classes(class_id, class_name) VALUES(%s,%s)", (class_id, class_name))

    def delete_and_detach(self, class_id: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("UPDATE students SET class_id=NULL WHERE class_id=%s", (class_id,))
            cur.execute("DELETE FROM classes WHERE class_id=%s", (class_id,))
            return cur.rowcount > 0
