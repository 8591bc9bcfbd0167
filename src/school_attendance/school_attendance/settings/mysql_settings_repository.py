from __future__ import annotations

from datetime import time
from typing import Optional

from ..core.constants import DEFAULT_ENTRY_TIME, DEFAULT_EXIT_TIME, DEFAULT_LATE_TIME
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone, to_time
from .model import AppSettings
from .repository import SettingsRepository

SETTINGS_ROW_ID = 1

_IDENTITY_COLUMNS = (
    "school_name",
    "app_name",
    "headmaster_name",
    "school_address",
    "school_phone",
    "school_email",
    "school_city",
)


class MySQLSettingsRepository(SettingsRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get(self) -> Optional[AppSettings]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT entry_time, late_time, exit_time, {", ".join(_IDENTITY_COLUMNS)}, logo_url
                FROM app_settings
                WHERE id=%s
                """,
                (SETTINGS_ROW_ID,),
            )
            r = fetchone(cur)
            if not r:
                return None
            return AppSettings(
                entry_time=to_time(r["entry_time"]),
                late_time=to_time(r["late_time"]),
                exit_time=to_time(r["exit_time"]),
                logo_url=r.get("logo_url"),
                **{c: r.get(c) for c in _IDENTITY_COLUMNS},
            )

    def save_times(self, *, entry_time: time, late_time: time, exit_time: time) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO app_settings(id, entry_time, late_time, exit_time)
                VALUES(%s,%s,%s,%s)
                ON DUPLICATE KEY UPDATE
                    entry_time=VALUES(entry_time), late_time=VALUES(late_time), exit_time=VALUES(exit_time)
                """,
                (SETTINGS_ROW_ID, entry_time, late_time, exit_time),
            )

    def save_identity(
        self,
        *,
        school_name: Optional[str],
        app_name: Optional[str],
        headmaster_name: Optional[str],
        school_address: Optional[str],
        school_phone: Optional[str],
        school_email: Optional[str],
        school_city: Optional[str],
    ) -> None:
        columns = ", ".join(_IDENTITY_COLUMNS)
        updates = ", ".join(f"{c}=VALUES({c})" for c in _IDENTITY_COLUMNS)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                INSERT INTO app_settings(id, entry_time, late_time, exit_time, {columns})
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                ON DUPLICATE KEY UPDATE {updates}
                """,
                (
                    SETTINGS_ROW_ID,
                    DEFAULT_ENTRY_TIME,
                    DEFAULT_LATE_TIME,
                    DEFAULT_EXIT_TIME,
                    school_name,
                    app_name,
                    headmaster_name,
                    school_address,
                    school_phone,
                    school_email,
                    school_city,
                ),
            )

    def save_logo_url(self, logo_url: Optional[str]) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO app_settings(id, entry_time, late_time, exit_time, logo_url)
                VALUES(%s,%s,%s,%s,%s)
                ON DUPLICATE KEY UPDATE logo_url=VALUES(logo_url)
                """,
                (SETTINGS_ROW_ID, DEFAULT_ENTRY_TIME, DEFAULT_LATE_TIME, DEFAULT_EXIT_TIME, logo_url),
            )
