from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Optional


@dataclass(frozen=True)
class SchoolClass:
    """Entitas domain: Kelas."""

    class_id: str
    class_name: str


@dataclass(frozen=True)
class Student:
    """Entitas domain: Siswa.

    student_id is the school-issued number (NIS) printed on the ID card; it is
    the primary key and never changes after creation.
    """

    student_id: str
    full_name: str
    class_id: Optional[str]
    nisn: Optional[str] = None
    birth_place: Optional[str] = None
    birth_date: Optional[date] = None
    address: Optional[str] = None
    photo_url: Optional[str] = None


@dataclass(frozen=True)
class ImportResult:
    imported: int
    skipped: int
