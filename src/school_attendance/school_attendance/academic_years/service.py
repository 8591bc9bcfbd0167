from __future__ import annotations

from typing import Optional, Sequence

from ..common.validators import require_non_empty
from ..core.enums import Semester
from ..core.exceptions import ValidationError
from .model import AcademicYear
from .repository import AcademicYearRepository


def _parse_semester(value: str | Semester) -> Semester:
    try:
        return Semester(value)
    except ValueError:
        raise ValidationError("Semester harus Ganjil atau Genap")


class AcademicYearService:
    def __init__(self, years: AcademicYearRepository):
        self._years = years

    def list_years(self) -> Sequence[AcademicYear]:
        return self._years.list_all()

    def get_active_year(self) -> Optional[AcademicYear]:
        return self._years.get_active()

    def create_year(self, *, year_label: str, semester: str | Semester) -> int:
        """Create a year; the very first one becomes active."""

        label = require_non_empty(year_label, "Tahun ajaran")
        sem = _parse_semester(semester)
        is_first = not self._years.list_all()
        return self._years.create(year_label=label, semester=sem, is_active=is_first)

    def update_year(self, *, year_id: int, year_label: str, semester: str | Semester) -> None:
        label = require_non_empty(year_label, "Tahun ajaran")
        sem = _parse_semester(semester)
        if not self._years.get_by_id(year_id):
            raise ValidationError("Tahun ajaran tidak ditemukan")
        self._years.update(year_id=year_id, year_label=label, semester=sem)

    def delete_year(self, year_id: int) -> None:
        year = self._years.get_by_id(year_id)
        if not year:
            raise ValidationError("Tahun ajaran tidak ditemukan")
        if year.is_active:
            raise ValidationError("Tahun ajaran aktif tidak dapat dihapus")
        self._years.delete_by_id(year_id)

    def activate_year(self, year_id: int) -> None:
        if not self._years.activate(year_id):
            raise ValidationError("Tahun ajaran tidak ditemukan")
