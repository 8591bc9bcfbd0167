from __future__ import annotations

from typing import Optional, Protocol, Sequence

from ..core.enums import Semester
from .model import AcademicYear


class AcademicYearRepository(Protocol):
    def list_all(self) -> Sequence[AcademicYear]:
        raise NotImplementedError

    def get_by_id(self, year_id: int) -> Optional[AcademicYear]:
        raise NotImplementedError

    def get_active(self) -> Optional[AcademicYear]:
        raise NotImplementedError

    def create(self, *, year_label: str, semester: Semester, is_active: bool) -> int:
        raise NotImplementedError

    def update(self, *, year_id: int, year_label: str, semester: Semester) -> bool:
        raise NotImplementedError

    def delete_by_id(self, year_id: int) -> bool:
        raise NotImplementedError

    def activate(self, year_id: int) -> bool:
        """Make year_id the only active row, in a single write."""

        raise NotImplementedError
