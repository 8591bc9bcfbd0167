from __future__ import annotations

from dataclasses import dataclass

from ..core.enums import Semester


@dataclass(frozen=True)
class AcademicYear:
    """Entitas domain: Tahun ajaran. At most one row is active."""

    year_id: int
    year_label: str
    semester: Semester
    is_active: bool = False
