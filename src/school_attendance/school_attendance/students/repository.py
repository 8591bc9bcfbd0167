from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import SchoolClass, Student


class StudentRepository(Protocol):
    def get_by_id(self, student_id: str) -> Optional[Student]:
        raise NotImplementedError

    def list_students(self, *, class_id: Optional[str] = None) -> Sequence[Student]:
        """Students ordered by name, then id."""

        raise NotImplementedError

    def create(self, student: Student) -> None:
        raise NotImplementedError

    def update(self, student: Student) -> bool:
        raise NotImplementedError

    def upsert_many(self, students: Sequence[Student]) -> int:
        raise NotImplementedError

    def set_photo_url(self, student_id: str, photo_url: Optional[str]) -> bool:
        raise NotImplementedError

    def delete_by_id(self, student_id: str) -> bool:
        raise NotImplementedError


class ClassRepository(Protocol):
    def list_all(self) -> Sequence[SchoolClass]:
        raise NotImplementedError

    def get_by_id(self, class_id: str) -> Optional[SchoolClass]:
        raise NotImplementedError

    def create(self, *, class_id: str, class_name: str) -> None:
        raise NotImplementedError

    def delete_and_detach(self, class_id: str) -> bool:
        """Delete a class, leaving its students without a class."""

        raise NotImplementedError
