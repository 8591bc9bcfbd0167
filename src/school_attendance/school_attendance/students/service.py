from __future__ import annotations

import csv
import io
import time
from dataclasses import replace
from datetime import date
from typing import Optional, Sequence

from ..common.datetime_utils import parse_iso_date
from ..common.validators import optional_text, require_non_empty
from ..core.constants import STUDENT_CSV_HEADERS, STUDENT_CSV_REQUIRED_HEADERS
from ..core.exceptions import DuplicateRecordError, UnknownStudentError, ValidationError
from .model import ImportResult, SchoolClass, Student
from .repository import ClassRepository, StudentRepository


class StudentService:
    """Use case: manage the student directory (admin screens, CSV import/export)."""

    def __init__(self, students: StudentRepository, classes: ClassRepository):
        self._students = students
        self._classes = classes

    def get_student(self, student_id: str) -> Student:
        student = self._students.get_by_id(student_id)
        if not student:
            raise UnknownStudentError("Siswa tidak terdaftar")
        return student

    def list_students(self, *, search: Optional[str] = None, class_id: Optional[str] = None) -> list[Student]:
        students = list(self._students.list_students(class_id=class_id))
        term = (search or "").strip()
        if not term:
            return students
        lowered = term.lower()
        return [s for s in students if lowered in s.full_name.lower() or term in s.student_id]

    def _require_class(self, class_id: Optional[str]) -> Optional[str]:
        class_id = optional_text(class_id)
        if class_id and not self._classes.get_by_id(class_id):
            raise ValidationError("Kelas tidak ditemukan")
        return class_id

    def create_student(
        self,
        *,
        student_id: str,
        full_name: str,
        class_id: Optional[str],
        nisn: Optional[str] = None,
        birth_place: Optional[str] = None,
        birth_date: Optional[date] = None,
        address: Optional[str] = None,
    ) -> Student:
        student = Student(
            student_id=require_non_empty(student_id, "NIS"),
            full_name=require_non_empty(full_name, "Nama siswa"),
            class_id=self._require_class(class_id),
            nisn=optional_text(nisn),
            birth_place=optional_text(birth_place),
            birth_date=birth_date,
            address=optional_text(address),
        )
        if self._students.get_by_id(student.student_id):
            raise ValidationError("NIS sudah terdaftar")
        try:
            self._students.create(student)
        except DuplicateRecordError:
            raise ValidationError("NIS sudah terdaftar")
        return student

    def update_student(
        self,
        *,
        student_id: str,
        full_name: str,
        class_id: Optional[str],
        nisn: Optional[str] = None,
        birth_place: Optional[str] = None,
        birth_date: Optional[date] = None,
        address: Optional[str] = None,
    ) -> Student:
        # The identifier selects the row and is never rewritten.
        current = self.get_student(student_id)
        updated = replace(
            current,
            full_name=require_non_empty(full_name, "Nama siswa"),
            class_id=self._require_class(class_id),
            nisn=optional_text(nisn),
            birth_place=optional_text(birth_place),
            birth_date=birth_date,
            address=optional_text(address),
        )
        if not self._students.update(updated):
            raise ValidationError("Gagal memperbarui data siswa")
        return updated

    def set_photo(self, student_id: str, photo_url: Optional[str]) -> None:
        self.get_student(student_id)
        self._students.set_photo_url(student_id, photo_url)

    def delete_student(self, student_id: str) -> None:
        if not self._students.delete_by_id(student_id):
            raise UnknownStudentError("Siswa tidak terdaftar")

    def import_students_csv(self, text: str) -> ImportResult:
        """Upsert students from CSV text.

        Requires the id, name and class_id headers. Rows missing one of those
        values, naming an unknown class, or carrying an unreadable dob are
        skipped and counted.
        """

        reader = csv.DictReader(io.StringIO(text.lstrip("\ufeff")))
        headers = [h.strip() for h in (reader.fieldnames or [])]
        for required in STUDENT_CSV_REQUIRED_HEADERS:
            if required not in headers:
                raise ValidationError(f"Header wajib tidak ditemukan: {required}")

        known_classes = {c.class_id for c in self._classes.list_all()}
        to_upsert: list[Student] = []
        skipped = 0

        for raw in reader:
            row = {(k or "").strip(): (v or "").strip() for k, v in raw.items() if k is not None}
            if not row.get("id") or not row.get("name") or not row.get("class_id"):
                skipped += 1
                continue
            if row["class_id"] not in known_classes:
                skipped += 1
                continue
            try:
                birth_date = parse_iso_date(row["dob"]) if row.get("dob") else None
            except ValidationError:
                skipped += 1
                continue

            to_upsert.append(
                Student(
                    student_id=row["id"],
                    full_name=row["name"],
                    class_id=row["class_id"],
                    nisn=row.get("nisn") or None,
                    birth_place=row.get("pob") or None,
                    birth_date=birth_date,
                    address=row.get("address") or None,
                )
            )

        if not to_upsert:
            raise ValidationError("Tidak ada data siswa yang valid untuk diimpor")

        self._students.upsert_many(to_upsert)
        return ImportResult(imported=len(to_upsert), skipped=skipped)

    def export_students_csv(self) -> str:
        out = io.StringIO()
        writer = csv.writer(out)
        writer.writerow(STUDENT_CSV_HEADERS)
        for s in self._students.list_students():
            writer.writerow(
                [
                    s.student_id,
                    s.full_name,
                    s.class_id or "",
                    s.nisn or "",
                    s.birth_place or "",
                    s.birth_date.strftime("%Y-%m-%d") if s.birth_date else "",
                    s.address or "",
                    s.photo_url or "",
                ]
            )
        return out.getvalue()

    @staticmethod
    def students_template_csv() -> str:
        return ",".join(STUDENT_CSV_HEADERS[:-1]) + "\n"


class ClassService:
    def __init__(self, classes: ClassRepository):
        self._classes = classes

    def list_classes(self) -> Sequence[SchoolClass]:
        return self._classes.list_all()

    def class_names(self) -> dict[str, str]:
        return {c.class_id: c.class_name for c in self._classes.list_all()}

    def create_class(self, name: str) -> SchoolClass:
        name = require_non_empty(name, "Nama kelas")
        school_class = SchoolClass(class_id=f"cls-{int(time.time() * 1000)}", class_name=name)
        self._classes.create(class_id=school_class.class_id, class_name=school_class.class_name)
        return school_class

    def delete_class(self, class_id: str) -> None:
        """Delete a class; its students stay, without a class."""

        if not self._classes.delete_and_detach(class_id):
            raise ValidationError("Kelas tidak ditemukan")
