from __future__ import annotations

import io
import logging
from pathlib import Path

from flask import Flask, flash, redirect, render_template, request, send_file, send_from_directory, url_for
from PIL import UnidentifiedImageError
from werkzeug.utils import secure_filename

from ..common.datetime_utils import parse_iso_date
from ..common.web import admin_required, login_required, text_download
from ..core.exceptions import PersistenceError, ValidationError
from ..container import Container
from .id_card import normalize_photo, student_qr_png

logger = logging.getLogger(__name__)


def register(app: Flask, container: Container) -> None:
    def _student_form_kwargs() -> dict:
        dob = request.form.get("birth_date", "").strip()
        return {
            "full_name": request.form.get("full_name", ""),
            "class_id": request.form.get("class_id") or None,
            "nisn": request.form.get("nisn"),
            "birth_place": request.form.get("birth_place"),
            "birth_date": parse_iso_date(dob) if dob else None,
            "address": request.form.get("address"),
        }

    @app.route("/students", endpoint="students")
    @login_required
    def students():
        search = request.args.get("q", "")
        class_id = request.args.get("class_id") or None
        return render_template(
            "students.html",
            students=container.student_service.list_students(search=search, class_id=class_id),
            class_names=container.class_service.class_names(),
            classes=container.class_service.list_classes(),
            q=search,
            class_id=class_id or "",
            active_page="students",
        )

    @app.route("/students/new", methods=["GET", "POST"], endpoint="create_student")
    @admin_required
    def create_student():
        if request.method == "POST":
            try:
                student = container.student_service.create_student(
                    student_id=request.form.get("student_id", ""),
                    **_student_form_kwargs(),
                )
                flash(f"Siswa {student.full_name} ditambahkan.", "success")
                return redirect(url_for("students"))
            except ValidationError as e:
                flash(str(e), "warning")
            except PersistenceError:
                logger.exception("create student failed")
                flash("Data siswa TIDAK tersimpan", "danger")

        return render_template(
            "student_form.html",
            student=None,
            classes=container.class_service.list_classes(),
            active_page="students",
        )

    @app.route("/students/<student_id>/edit", methods=["GET", "POST"], endpoint="edit_student")
    @admin_required
    def edit_student(student_id: str):
        try:
            student = container.student_service.get_student(student_id)
        except ValidationError as e:
            flash(str(e), "warning")
            return redirect(url_for("students"))

        if request.method == "POST":
            try:
                container.student_service.update_student(student_id=student.student_id, **_student_form_kwargs())
                flash("Data siswa diperbarui.", "success")
                return redirect(url_for("students"))
            except ValidationError as e:
                flash(str(e), "warning")
            except PersistenceError:
                logger.exception("update student failed student_id=%r", student_id)
                flash("Perubahan TIDAK tersimpan", "danger")

        return render_template(
            "student_form.html",
            student=student,
            classes=container.class_service.list_classes(),
            active_page="students",
        )

    @app.route("/students/<student_id>/delete", methods=["POST"], endpoint="delete_student")
    @admin_required
    def delete_student(student_id: str):
        try:
            container.student_service.delete_student(student_id)
            flash("Siswa dihapus.", "success")
        except ValidationError as e:
            flash(str(e), "warning")
        except PersistenceError:
            logger.exception("delete student failed student_id=%r", student_id)
            flash("Siswa gagal dihapus", "danger")
        return redirect(url_for("students"))

    @app.route("/students/<student_id>/photo", methods=["POST"], endpoint="upload_student_photo")
    @admin_required
    def upload_student_photo(student_id: str):
        file = request.files.get("photo")
        if not file or not file.filename:
            flash("Pilih file foto terlebih dahulu", "warning")
            return redirect(url_for("edit_student", student_id=student_id))

        try:
            student = container.student_service.get_student(student_id)
            data = normalize_photo(file.stream)
            folder = Path(app.config["UPLOAD_FOLDER"])
            folder.mkdir(parents=True, exist_ok=True)
            filename = secure_filename(f"{student.student_id}.jpg") or "photo.jpg"
            (folder / filename).write_bytes(data)
            container.student_service.set_photo(student.student_id, url_for("uploaded_file", filename=filename))
            flash("Foto siswa diperbarui.", "success")
        except UnidentifiedImageError:
            flash("File bukan gambar yang valid", "warning")
        except ValidationError as e:
            flash(str(e), "warning")
        except (OSError, PersistenceError):
            logger.exception("photo upload failed student_id=%r", student_id)
            flash("Foto gagal disimpan", "danger")
        return redirect(url_for("edit_student", student_id=student_id))

    @app.route("/uploads/photos/<path:filename>", endpoint="uploaded_file")
    @login_required
    def uploaded_file(filename: str):
        return send_from_directory(app.config["UPLOAD_FOLDER"], filename)

    @app.route("/students/import", methods=["POST"], endpoint="import_students")
    @admin_required
    def import_students():
        file = request.files.get("file")
        if not file or not file.filename:
            flash("Pilih file CSV terlebih dahulu", "warning")
            return redirect(url_for("students"))

        try:
            text = file.read().decode("utf-8-sig")
            result = container.student_service.import_students_csv(text)
            logger.info("student import imported=%s skipped=%s", result.imported, result.skipped)
            flash(f"Impor selesai: {result.imported} siswa, {result.skipped} baris dilewati.", "success")
        except UnicodeDecodeError:
            flash("File harus berformat CSV UTF-8", "warning")
        except ValidationError as e:
            flash(str(e), "warning")
        except PersistenceError:
            logger.exception("student import failed")
            flash("Impor gagal, tidak ada data yang tersimpan", "danger")
        return redirect(url_for("students"))

    @app.route("/students/export.csv", endpoint="export_students")
    @login_required
    def export_students():
        return text_download(app, container.student_service.export_students_csv(), filename="students.csv")

    @app.route("/students/template.csv", endpoint="students_template")
    @login_required
    def students_template():
        return text_download(app, container.student_service.students_template_csv(), filename="students_template.csv")

    @app.route("/students/<student_id>/qr.png", endpoint="student_qr")
    @login_required
    def student_qr(student_id: str):
        try:
            student = container.student_service.get_student(student_id)
        except ValidationError:
            return "Not found", 404
        return send_file(io.BytesIO(student_qr_png(student.student_id)), mimetype="image/png")

    @app.route("/students/cards", methods=["GET", "POST"], endpoint="id_cards")
    @login_required
    def id_cards():
        """Printable ID cards for the selected students (all when none selected)."""

        selected = request.form.getlist("ids") if request.method == "POST" else request.args.getlist("ids")
        all_students = container.student_service.list_students(class_id=request.args.get("class_id") or None)
        if selected:
            wanted = set(selected)
            all_students = [s for s in all_students if s.student_id in wanted]

        return render_template(
            "id_cards.html",
            students=all_students,
            class_names=container.class_service.class_names(),
            settings=container.settings_service.get_settings(),
            active_page="students",
        )

    @app.route("/classes", methods=["GET", "POST"], endpoint="classes")
    @admin_required
    def classes():
        if request.method == "POST":
            try:
                school_class = container.class_service.create_class(request.form.get("class_name", ""))
                flash(f"Kelas {school_class.class_name} ditambahkan.", "success")
            except ValidationError as e:
                flash(str(e), "warning")
            except PersistenceError:
                logger.exception("create class failed")
                flash("Kelas TIDAK tersimpan", "danger")
            return redirect(url_for("classes"))

        return render_template("classes.html", classes=container.class_service.list_classes(), active_page="classes")

    @app.route("/classes/<class_id>/delete", methods=["POST"], endpoint="delete_class")
    @admin_required
    def delete_class(class_id: str):
        try:
            container.class_service.delete_class(class_id)
            flash("Kelas dihapus; siswa di kelas ini kini tanpa kelas.", "success")
        except ValidationError as e:
            flash(str(e), "warning")
        except PersistenceError:
            logger.exception("delete class failed class_id=%r", class_id)
            flash("Kelas gagal dihapus", "danger")
        return redirect(url_for("classes"))
