from __future__ import annotations

import hmac
import logging
from datetime import date

from flask import Flask, flash, jsonify, redirect, render_template, request, session, url_for
from PIL import Image, UnidentifiedImageError

from ..common.datetime_utils import format_time, now_local
from ..common.web import admin_required, login_required
from ..core.constants import SCAN_DISPLAY_SECONDS, STATUS_LABELS
from ..core.enums import AttendanceStatus, ScanResult
from ..core.exceptions import ConcurrencyConflict, PersistenceError, UnknownStudentError, ValidationError
from ..container import Container
from .model import ScanOutcome

logger = logging.getLogger(__name__)

# Choices offered on the manual entry form. ABSENT is implicit (no row).
MANUAL_STATUSES = (AttendanceStatus.EXCUSED, AttendanceStatus.SICK, AttendanceStatus.PRESENT)


def outcome_payload(outcome: ScanOutcome) -> tuple[dict, int]:
    """JSON body + HTTP status for a scan outcome."""

    body = {
        "result": outcome.result.value,
        "time": format_time(outcome.time) if outcome.time else None,
        "status": outcome.status.value if outcome.status else None,
        "status_label": STATUS_LABELS[outcome.status.value] if outcome.status else None,
        "student": None,
        "conflict": outcome.conflict,
        "reset_after_seconds": SCAN_DISPLAY_SECONDS,
    }
    if outcome.student:
        body["student"] = {
            "id": outcome.student.student_id,
            "name": outcome.student.full_name,
            "class_name": outcome.school_class.class_name if outcome.school_class else "-",
            "photo_url": outcome.student.photo_url,
        }

    if outcome.result == ScanResult.ACCEPTED:
        body.update(
            success=True,
            kind="success",
            message=f"{outcome.student.full_name}: {body['status_label']} ({body['time']})",
        )
        return body, 200
    if outcome.result == ScanResult.ALREADY_CHECKED_IN:
        body.update(
            success=False,
            kind="warning",
            message=f"{outcome.student.full_name} sudah absen pukul {body['time']}",
        )
        return body, 200
    body.update(success=False, kind="danger", message="Siswa tidak terdaftar")
    return body, 404


def decode_barcodes(img):
    # pyzbar loads the native zbar library on import; only image scans need it.
    from pyzbar.pyzbar import decode

    return decode(img)


def _error_payload(kind: str, message: str, code: int):
    return jsonify(
        {"success": False, "kind": kind, "message": message, "reset_after_seconds": SCAN_DISPLAY_SECONDS}
    ), code


def register(app: Flask, container: Container) -> None:
    def _resolve(student_id: str) -> ScanOutcome:
        now = now_local()
        return container.attendance_service.resolve_scan(student_id, now.time(), now.date())

    def _resolve_json(student_id: str):
        student_id = (student_id or "").strip()
        if not student_id:
            return _error_payload("danger", "NIS tidak boleh kosong", 400)
        try:
            body, code = outcome_payload(_resolve(student_id))
            return jsonify(body), code
        except ConcurrencyConflict as e:
            return _error_payload("warning", str(e), 409)
        except PersistenceError:
            logger.exception("scan not saved student_id=%r", student_id)
            return _error_payload("danger", "Absensi TIDAK tersimpan, silakan scan ulang", 503)

    def _scan_authorized() -> bool:
        if "user_id" in session:
            return True
        expected = app.config.get("SCAN_API_KEY") or ""
        header = request.headers.get("Authorization", "")
        if not expected or not header.startswith("Bearer "):
            return False
        return hmac.compare_digest(header[len("Bearer "):].strip(), expected)

    @app.route("/scan", methods=["GET", "POST"], endpoint="scan")
    @login_required
    def scan():
        result = None
        if request.method == "POST":
            student_id = request.form.get("student_id", "").strip()
            if not student_id:
                flash("NIS tidak boleh kosong", "warning")
            else:
                try:
                    result, _ = outcome_payload(_resolve(student_id))
                except ConcurrencyConflict as e:
                    flash(str(e), "warning")
                except PersistenceError:
                    logger.exception("scan not saved student_id=%r", student_id)
                    flash("Absensi TIDAK tersimpan, silakan scan ulang", "danger")

        return render_template(
            "scan.html",
            result=result,
            reset_after_seconds=SCAN_DISPLAY_SECONDS,
            active_page="scan",
        )

    @app.route("/scan/image", methods=["POST"], endpoint="scan_image")
    @login_required
    def scan_image():
        """Decode the QR/barcode in an uploaded photo and resolve it."""

        if "image" not in request.files:
            return _error_payload("danger", "File gambar tidak ditemukan", 400)

        try:
            img = Image.open(request.files["image"].stream).convert("RGB")
        except UnidentifiedImageError:
            return _error_payload("danger", "File bukan gambar yang valid", 400)

        decoded = decode_barcodes(img)
        if not decoded:
            return _error_payload("warning", "Kode QR/barcode tidak terdeteksi", 400)

        try:
            student_id = decoded[0].data.decode("utf-8")
        except UnicodeDecodeError:
            return _error_payload("danger", "Isi kode QR/barcode tidak dapat dibaca", 400)

        return _resolve_json(student_id)

    @app.route("/api/scan", methods=["POST"], endpoint="api_scan")
    def api_scan():
        """Scanner devices: body {"nis": "..."} or {"student_id": "..."}."""

        if not _scan_authorized():
            return jsonify({"success": False, "message": "Unauthorized"}), 401

        data = request.get_json(silent=True) or {}
        return _resolve_json(str(data.get("nis") or data.get("student_id") or ""))

    @app.route("/attendance/manual", methods=["GET", "POST"], endpoint="manual_attendance")
    @login_required
    def manual_attendance():
        if request.method == "POST":
            try:
                record = container.attendance_service.upsert_manual_record(
                    student_id=request.form.get("student_id", ""),
                    att_date=request.form.get("att_date", ""),
                    status=request.form.get("status", ""),
                    check_in=request.form.get("check_in") or None,
                    notes=request.form.get("notes"),
                )
                logger.info(
                    "manual record saved id=%s student_id=%s status=%s",
                    record.attendance_id,
                    record.student_id,
                    record.status.value,
                )
                flash("Data kehadiran tersimpan.", "success")
                return redirect(url_for("manual_attendance"))
            except UnknownStudentError as e:
                flash(str(e), "danger")
            except ValidationError as e:
                flash(str(e), "warning")
            except PersistenceError:
                logger.exception("manual record not saved")
                flash("Data TIDAK tersimpan, coba lagi", "danger")

        return render_template(
            "manual.html",
            students=container.student_service.list_students(),
            statuses=MANUAL_STATUSES,
            labels=STATUS_LABELS,
            today=date.today().strftime("%Y-%m-%d"),
            active_page="manual",
        )

    @app.route("/attendance/<int:attendance_id>/edit", methods=["GET", "POST"], endpoint="edit_attendance")
    @admin_required
    def edit_attendance(attendance_id: int):
        try:
            record = container.attendance_service.get_record(attendance_id)
        except ValidationError as e:
            flash(str(e), "warning")
            return redirect(url_for("daily_report"))

        if request.method == "POST":
            try:
                record = container.attendance_service.upsert_manual_record(
                    record_id=attendance_id,
                    student_id=record.student_id,
                    att_date=request.form.get("att_date", ""),
                    status=request.form.get("status", ""),
                    check_in=request.form.get("check_in") or None,
                    notes=request.form.get("notes"),
                )
                flash("Data kehadiran diperbarui.", "success")
                return redirect(url_for("daily_report", date=record.att_date.strftime("%Y-%m-%d")))
            except ValidationError as e:
                flash(str(e), "warning")
            except PersistenceError:
                logger.exception("attendance update not saved id=%s", attendance_id)
                flash("Perubahan TIDAK tersimpan, coba lagi", "danger")

        return render_template(
            "attendance_edit.html",
            record=record,
            statuses=list(AttendanceStatus),
            labels=STATUS_LABELS,
            format_time=format_time,
            active_page="daily_report",
        )

    @app.route("/attendance/<int:attendance_id>/delete", methods=["POST"], endpoint="delete_attendance")
    @admin_required
    def delete_attendance(attendance_id: int):
        back = request.form.get("date") or date.today().strftime("%Y-%m-%d")
        try:
            container.attendance_service.delete_record(attendance_id)
            logger.info("attendance deleted id=%s by user_id=%s", attendance_id, session.get("user_id"))
            flash("Data kehadiran dihapus.", "success")
        except ValidationError as e:
            flash(str(e), "warning")
        except PersistenceError:
            logger.exception("attendance delete failed id=%s", attendance_id)
            flash("Data gagal dihapus", "danger")
        return redirect(url_for("daily_report", date=back))

    @app.route("/students/<student_id>/attendance", endpoint="student_attendance")
    @login_required
    def student_attendance(student_id: str):
        month = request.args.get("month") or date.today().strftime("%Y-%m")
        try:
            student = container.student_service.get_student(student_id)
            records = container.attendance_service.list_student_month_records(student_id, month)
        except ValidationError as e:
            flash(str(e), "warning")
            return redirect(url_for("students"))

        return render_template(
            "student_attendance.html",
            student=student,
            records=records,
            month=month,
            labels=STATUS_LABELS,
            format_time=format_time,
            active_page="students",
        )

