from __future__ import annotations

import logging
from pathlib import Path

from flask import Flask, flash, redirect, render_template, request, url_for
from PIL import UnidentifiedImageError

from ..common.datetime_utils import format_time
from ..common.web import admin_required
from ..core.exceptions import PersistenceError, ValidationError
from ..container import Container
from ..students.id_card import normalize_photo

logger = logging.getLogger(__name__)

LOGO_FILENAME = "school-logo.jpg"


def register(app: Flask, container: Container) -> None:
    @app.context_processor
    def inject_app_identity():
        # Failing to read settings must not take every page down with it.
        try:
            s = container.settings_service.get_settings()
        except PersistenceError:
            logger.exception("settings unavailable")
            return {"app_name": None, "school_name": None}
        return {"app_name": s.app_name, "school_name": s.school_name}

    @app.route("/settings", endpoint="settings")
    @admin_required
    def settings():
        return render_template(
            "settings.html",
            settings=container.settings_service.get_settings(),
            format_time=format_time,
            active_page="settings",
        )

    @app.route("/settings/times", methods=["POST"], endpoint="update_times")
    @admin_required
    def update_times():
        try:
            s = container.settings_service.update_times(
                entry_time=request.form.get("entry_time", ""),
                late_time=request.form.get("late_time", ""),
                exit_time=request.form.get("exit_time", ""),
            )
            logger.info("thresholds updated late_time=%s", format_time(s.late_time))
            flash("Pengaturan jam disimpan.", "success")
        except ValidationError as e:
            flash(str(e), "warning")
        except PersistenceError:
            logger.exception("update times failed")
            flash("Pengaturan TIDAK tersimpan", "danger")
        return redirect(url_for("settings"))

    @app.route("/settings/identity", methods=["POST"], endpoint="update_identity")
    @admin_required
    def update_identity():
        try:
            container.settings_service.update_identity(
                school_name=request.form.get("school_name"),
                app_name=request.form.get("app_name"),
                headmaster_name=request.form.get("headmaster_name"),
                school_address=request.form.get("school_address"),
                school_phone=request.form.get("school_phone"),
                school_email=request.form.get("school_email"),
                school_city=request.form.get("school_city"),
            )
            flash("Identitas sekolah disimpan.", "success")
        except ValidationError as e:
            flash(str(e), "warning")
        except PersistenceError:
            logger.exception("update identity failed")
            flash("Pengaturan TIDAK tersimpan", "danger")
        return redirect(url_for("settings"))

    @app.route("/settings/logo", methods=["POST"], endpoint="upload_logo")
    @admin_required
    def upload_logo():
        file = request.files.get("logo")
        if not file or not file.filename:
            flash("Pilih file logo terlebih dahulu", "warning")
            return redirect(url_for("settings"))

        try:
            data = normalize_photo(file.stream)
            folder = Path(app.config["UPLOAD_FOLDER"])
            folder.mkdir(parents=True, exist_ok=True)
            (folder / LOGO_FILENAME).write_bytes(data)
            container.settings_service.set_logo(url_for("uploaded_file", filename=LOGO_FILENAME))
            flash("Logo sekolah diperbarui.", "success")
        except UnidentifiedImageError:
            flash("File bukan gambar yang valid", "warning")
        except (OSError, PersistenceError):
            logger.exception("logo upload failed")
            flash("Logo gagal disimpan", "danger")
        return redirect(url_for("settings"))
