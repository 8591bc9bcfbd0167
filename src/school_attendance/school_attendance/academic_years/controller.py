from __future__ import annotations

import logging

from flask import Flask, flash, redirect, render_template, request, url_for

from ..common.web import admin_required
from ..core.enums import Semester
from ..core.exceptions import PersistenceError, ValidationError
from ..container import Container

logger = logging.getLogger(__name__)


def register(app: Flask, container: Container) -> None:
    @app.route("/academic-years", methods=["GET", "POST"], endpoint="academic_years")
    @admin_required
    def academic_years():
        if request.method == "POST":
            try:
                container.academic_year_service.create_year(
                    year_label=request.form.get("year_label", ""),
                    semester=request.form.get("semester", ""),
                )
                flash("Tahun ajaran ditambahkan.", "success")
            except ValidationError as e:
                flash(str(e), "warning")
            except PersistenceError:
                logger.exception("create academic year failed")
                flash("Tahun ajaran TIDAK tersimpan", "danger")
            return redirect(url_for("academic_years"))

        return render_template(
            "academic_years.html",
            years=container.academic_year_service.list_years(),
            semesters=list(Semester),
            active_page="academic_years",
        )

    @app.route("/academic-years/<int:year_id>/edit", methods=["POST"], endpoint="update_academic_year")
    @admin_required
    def update_academic_year(year_id: int):
        try:
            container.academic_year_service.update_year(
                year_id=year_id,
                year_label=request.form.get("year_label", ""),
                semester=request.form.get("semester", ""),
            )
            flash("Tahun ajaran diperbarui.", "success")
        except ValidationError as e:
            flash(str(e), "warning")
        except PersistenceError:
            logger.exception("update academic year failed id=%s", year_id)
            flash("Perubahan TIDAK tersimpan", "danger")
        return redirect(url_for("academic_years"))

    @app.route("/academic-years/<int:year_id>/activate", methods=["POST"], endpoint="activate_academic_year")
    @admin_required
    def activate_academic_year(year_id: int):
        try:
            container.academic_year_service.activate_year(year_id)
            flash("Tahun ajaran aktif diganti.", "success")
        except ValidationError as e:
            flash(str(e), "warning")
        except PersistenceError:
            logger.exception("activate academic year failed id=%s", year_id)
            flash("Perubahan TIDAK tersimpan", "danger")
        return redirect(url_for("academic_years"))

    @app.route("/academic-years/<int:year_id>/delete", methods=["POST"], endpoint="delete_academic_year")
    @admin_required
    def delete_academic_year(year_id: int):
        try:
            container.academic_year_service.delete_year(year_id)
            flash("Tahun ajaran dihapus.", "success")
        except ValidationError as e:
            flash(str(e), "warning")
        except PersistenceError:
            logger.exception("delete academic year failed id=%s", year_id)
            flash("Tahun ajaran gagal dihapus", "danger")
        return redirect(url_for("academic_years"))
