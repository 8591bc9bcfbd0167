from __future__ import annotations

import logging
from datetime import date

from flask import Flask, flash, redirect, render_template, request, url_for

from ..common.datetime_utils import format_time, parse_iso_date, parse_year_month
from ..common.web import csv_response, login_required
from ..core.constants import DAILY_REPORT_CSV_HEADERS, MONTHLY_REPORT_CSV_HEADERS, STATUS_LABELS
from ..core.exceptions import PersistenceError, ValidationError
from ..container import Container

logger = logging.getLogger(__name__)


def register(app: Flask, container: Container) -> None:
    def _report_date() -> date:
        value = request.args.get("date")
        return parse_iso_date(value) if value else date.today()

    def _report_month() -> str:
        value = request.args.get("month") or date.today().strftime("%Y-%m")
        parse_year_month(value)
        return value

    @app.route("/dashboard", endpoint="dashboard")
    @login_required
    def dashboard():
        today = date.today()
        try:
            counts = container.report_service.dashboard_counts(today)
            active_year = container.academic_year_service.get_active_year()
        except PersistenceError:
            logger.exception("dashboard unavailable")
            flash("Data dasbor tidak dapat dimuat", "danger")
            counts, active_year = None, None
        return render_template(
            "dashboard.html",
            counts=counts,
            active_year=active_year,
            today=today.strftime("%Y-%m-%d"),
            active_page="dashboard",
        )

    @app.route("/reports/daily", endpoint="daily_report")
    @login_required
    def daily_report():
        class_id = request.args.get("class_id") or None
        try:
            day = _report_date()
        except ValidationError as e:
            flash(str(e), "warning")
            return redirect(url_for("daily_report"))

        rows = container.report_service.build_daily_report(day, class_id=class_id)
        return render_template(
            "daily_report.html",
            rows=rows,
            date=day.strftime("%Y-%m-%d"),
            class_id=class_id or "",
            classes=container.class_service.list_classes(),
            labels=STATUS_LABELS,
            format_time=format_time,
            active_page="daily_report",
        )

    @app.route("/reports/daily.csv", endpoint="daily_report_csv")
    @login_required
    def daily_report_csv():
        class_id = request.args.get("class_id") or None
        try:
            day = _report_date()
        except ValidationError as e:
            flash(str(e), "warning")
            return redirect(url_for("daily_report"))

        rows = container.report_service.build_daily_report(day, class_id=class_id)
        return csv_response(
            app,
            fieldnames=DAILY_REPORT_CSV_HEADERS,
            rows=container.report_service.daily_csv_rows(rows),
            filename=f"absensi_harian_{day.strftime('%Y%m%d')}.csv",
        )

    @app.route("/reports/monthly", endpoint="monthly_report")
    @login_required
    def monthly_report():
        class_id = request.args.get("class_id") or None
        try:
            month = _report_month()
        except ValidationError as e:
            flash(str(e), "warning")
            return redirect(url_for("monthly_report"))

        rows = container.report_service.build_monthly_summary(month, class_id=class_id)
        return render_template(
            "monthly_report.html",
            rows=rows,
            month=month,
            class_id=class_id or "",
            classes=container.class_service.list_classes(),
            active_page="monthly_report",
        )

    @app.route("/reports/monthly.csv", endpoint="monthly_report_csv")
    @login_required
    def monthly_report_csv():
        class_id = request.args.get("class_id") or None
        try:
            month = _report_month()
        except ValidationError as e:
            flash(str(e), "warning")
            return redirect(url_for("monthly_report"))

        rows = container.report_service.build_monthly_summary(month, class_id=class_id)
        return csv_response(
            app,
            fieldnames=MONTHLY_REPORT_CSV_HEADERS,
            rows=container.report_service.monthly_csv_rows(rows),
            filename=f"rekap_bulanan_{month.replace('-', '')}.csv",
        )
