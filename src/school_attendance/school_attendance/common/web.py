from __future__ import annotations

import csv
import io
from functools import wraps
from typing import Iterable, Sequence

from flask import Flask, flash, redirect, render_template, session, url_for

from ..core.enums import Role


def current_user() -> dict:
    return {"full_name": session.get("name"), "role": session.get("role")}


def render_forbidden():
    return render_template("403.html", current_user=current_user()), 403


def login_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        if "user_id" not in session:
            flash("Silakan login terlebih dahulu!", "warning")
            return redirect(url_for("login"))
        return view(*args, **kwargs)

    return wrapper


def admin_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        if "user_id" not in session:
            return redirect(url_for("login"))

        if session.get("role") != Role.ADMIN.value:
            return render_forbidden()

        return view(*args, **kwargs)

    return wrapper


def csv_response(app: Flask, *, fieldnames: Sequence[str], rows: Iterable[dict], filename: str):
    """CSV download, UTF-8 with BOM so spreadsheet apps detect the encoding."""

    out = io.StringIO()
    writer = csv.DictWriter(out, fieldnames=list(fieldnames))
    writer.writeheader()
    for row in rows:
        writer.writerow(row)

    return text_download(app, out.getvalue(), filename=filename)


def text_download(app: Flask, text: str, *, filename: str):
    return app.response_class(
        text.encode("utf-8-sig"),
        mimetype="text/csv",
        headers={"Content-Disposition": f"attachment; filename={filename}"},
    )
