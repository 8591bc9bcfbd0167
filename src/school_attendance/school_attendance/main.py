from __future__ import annotations

import importlib
import logging
from datetime import timedelta
from pathlib import Path

from dotenv import load_dotenv
from flask import Flask, session

from config import get_settings_module

from .core.constants import DEFAULT_SESSION_IDLE_MINUTES
from .database.bootstrap import apply_schema, apply_seed_sql, ensure_admin_user, list_tables

from .container import Container, build_container
from .academic_years.controller import register as register_academic_years
from .attendance.controller import register as register_attendance
from .reports.controller import register as register_reports
from .settings.controller import register as register_settings
from .students.controller import register as register_students
from .users.controller import register as register_users

logger = logging.getLogger(__name__)

REPO_ROOT = Path(__file__).resolve().parents[3]


def create_app(*, container: Container | None = None) -> Flask:
    """Application factory.

    Passing a prebuilt container skips database bootstrap (used by tests).
    """

    load_dotenv(override=False)
    app = Flask(__name__, template_folder="../../../templates", static_folder="../../../static")

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)

    logging.basicConfig(
        level=str(getattr(settings, "LOG_LEVEL", "INFO")).upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    app.secret_key = getattr(settings, "SECRET_KEY")
    db_config = getattr(settings, "DB_CONFIG")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))
    app.config["SCAN_API_KEY"] = getattr(settings, "SCAN_API_KEY", "")
    app.config["UPLOAD_FOLDER"] = str(getattr(settings, "UPLOAD_FOLDER", REPO_ROOT / "uploads" / "photos"))
    idle_minutes = int(getattr(settings, "SESSION_IDLE_MINUTES", DEFAULT_SESSION_IDLE_MINUTES))
    app.permanent_session_lifetime = timedelta(minutes=idle_minutes)

    if container is None:
        logger.info(
            "settings=%s db=%s@%s:%s/%s",
            settings_module,
            db_config.get("user"),
            db_config.get("host"),
            db_config.get("port", 3306),
            db_config.get("database"),
        )

        if bool(getattr(settings, "AUTO_INIT_DB", False)):
            apply_schema(db_config, schema_path=REPO_ROOT / "database" / "schema.sql")
            logger.info("schema ready (tables=%d)", len(list_tables(db_config)))
        if bool(getattr(settings, "AUTO_SEED_DB", False)):
            apply_seed_sql(db_config, seed_path=REPO_ROOT / "database" / "seed.sql")
            ensure_admin_user(db_config)
            logger.info("demo seed ready")

        container = build_container(db_config=db_config)

    @app.before_request
    def refresh_idle_session():
        # Permanent sessions are re-issued on each request, so the lifetime acts as an idle timeout.
        if "user_id" in session:
            session.permanent = True

    register_users(app, container)
    register_settings(app, container)
    register_students(app, container)
    register_attendance(app, container)
    register_reports(app, container)
    register_academic_years(app, container)

    return app
