from __future__ import annotations

import importlib
import logging
import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from flask import Flask
from flask_socketio import SocketIO

from config import get_settings_module

from .attendance.controller import register as register_attendance
from .auth.controller import register as register_auth
from .auth.decorators import CONTAINER_KEY
from .common.http import register_error_handlers
from .common.logging_utils import configure_logging
from .container import Container, build_container
from .database.bootstrap import apply_schema, ensure_admin_user, list_tables
from .leaves.controller import register as register_leaves
from .notifications.controller import register as register_notifications
from .notifications.socket_events import register_socket_events
from .payroll.controller import register as register_payroll
from .reports.controller import register as register_reports
from .shifts.controller import register as register_shifts
from .uploads.controller import register as register_uploads
from .users.controller import register as register_users
from .workdays.controller import register as register_holidays

logger = logging.getLogger(__name__)

socketio = SocketIO()


def create_app(container: Optional[Container] = None) -> Flask:
    """Build the Flask app; a prebuilt container skips database bootstrap."""
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    app.secret_key = getattr(settings, "SECRET_KEY")
    db_config = getattr(settings, "DB_CONFIG")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))
    app.config["MAX_CONTENT_LENGTH"] = getattr(settings, "MAX_CONTENT_LENGTH", None)

    configure_logging(getattr(settings, "LOG_LEVEL", "INFO"), getattr(settings, "LOG_FILE", None))
    logger.info(
        "settings=%s db=%s@%s:%s/%s",
        settings_module,
        db_config.get("user"),
        db_config.get("host"),
        db_config.get("port", 3306),
        db_config.get("database"),
    )

    if container is None and bool(getattr(settings, "AUTO_INIT_DB", False)):
        schema_path = Path(__file__).resolve().parents[3] / "database" / "schema.sql"
        apply_schema(db_config, schema_path=schema_path)
        logger.info("schema ready (tables=%d)", len(list_tables(db_config)))
        admin_email = getattr(settings, "ADMIN_EMAIL", None)
        admin_password = getattr(settings, "ADMIN_PASSWORD", None)
        if admin_email and admin_password:
            ensure_admin_user(db_config, email=admin_email, password=admin_password)

    socketio.init_app(app, cors_allowed_origins=getattr(settings, "CORS_ALLOWED_ORIGINS", "*"))
    if container is None:
        container = build_container(db_config=db_config, settings=settings, emitter=socketio)
    app.extensions[CONTAINER_KEY] = container

    register_error_handlers(app)
    register_auth(app, container)
    register_users(app, container)
    register_shifts(app, container)
    register_holidays(app, container)
    register_attendance(app, container)
    register_leaves(app, container)
    register_payroll(app, container)
    register_reports(app, container)
    register_notifications(app, container)
    register_uploads(app, container)
    register_socket_events(socketio, container)

    @app.get("/api/health", endpoint="health")
    def health():
        return {"status": "ok"}

    return app


def run() -> None:
    app = create_app()
    socketio.run(
        app,
        host=os.getenv("HOST", "0.0.0.0"),
        port=int(os.getenv("PORT", "5000")),
        debug=app.config["DEBUG"],
        allow_unsafe_werkzeug=app.config["DEBUG"],
    )


if __name__ == "__main__":
    run()
