from __future__ import annotations

import importlib
import logging
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from flask import Flask, jsonify
from werkzeug.exceptions import HTTPException

from config import get_settings_module

from .attendance.controller import register as register_attendance
from .checkin.controller import register as register_checkin
from .container import Container, build_container
from .core.constants import MAX_PHOTO_BYTES, REQUEST_BODY_HEADROOM_BYTES
from .core.exceptions import DomainError
from .database.bootstrap import apply_schema, list_tables
from .faces.controller import register as register_faces
from .geofences.controller import register as register_geofences
from .members.controller import register as register_members

logger = logging.getLogger("geo_attendance")


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, str(level).upper(), logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


def request_size_limit(max_photo_bytes: int) -> int:
    """Largest accepted request body: one base64 photo plus the JSON around it."""
    return 4 * ((int(max_photo_bytes) + 2) // 3) + REQUEST_BODY_HEADROOM_BYTES


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(DomainError)
    def handle_domain_error(exc: DomainError):
        return jsonify(exc.to_dict()), exc.http_status

    @app.errorhandler(HTTPException)
    def handle_http_error(exc: HTTPException):
        return jsonify({"success": False, "error": exc.name.lower().replace(" ", "_"), "message": exc.description}), exc.code

    @app.errorhandler(Exception)
    def handle_unexpected(exc: Exception):
        logger.exception("Unhandled error")
        return jsonify({"success": False, "error": "internal_error", "message": "Internal server error"}), 500


def create_app(container: Optional[Container] = None) -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    app.secret_key = getattr(settings, "SECRET_KEY")
    db_config = getattr(settings, "DB_CONFIG")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))
    app.config["MAX_CONTENT_LENGTH"] = getattr(settings, "MAX_CONTENT_LENGTH", None) or request_size_limit(
        getattr(settings, "MAX_PHOTO_BYTES", MAX_PHOTO_BYTES)
    )

    configure_logging(getattr(settings, "LOG_LEVEL", "INFO"))
    logger.info(
        "settings=%s db=%s@%s:%s/%s",
        settings_module,
        db_config.get("user"),
        db_config.get("host"),
        db_config.get("port", 3306),
        db_config.get("database"),
    )

    if container is None:
        if bool(getattr(settings, "AUTO_INIT_DB", False)):
            schema_path = Path(__file__).resolve().parents[3] / "database" / "schema.sql"
            apply_schema(db_config, schema_path=schema_path)
            logger.info("schema ready (tables=%s)", len(list_tables(db_config)))
        container = build_container(db_config=db_config, settings=settings)

    if not getattr(settings, "AI_GATEWAY_API_KEY", None):
        logger.warning("AI_GATEWAY_API_KEY is not set; check-in and check-out will be refused")

    register_error_handlers(app)

    @app.route("/health", methods=["GET"], endpoint="health")
    def health():
        return jsonify({"status": "ok"})

    register_checkin(app, container)
    register_attendance(app, container)
    register_geofences(app, container)
    register_faces(app, container)
    register_members(app, container)

    return app
