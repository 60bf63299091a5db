from __future__ import annotations

import importlib
import logging
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from flask import Flask, jsonify

from config import get_settings_module

from .container import Container, build_container
from .core.exceptions import AuthorizationError, DomainError, ExternalServiceError, NotFoundError, ValidationError
from .core.logging_setup import setup_logging
from .database.bootstrap import apply_schema, list_tables
from .payments.controller import register as register_payments
from .progress.controller import register as register_progress
from .risk.controller import register as register_risk
from .visits.controller import register as register_visits

log = logging.getLogger(__name__)

_STATUS_BY_ERROR = (
    (ValidationError, 400),
    (AuthorizationError, 403),
    (NotFoundError, 404),
    (ExternalServiceError, 502),
)


def _status_for(err: DomainError) -> int:
    for cls, status in _STATUS_BY_ERROR:
        if isinstance(err, cls):
            return status
    return 400


def _register_error_handlers(app: Flask) -> None:
    @app.errorhandler(DomainError)
    def handle_domain_error(err: DomainError):
        status = _status_for(err)
        if status >= 500:
            log.error("collaborator failure: %s", err)
        return jsonify({"ok": False, "error": str(err)}), status

    @app.errorhandler(Exception)
    def handle_unexpected(err: Exception):
        # Let Flask render its own HTTP errors (404 routes, 405 methods).
        code = getattr(err, "code", None)
        if isinstance(code, int) and 400 <= code < 500:
            return jsonify({"ok": False, "error": getattr(err, "description", str(err))}), code
        log.exception("unhandled error")
        return jsonify({"ok": False, "error": "Internal server error"}), 500


def create_app(container: Optional[Container] = None) -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    setup_logging(getattr(settings, "LOG_LEVEL", None))

    app.secret_key = getattr(settings, "SECRET_KEY")
    db_config = getattr(settings, "DB_CONFIG")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))

    log.info(
        "settings=%s db=%s@%s:%s/%s",
        settings_module,
        db_config.get("user"),
        db_config.get("host"),
        db_config.get("port", 3306),
        db_config.get("database"),
    )
    if getattr(settings, "ALLOW_FAKE_FACE_MATCH", False):
        log.warning("ALLOW_FAKE_FACE_MATCH is on: face verification is bypassed")

    if container is None:
        if bool(getattr(settings, "AUTO_INIT_DB", False)):
            schema_path = Path(__file__).resolve().parents[3] / "database" / "schema.sql"
            apply_schema(db_config, schema_path=schema_path)
            log.info("schema ready tables=%d", len(list_tables(db_config)))
        container = build_container(db_config=db_config, settings=settings)

    _register_error_handlers(app)
    register_visits(app, container)
    register_progress(app, container)
    register_payments(app, container)
    register_risk(app, container)

    return app
