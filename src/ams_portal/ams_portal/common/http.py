from __future__ import annotations

import logging
from datetime import date
from typing import Any, Optional

from flask import Flask, jsonify, request
from werkzeug.exceptions import HTTPException

from ..core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    DomainError,
    NotFoundError,
    PolicyViolation,
    ValidationError,
)
from .datetime_utils import parse_iso_date

logger = logging.getLogger(__name__)


def json_body() -> dict[str, Any]:
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


def parse_json_date(value: Optional[str], field_name: str) -> date:
    if not value:
        raise ValidationError(f"{field_name} is required")
    return parse_iso_date(str(value))


def error_response(message: str, status: int, **extra):
    payload = {"success": False, "message": message}
    payload.update({k: v for k, v in extra.items() if v is not None})
    return jsonify(payload), status


def register_error_handlers(app: Flask) -> None:
    """Translate domain exceptions raised by services into JSON responses."""

    @app.errorhandler(PolicyViolation)
    def _policy(e: PolicyViolation):
        return error_response(str(e), 400, rule=e.rule)

    @app.errorhandler(ValidationError)
    def _validation(e: ValidationError):
        return error_response(str(e), 400)

    @app.errorhandler(AuthenticationError)
    def _authentication(e: AuthenticationError):
        return error_response(str(e), 401)

    @app.errorhandler(AuthorizationError)
    def _authorization(e: AuthorizationError):
        return error_response(str(e), 403)

    @app.errorhandler(NotFoundError)
    def _not_found(e: NotFoundError):
        return error_response(str(e), 404)

    @app.errorhandler(DomainError)
    def _domain(e: DomainError):
        return error_response(str(e), 400)

    @app.errorhandler(HTTPException)
    def _http(e: HTTPException):
        return error_response(e.description or e.name, e.code or 500)

    @app.errorhandler(Exception)
    def _unhandled(e: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.path)
        return error_response("Internal server error", 500)
