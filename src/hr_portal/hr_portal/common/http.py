from __future__ import annotations

import logging
from typing import Any, Dict

from flask import Flask, jsonify, request
from werkzeug.exceptions import HTTPException

from ..core.exceptions import DomainError, SchedulingConflictError

logger = logging.getLogger(__name__)


def json_body() -> Dict[str, Any]:
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


def ok(payload: Any = None, status: int = 200, **extra):
    body: Dict[str, Any] = {"success": True}
    if payload is not None:
        body["data"] = payload
    body.update(extra)
    return jsonify(body), status


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(SchedulingConflictError)
    def handle_conflict(e: SchedulingConflictError):
        body = {"success": False, "error": str(e)}
        body.update(e.report.to_dict())
        return jsonify(body), e.status_code

    @app.errorhandler(DomainError)
    def handle_domain(e: DomainError):
        return jsonify({"success": False, "error": str(e)}), e.status_code

    @app.errorhandler(HTTPException)
    def handle_http(e: HTTPException):
        return jsonify({"success": False, "error": e.description}), e.code

    @app.errorhandler(Exception)
    def handle_unexpected(e: Exception):
        logger.exception("unhandled error on %s %s", request.method, request.path)
        message = str(e) if app.config.get("DEBUG") else "Internal server error"
        return jsonify({"success": False, "error": message}), 500
