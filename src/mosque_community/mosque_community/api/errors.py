from __future__ import annotations

import logging
from typing import Any, Optional

from flask import Flask, jsonify
from pydantic import ValidationError as SchemaValidationError
from werkzeug.exceptions import HTTPException

from ..common.pagination import Page
from ..core.exceptions import DomainError

logger = logging.getLogger(__name__)


def ok(data: Any = None, *, status: int = 200, **extra: Any):
    body = {"success": True, "data": data}
    body.update(extra)
    return jsonify(body), status


def ok_page(page: Page, serialize) -> Any:
    return ok([serialize(item) for item in page.items], pagination=page.meta())


def error_body(kind: str, message: str, *, details: Optional[Any] = None) -> dict:
    error = {"kind": kind, "message": message}
    if details is not None:
        error["details"] = details
    return {"success": False, "error": error}


def _summarize(exc: SchemaValidationError) -> str:
    parts = []
    for err in exc.errors():
        field = ".".join(str(p) for p in err.get("loc", ())) or "body"
        parts.append(f"{field}: {err.get('msg', 'invalid value')}")
    return "; ".join(parts) or "Invalid request"


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(DomainError)
    def handle_domain_error(exc: DomainError):
        if exc.http_status >= 500:
            logger.error("%s: %s", type(exc).__name__, exc.message)
        return jsonify(error_body(exc.kind, exc.message)), exc.http_status

    @app.errorhandler(SchemaValidationError)
    def handle_schema_error(exc: SchemaValidationError):
        return jsonify(error_body("validation_error", _summarize(exc))), 400

    @app.errorhandler(HTTPException)
    def handle_http_error(exc: HTTPException):
        kind = {404: "not_found", 405: "validation_error", 400: "validation_error"}.get(exc.code or 500, "http_error")
        return jsonify(error_body(kind, exc.description or exc.name)), exc.code or 500

    @app.errorhandler(Exception)
    def handle_unexpected(exc: Exception):
        logger.exception("unhandled error")
        return jsonify(error_body("infrastructure_error", "Internal server error")), 500
