"""Standardised API error responses.

Usage
-----
    from app.utils.errors import api_error, E

    return api_error(E.NOT_FOUND, "Task not found")
    return api_error(E.VALIDATION_REQUIRED, "url is required")
"""

from __future__ import annotations

from flask import jsonify


# ── Error code constants ──────────────────────────────────────────────
class E:
    """Machine-readable error code constants (``ERR_`` prefix)."""

    # Validation – HTTP 400
    VALIDATION_REQUIRED = "ERR_VALIDATION_REQUIRED"
    VALIDATION_INVALID = "ERR_VALIDATION_INVALID"
    DUPLICATE_NAME = "ERR_DUPLICATE_NAME"
    REPLICATION = "ERR_REPLICATION"

    # Not-found – HTTP 404
    NOT_FOUND = "ERR_NOT_FOUND"

    # Server – HTTP 500
    DATABASE = "ERR_DATABASE"
    INTERNAL = "ERR_INTERNAL"


# ── Default HTTP status mapping ───────────────────────────────────────
_DEFAULT_STATUS: dict[str, int] = {
    E.VALIDATION_REQUIRED: 400,
    E.VALIDATION_INVALID: 400,
    E.DUPLICATE_NAME: 400,
    E.REPLICATION: 400,
    E.NOT_FOUND: 404,
    E.DATABASE: 500,
    E.INTERNAL: 500,
}


def api_error(
    code: str,
    message: str,
    *,
    status: int | None = None,
    details: dict | None = None,
):
    """Return a standard JSON error response.

    Parameters
    ----------
    code : str
        Machine-readable error code (use ``E.*`` constants).
    message : str
        Human-readable explanation for developers / UI.
    status : int, optional
        HTTP status override.  Falls back to ``_DEFAULT_STATUS[code]``,
        then to ``400``.
    details : dict, optional
        Extra structured payload (field errors, etc.).

    Returns
    -------
    tuple[Response, int]
        ``(jsonify(body), http_status)`` – drop-in for Flask views.
    """

    http_status = status or _DEFAULT_STATUS.get(code, 400)

    body: dict = {
        "error": message,
        "code": code,
    }
    if details:
        body["details"] = details

    return jsonify(body), http_status


def register_error_handlers(app):
    """Map the platform exception hierarchy to JSON responses, app-wide."""
    import logging

    from flask import request
    from sqlalchemy.exc import SQLAlchemyError

    from app.core.exceptions import (
        DuplicateError,
        NotFoundError,
        ReplicationError,
        ValidationError,
    )
    from app.models import db

    logger = logging.getLogger(__name__)

    @app.errorhandler(NotFoundError)
    def _handle_not_found(error: NotFoundError):
        logger.info("Not found: %s", error)
        return api_error(E.NOT_FOUND, f"{error.resource} not found")

    @app.errorhandler(ValidationError)
    def _handle_validation(error: ValidationError):
        missing = "required" in error.details.values()
        code = E.VALIDATION_REQUIRED if missing else E.VALIDATION_INVALID
        return api_error(code, error.message, details=error.details)

    @app.errorhandler(DuplicateError)
    def _handle_duplicate(error: DuplicateError):
        return api_error(E.DUPLICATE_NAME, str(error), details={"field": error.field})

    @app.errorhandler(ReplicationError)
    def _handle_replication(error: ReplicationError):
        return api_error(E.REPLICATION, str(error))

    @app.errorhandler(SQLAlchemyError)
    def _handle_storage(error: SQLAlchemyError):
        db.session.rollback()
        logger.exception("Database error endpoint=%s", request.endpoint)
        return api_error(E.DATABASE, "Internal server error")

    @app.errorhandler(404)
    def _handle_404(e):
        return {"error": "Not found", "path": request.path}, 404

    @app.errorhandler(405)
    def _handle_405(e):
        return {"error": "Method not allowed"}, 405

    @app.errorhandler(413)
    def _handle_413(e):
        return {"error": "Request body too large"}, 413

    @app.errorhandler(415)
    def _handle_415(e):
        return {"error": e.description}, 415

    @app.errorhandler(429)
    def _handle_429(e):
        return {"error": "Too many requests", "retry_after": e.description}, 429

    @app.errorhandler(500)
    def _handle_500(e):
        logger.error("500 error: %s", e, exc_info=True)
        return api_error(E.INTERNAL, "Internal server error")
