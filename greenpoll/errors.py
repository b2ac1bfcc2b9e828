from typing import Any, Optional

from flask import jsonify, g, current_app
from werkzeug.exceptions import HTTPException


class ServiceError(Exception):
    """
    Base for every failure a service can report.

    ``kind`` is the stable name of the failure class; routes never need to
    inspect the message to decide how to respond.
    """

    kind = "SERVICE_ERROR"
    status_code = 400

    def __init__(self, message: str, *, field: Optional[str] = None, details: Optional[Any] = None):
        super().__init__(message)
        self.message = message
        self.field = field
        self.details = details

    def to_dict(self) -> dict:
        error = {"code": self.kind, "message": self.message, "details": self.details}
        if self.field is not None:
            error["field"] = self.field
        return error


class ValidationError(ServiceError):
    kind = "VALIDATION_ERROR"
    status_code = 400


class NotFound(ServiceError):
    kind = "NOT_FOUND"
    status_code = 404


class InvalidCredentials(ServiceError):
    kind = "INVALID_CREDENTIALS"
    status_code = 401

    def __init__(self, message: str = "Invalid email or password"):
        super().__init__(message)


class InvalidToken(ServiceError):
    kind = "INVALID_TOKEN"
    status_code = 400

    def __init__(self):
        super().__init__("Invalid token")


class PermissionDenied(ServiceError):
    kind = "PERMISSION_DENIED"
    status_code = 403


class StoreError(ServiceError):
    kind = "STORE_ERROR"
    status_code = 500

    def __init__(self, message: str = "A storage error occurred", **kwargs):
        super().__init__(message, **kwargs)


def _payload(code: str, message: str, details=None, status=400, field=None):
    error = {
        "code": code,
        "message": message,
        "details": details or None,
    }
    if field is not None:
        error["field"] = field
    return (
        jsonify({
            "success": False,
            "error": error,
            "request_id": getattr(g, "request_id", None),
        }),
        status,
    )


def register_error_handlers(app):
    @app.errorhandler(ServiceError)
    def handle_service_error(e: ServiceError):
        if isinstance(e, StoreError):
            current_app.logger.error("Store failure surfaced to client: %s", e.message)
        return _payload(
            code=e.kind,
            message=e.message,
            details=e.details,
            status=e.status_code,
            field=e.field,
        )

    # Generic HTTP errors (404, 405, 415, etc.)
    @app.errorhandler(HTTPException)
    def handle_http_exception(e: HTTPException):
        desc = e.description

        # If we pass structured error info via abort(description=dict)
        if isinstance(desc, dict):
            code = desc.get("code") or e.name.replace(" ", "_").upper()
            message = desc.get("message") or e.name
            details = desc.get("errors") or desc.get("details")
            return _payload(code=code, message=message, details=details, status=e.code or 400)

        return _payload(
            code=e.name.replace(" ", "_").upper(),
            message=desc or e.name,
            details=None,
            status=e.code or 400
        )

    @app.errorhandler(404)
    def handle_404(_):
        return _payload("NOT_FOUND", "Resource not found", status=404)

    @app.errorhandler(500)
    def handle_500(_):
        # Don't leak internals
        return _payload("INTERNAL_SERVER_ERROR", "An unexpected error occurred", status=500)
