import logging
import uuid
from flask import g, request, has_request_context


class RequestIdFilter(logging.Filter):
    """Stamp every log record with the id of the request that emitted it."""

    def filter(self, record):
        record.request_id = getattr(g, "request_id", "-") if has_request_context() else "-"
        return True


def init_request_id(app):
    for handler in app.logger.handlers:
        handler.addFilter(RequestIdFilter())

    @app.before_request
    def _assign_request_id():
        g.request_id = request.headers.get("X-Request-Id") or str(uuid.uuid4())

    @app.after_request
    def _add_request_id_header(response):
        if hasattr(g, "request_id"):
            response.headers["X-Request-Id"] = g.request_id
        return response
