"""Error taxonomy for the API and the JSON handlers that render it."""

from __future__ import annotations

from flask import jsonify
from werkzeug.exceptions import HTTPException


class RoutelyError(Exception):
    status_code = 500
    message = "Internal server error"

    def __init__(self, message: str | None = None, **extra):
        super().__init__(message or self.message)
        if message:
            self.message = message
        self.extra = extra

    def to_dict(self) -> dict:
        body = {"ok": False, "message": self.message}
        body.update(self.extra)
        return body


class ValidationError(RoutelyError):
    status_code = 400
    message = "Invalid request"


class Unauthorized(RoutelyError):
    status_code = 401
    message = "Unauthorized"


class Forbidden(RoutelyError):
    status_code = 403
    message = "Forbidden"


class NotFound(RoutelyError):
    status_code = 404
    message = "Not found"


class Conflict(RoutelyError):
    status_code = 409
    message = "Conflict"


class RateLimitExceeded(RoutelyError):
    """Policy rejection. The client has to wait for the window to slide."""

    status_code = 429
    message = "Too many requests. Please wait before trying again."


class PersistenceError(RoutelyError):
    status_code = 503
    message = "Storage temporarily unavailable, nothing was saved"


def register_error_handlers(app):
    @app.errorhandler(RoutelyError)
    def _routely_error(err: RoutelyError):
        if isinstance(err, PersistenceError):
            app.logger.error("persistence failure: %s", err)
        resp = jsonify(err.to_dict())
        resp.status_code = err.status_code
        retry_after = err.extra.get("retry_after_seconds")
        if retry_after is not None:
            resp.headers["Retry-After"] = str(int(retry_after))
        return resp

    @app.errorhandler(HTTPException)
    def _http_error(err: HTTPException):
        return jsonify({"ok": False, "message": err.description or err.name}), err.code or 500

    @app.errorhandler(Exception)
    def _unexpected(err: Exception):
        app.logger.exception("unhandled error: %s", err)
        return jsonify({"ok": False, "message": "Internal server error"}), 500
