"""JSON error bodies for content-layer exceptions, shared by every blueprint."""
from __future__ import annotations

from flask import Flask, current_app, jsonify
from pydantic import ValidationError

from virtualmark.content.errors import (
    AuthorizationError,
    ContentError,
    ContentValidationError,
    PersistenceError,
    RecordNotFoundError,
)


def schema_errors(e: ValidationError) -> list[str]:
    """Flatten a pydantic error into ``field: message`` strings."""
    messages = []
    for err in e.errors():
        field = ".".join(str(part) for part in err["loc"]) or "body"
        messages.append(f"{field}: {err['msg']}")
    return messages


def content_error_response(e: ContentError):
    if isinstance(e, ContentValidationError):
        return jsonify({"error": "validation_failed", "message": str(e), "errors": e.errors}), 400
    if isinstance(e, AuthorizationError):
        return jsonify({"error": "unauthorized", "message": str(e)}), 401
    if isinstance(e, RecordNotFoundError):
        return jsonify({"error": "not_found", "message": str(e)}), 404
    if isinstance(e, PersistenceError):
        current_app.logger.error(f"Store rejected write ({e.code}): {e.detail}")
        if e.is_permission_denied:
            return jsonify({"error": "forbidden", "message": str(e)}), 403
        return jsonify({"error": "persistence_failed", "message": str(e)}), 502
    current_app.logger.error(f"Unhandled content error: {e}")
    return jsonify({"error": "server_error", "message": "internal server error"}), 500


def schema_error_response(e: ValidationError):
    errors = schema_errors(e)
    return jsonify({"error": "validation_failed", "message": "Invalid request body", "errors": errors}), 400


def register_error_handlers(app: Flask) -> None:
    app.register_error_handler(ContentError, content_error_response)
    app.register_error_handler(ValidationError, schema_error_response)

    @app.errorhandler(400)
    def bad_request(e):
        return jsonify({"error": "bad_request", "message": str(e)}), 400

    @app.errorhandler(401)
    def unauthorized(e):
        return jsonify({"error": "unauthorized", "message": str(e)}), 401

    @app.errorhandler(403)
    def forbidden(e):
        return jsonify({"error": "forbidden", "message": str(e)}), 403

    @app.errorhandler(404)
    def not_found(e):
        return jsonify({"error": "not_found", "message": "resource not found"}), 404

    @app.errorhandler(429)
    def rate_limited(e):
        return jsonify({"error": "rate_limited", "message": "too many requests"}), 429

    @app.errorhandler(500)
    def server_error(e):
        return jsonify({"error": "server_error", "message": "internal server error"}), 500
