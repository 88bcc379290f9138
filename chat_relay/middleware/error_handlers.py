"""Global Flask error handlers for consistent JSON error responses.

The relay's clients read a single string field, so every error is
returned as:
    { "error": "..." }
with the matching HTTP status code.

Usage:
    from chat_relay.middleware.error_handlers import register_error_handlers
    register_error_handlers(app)
"""
from __future__ import annotations

import structlog
from flask import Flask, jsonify
from werkzeug.exceptions import HTTPException

from chat_relay.utils.exceptions import ChatRelayError

logger = structlog.get_logger(__name__)


def error_response(message: str, code: int):
    """Create a JSON error response.

    Returns:
        Tuple of (response, status_code).
    """
    return jsonify({"error": message}), code


def register_error_handlers(app: Flask) -> None:
    """Register global error handlers on the Flask app.

    Args:
        app: Flask application instance.
    """

    @app.errorhandler(ChatRelayError)
    def handle_relay_error(e: ChatRelayError):
        logger.warning(
            "relay_error",
            error=e.message,
            error_type=type(e).__name__,
            status_code=e.status_code,
        )
        return error_response(e.message, e.status_code)

    @app.errorhandler(HTTPException)
    def handle_http_exception(e: HTTPException):
        """Catch any werkzeug HTTP error (404, 405, ...)."""
        return error_response(e.description or e.name, e.code or 500)

    @app.errorhandler(Exception)
    def handle_unexpected_error(e: Exception):
        """Last resort handler for unhandled exceptions."""
        logger.error(
            "unexpected_error",
            error=str(e),
            error_type=type(e).__name__,
            exc_info=True,
        )
        return error_response("An unexpected error occurred", 500)
