"""Per-request correlation ID for the gateway.

A caller-supplied X-Request-ID is reused only when it is a short token
of letters, digits, dots, dashes and underscores; anything else is
replaced with a fresh UUID so client input never lands in logs or
response headers unchecked. The ID is bound into structlog's context
for every line logged while the request is handled.
"""
from __future__ import annotations

import re
import uuid

import structlog
from flask import Flask, g, request

REQUEST_ID_HEADER = "X-Request-ID"

_VALID_REQUEST_ID = re.compile(r"[A-Za-z0-9._-]{1,64}")


def resolve_request_id(supplied: str | None) -> str:
    """Return the caller's ID if it is well formed, otherwise a new UUID."""
    if supplied and _VALID_REQUEST_ID.fullmatch(supplied):
        return supplied
    return str(uuid.uuid4())


def init_request_id_middleware(app: Flask) -> None:
    logger = structlog.get_logger(__name__)

    @app.before_request
    def bind_request_id() -> None:
        g.request_id = resolve_request_id(request.headers.get(REQUEST_ID_HEADER))

        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(
            request_id=g.request_id,
            method=request.method,
            path=request.path,
        )
        logger.debug("relay_request_started")

    @app.after_request
    def echo_request_id(response):
        response.headers[REQUEST_ID_HEADER] = g.get("request_id") or resolve_request_id(None)
        logger.debug("relay_request_completed", status=response.status_code)
        return response
