"""Fixed cross-origin policy for the relay API.

Every response under the API prefix, including preflight replies and
error responses produced by the framework, carries the same three
permissive headers so a browser-hosted client can read it.

Usage:
    from chat_relay.middleware.cors import init_cors_middleware
    init_cors_middleware(app)
"""
from __future__ import annotations

from flask import Flask, request

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, POST, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type",
}


def init_cors_middleware(app: Flask, path_prefix: str = "/api/") -> None:
    """Attach the CORS headers to every response under `path_prefix`.

    Args:
        app: Flask application instance.
        path_prefix: Only requests whose path starts with this get the headers.
    """

    @app.after_request
    def attach_cors_headers(response):
        if request.path.startswith(path_prefix):
            response.headers.update(CORS_HEADERS)
        return response
