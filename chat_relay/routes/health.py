"""Health check endpoint for the relay gateway.

Exposes GET /health. Reports whether a provider credential is configured
without contacting the provider.

Response format:
    {
        "status": "healthy" | "degraded",
        "version": "1.0.0",
        "model": "...",
        "credential_configured": true | false
    }
"""
from __future__ import annotations

from flask import Blueprint, current_app, jsonify

from chat_relay import __version__

health_bp = Blueprint("health", __name__)


@health_bp.route("/health", methods=["GET"])
def health_check():
    """Application health check endpoint.

    Returns:
        200 if a credential is configured.
        503 otherwise, since every chat request would fail.
    """
    settings = current_app.config["SETTINGS"]
    configured = settings.credential_configured

    response = {
        "status": "healthy" if configured else "degraded",
        "version": __version__,
        "model": settings.OPENROUTER_MODEL,
        "credential_configured": configured,
    }

    return jsonify(response), 200 if configured else 503
