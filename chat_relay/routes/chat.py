"""Chat blueprint — the relay gateway endpoint.

Routes:
    OPTIONS /api/chat → Preflight, empty 200
    POST    /api/chat → Forward one prompt to the provider

CORS headers are attached to both by the CORS middleware.
"""
from __future__ import annotations

import structlog
from flask import Blueprint, current_app, jsonify, request
from pydantic import ValidationError

from chat_relay.models.requests import ChatRequest
from chat_relay.utils.exceptions import ConfigurationError, InputValidationError

logger = structlog.get_logger(__name__)

chat_bp = Blueprint("chat", __name__)


@chat_bp.route("/api/chat", methods=["POST", "OPTIONS"])
def chat():
    """Forward a prompt and relay the provider's reply verbatim.

    Request JSON:
        { "prompt": "Tell me a joke" }   // optional, defaults to "Hello"

    Response JSON:
        200: the provider's body, unchanged
        500: { "error": "..." } on a missing credential or upstream failure
    """
    # Preflight never touches the credential or the provider
    if request.method == "OPTIONS":
        return "", 200

    settings = current_app.config["SETTINGS"]
    api_key = settings.OPENROUTER_API_KEY
    if not api_key:
        logger.error("relay_credential_missing")
        raise ConfigurationError()

    req = _parse_request()

    gateway = current_app.config["PROVIDER_GATEWAY"]
    body = gateway.forward(req.prompt, api_key=api_key)

    return jsonify(body), 200


def _parse_request() -> ChatRequest:
    """Read the prompt from the JSON body, falling back to form/query values."""
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        data = {}
    if "prompt" not in data and "prompt" in request.values:
        data = {"prompt": request.values["prompt"]}

    try:
        return ChatRequest(**data)
    except ValidationError as e:
        errors = e.errors()
        message = errors[0].get("msg", "Validation error") if errors else "Invalid request"
        raise InputValidationError(message) from e
