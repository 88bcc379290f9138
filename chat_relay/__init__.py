"""Chat Relay — Flask application package.

A same-origin gateway that forwards single chat turns to an LLM provider
while keeping the provider credential server-side, plus the client-side
pieces (relay client, conversation store, terminal front end) that talk
to it.

The `create_app()` factory initializes the gateway with its
configuration, middleware, services and blueprints.
"""
from __future__ import annotations

import structlog
from flask import Flask

from chat_relay.config import Settings, get_settings
from chat_relay.middleware.cors import init_cors_middleware
from chat_relay.middleware.error_handlers import register_error_handlers
from chat_relay.middleware.request_id import init_request_id_middleware
from chat_relay.utils.logger import setup_logging

__version__ = "1.0.0"


def create_app(settings: Settings | None = None) -> Flask:
    """Application factory pattern.

    Creates and configures the gateway with:
    - Pydantic-based configuration (built once, injected here)
    - Structured logging (structlog)
    - Request ID middleware
    - Fixed CORS policy on /api/*
    - Global JSON error handlers
    - The provider gateway service
    - Blueprint registration (health, chat)

    Args:
        settings: Settings to use. Defaults to the cached environment settings.

    Returns:
        Configured Flask application instance.
    """
    if settings is None:
        settings = get_settings()

    # ── Logging (must be first so all subsequent logs are formatted) ──
    setup_logging(log_level=settings.LOG_LEVEL, log_format=settings.LOG_FORMAT)
    logger = structlog.get_logger(__name__)

    # ── Flask app ─────────────────────────────────────────────────────
    app = Flask(__name__)
    app.config["SECRET_KEY"] = settings.SECRET_KEY
    app.config["FLASK_DEBUG"] = settings.FLASK_DEBUG
    app.config["SETTINGS"] = settings
    # Provider bodies are relayed in their own key order
    app.json.sort_keys = False

    # ── Middleware ─────────────────────────────────────────────────────
    init_request_id_middleware(app)
    init_cors_middleware(app)
    register_error_handlers(app)

    # ── Services ──────────────────────────────────────────────────────
    _init_services(app, settings)

    # ── Startup validation ────────────────────────────────────────────
    _validate_startup(settings, logger)

    # ── Blueprints ────────────────────────────────────────────────────
    from chat_relay.routes.chat import chat_bp
    from chat_relay.routes.health import health_bp
    app.register_blueprint(health_bp)
    app.register_blueprint(chat_bp)

    logger.info(
        "app_started",
        env=settings.FLASK_ENV,
        model=settings.OPENROUTER_MODEL,
        log_level=settings.LOG_LEVEL,
    )

    return app


def _init_services(app: Flask, settings: Settings) -> None:
    """Build the provider gateway and store it on `app.config`."""
    from chat_relay.services.gateway import ProviderGateway

    app.config["PROVIDER_GATEWAY"] = ProviderGateway.from_settings(settings)


def _validate_startup(settings: Settings, logger) -> None:
    """Warn about configuration that will make requests fail or is unsafe.

    Non-blocking: a gateway without a credential still serves preflight
    and health requests.
    """
    if not settings.credential_configured:
        logger.warning(
            "startup_check_failed",
            check="credential",
            detail="OPENROUTER_API_KEY is not set; chat requests will return 500",
        )
    if not settings.OPENROUTER_VERIFY_TLS:
        logger.warning(
            "startup_check_failed",
            check="tls",
            detail="TLS verification toward the provider is disabled",
        )
