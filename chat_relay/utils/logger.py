"""Structured logging for the relay.

Every event passes through `redact_secrets` before rendering, so the
provider credential never reaches a log line: keys that name a
credential are masked wherever they appear in the event, and bearer
tokens embedded in string values are cut down to their scheme.

Usage:
    from chat_relay.utils.logger import setup_logging

    setup_logging(log_level="INFO", log_format="json")
"""
from __future__ import annotations

import logging
import re
from typing import Any

import structlog

REDACTED = "[redacted]"

SECRET_KEYS = frozenset({
    "authorization",
    "api_key",
    "apikey",
    "openrouter_api_key",
    "secret_key",
    "x-api-key",
})

_BEARER = re.compile(r"(Bearer\s+)\S+", re.IGNORECASE)


def _scrub(value: Any) -> Any:
    if isinstance(value, dict):
        return {
            k: REDACTED if isinstance(k, str) and k.lower() in SECRET_KEYS else _scrub(v)
            for k, v in value.items()
        }
    if type(value) in (list, tuple):
        return type(value)(_scrub(v) for v in value)
    if isinstance(value, str):
        return _BEARER.sub(rf"\g<1>{REDACTED}", value)
    return value


def redact_secrets(logger: Any, method_name: str, event_dict: dict[str, Any]) -> dict[str, Any]:
    """structlog processor masking credentials in an event, nested values included."""
    return _scrub(event_dict)


def setup_logging(log_level: str = "INFO", log_format: str = "json") -> None:
    """Configure structlog for the relay and the CLI.

    Args:
        log_level: DEBUG, INFO, WARNING, ERROR or CRITICAL.
        log_format: 'json' for the served gateway, 'console' for local runs.
    """
    processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        redact_secrets,
    ]

    if log_format == "json":
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=True))

    level = getattr(logging, log_level.upper(), logging.INFO)

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )

    # werkzeug and httpx log through stdlib
    logging.basicConfig(format="%(message)s", level=level)
