"""Custom exception hierarchy for the chat relay.

All application-specific exceptions inherit from ChatRelayError,
enabling uniform error handling in the global error handlers and in
the conversation store.

Hierarchy:
    ChatRelayError (base)
    ├── ConfigurationError      — Gateway has no provider credential
    ├── UpstreamError           — Provider call failed (network, non-2xx, bad JSON)
    ├── InputValidationError    — Gateway request body failed validation
    └── RelayError              — Client could not get a usable reply from the gateway
        └── RelayNetworkError   — Gateway unreachable
"""
from __future__ import annotations

MISSING_CREDENTIAL_MESSAGE = "API key not configured"
NETWORK_ERROR_MESSAGE = "Network error: Unable to connect to the server"


class ChatRelayError(Exception):
    """Base exception for the chat relay."""

    def __init__(self, message: str, status_code: int = 500) -> None:
        self.message = message
        self.status_code = status_code
        super().__init__(self.message)


# ── Gateway Errors ────────────────────────────────────────────────────

class ConfigurationError(ChatRelayError):
    """Raised when the gateway is asked to forward without a credential."""

    def __init__(self, message: str = MISSING_CREDENTIAL_MESSAGE) -> None:
        super().__init__(message, status_code=500)


class UpstreamError(ChatRelayError):
    """Raised when the outbound call to the provider fails for any reason."""

    def __init__(self, message: str, upstream_status: int | None = None) -> None:
        self.upstream_status = upstream_status
        super().__init__(message, status_code=500)


class InputValidationError(ChatRelayError):
    """Raised when the gateway request body fails validation."""

    def __init__(self, message: str) -> None:
        super().__init__(message, status_code=422)


# ── Client Errors ─────────────────────────────────────────────────────

class RelayError(ChatRelayError):
    """Raised by the relay client when a turn cannot be completed.

    `upstream_status` is the gateway's HTTP status when one was received.
    """

    def __init__(self, message: str, upstream_status: int | None = None) -> None:
        self.upstream_status = upstream_status
        super().__init__(message, status_code=upstream_status or 502)


class RelayNetworkError(RelayError):
    """Raised when the gateway cannot be reached at all."""

    def __init__(self) -> None:
        super().__init__(NETWORK_ERROR_MESSAGE)
