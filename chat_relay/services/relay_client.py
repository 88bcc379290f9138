"""Client side of the relay: one prompt in, one provider reply out.

Posts `{"prompt": ...}` to the gateway's chat endpoint and maps the
outcome onto either the raw provider reply or a RelayError. The reply is
returned unmodified; turning it into display text is left to the
conversation store so the raw shape stays available for diagnostics.

Usage:
    from chat_relay.services.relay_client import RelayClient

    with RelayClient(base_url="http://localhost:5000") as client:
        reply = client.send_chat_message("Hello")
"""
from __future__ import annotations

from typing import Any

import httpx
import structlog

from chat_relay.config import Settings
from chat_relay.utils.exceptions import RelayError, RelayNetworkError

logger = structlog.get_logger(__name__)

CHAT_ENDPOINT = "/api/chat"

# Transport failures that mean the gateway could not be reached at all
CONNECTIVITY_ERRORS = (httpx.NetworkError, httpx.ConnectTimeout)


class RelayClient:
    """HTTP client for the relay gateway.

    The caller is responsible for passing a non-empty prompt.

    Args:
        base_url: Gateway base URL (no trailing slash).
        timeout: Request timeout in seconds.
        transport: Optional httpx transport (used by tests).
    """

    def __init__(
        self,
        base_url: str = "http://localhost:5000",
        timeout: float = 130.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._client = httpx.Client(
            base_url=base_url.rstrip("/"),
            timeout=httpx.Timeout(timeout, connect=10),
            headers={"Content-Type": "application/json"},
            transport=transport,
        )

    @classmethod
    def from_settings(cls, settings: Settings, transport: httpx.BaseTransport | None = None) -> "RelayClient":
        return cls(
            base_url=settings.RELAY_BASE_URL,
            timeout=settings.RELAY_TIMEOUT,
            transport=transport,
        )

    def close(self) -> None:
        """Close the underlying HTTP client."""
        self._client.close()

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.close()

    def send_chat_message(self, prompt: str) -> Any:
        """Send one prompt through the gateway.

        Args:
            prompt: The user's text, already checked for emptiness.

        Returns:
            The provider reply as relayed by the gateway.

        Raises:
            RelayNetworkError: If the gateway is unreachable.
            RelayError: On a non-2xx status, an unparseable body, or any
                other transport failure.
        """
        logger.info("relay_request", prompt_length=len(prompt))

        try:
            response = self._client.post(CHAT_ENDPOINT, json={"prompt": prompt})
        except CONNECTIVITY_ERRORS as e:
            logger.warning("relay_unreachable", error=str(e), error_type=type(e).__name__)
            raise RelayNetworkError() from e
        except httpx.HTTPError as e:
            logger.warning("relay_transport_error", error=str(e), error_type=type(e).__name__)
            raise RelayError(str(e)) from e

        try:
            data = response.json()
        except ValueError as e:
            logger.warning("relay_body_unparseable", status=response.status_code, error=str(e))
            raise RelayError(str(e), upstream_status=response.status_code) from e

        if not response.is_success:
            message = _error_message(data) or f"HTTP error! status: {response.status_code}"
            logger.warning("relay_error_reply", status=response.status_code, error=message)
            raise RelayError(message, upstream_status=response.status_code)

        # Raw reply goes to the operator log for diagnostics
        logger.info("relay_response", status=response.status_code, payload=data)
        return data


def _error_message(data: Any) -> str | None:
    """Pull the error text out of a gateway error body, if any."""
    if not isinstance(data, dict):
        return None
    error = data.get("error")
    if isinstance(error, dict):
        error = error.get("message")
    return str(error) if error else None
