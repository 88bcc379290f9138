"""Outbound side of the relay gateway.

Forwards exactly one user prompt to OpenRouter's Responses API and
returns the provider's JSON body untouched. The gateway performs no
retries and no shape validation: any failure is raised as an
UpstreamError carrying the underlying message.

Only the current prompt is sent. Earlier turns of a conversation are
never included.

Usage:
    from chat_relay.services.gateway import ProviderGateway

    with ProviderGateway(model="nvidia/nemotron-3-nano-30b-a3b:free") as gateway:
        body = gateway.forward("Hello", api_key="sk-or-...")
"""
from __future__ import annotations

import time
from typing import Any

import httpx
import structlog

from chat_relay.config import Settings
from chat_relay.utils.exceptions import ConfigurationError, UpstreamError

logger = structlog.get_logger(__name__)

RESPONSES_ENDPOINT = "/responses"

# Longest slice of a non-JSON error body echoed back to the client
MAX_REASON_LENGTH = 200


class ProviderGateway:
    """Client for the provider's Responses API.

    The credential is passed on each call rather than fixed on the HTTP
    client, so a gateway can be built before a key is configured and the
    key's presence is confirmed per request.

    Args:
        model: Model identifier sent with every request.
        base_url: Provider API base URL.
        timeout: Request timeout in seconds.
        referer: Value of the HTTP-Referer attribution header.
        title: Value of the X-Title attribution header.
        verify_tls: Whether to verify the provider's certificate.
        transport: Optional httpx transport (used by tests).
    """

    def __init__(
        self,
        model: str,
        base_url: str = "https://openrouter.ai/api/v1",
        timeout: float = 120.0,
        referer: str = "https://baeza.ai",
        title: str = "Baeza AI",
        verify_tls: bool = True,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._model = model
        self._base_url = base_url.rstrip("/")

        self._client = httpx.Client(
            base_url=self._base_url,
            timeout=httpx.Timeout(timeout),
            headers={
                "Content-Type": "application/json",
                "HTTP-Referer": referer,
                "X-Title": title,
            },
            verify=verify_tls,
            transport=transport,
        )

    @classmethod
    def from_settings(cls, settings: Settings, transport: httpx.BaseTransport | None = None) -> "ProviderGateway":
        return cls(
            model=settings.OPENROUTER_MODEL,
            base_url=settings.OPENROUTER_BASE_URL,
            timeout=settings.OPENROUTER_TIMEOUT,
            referer=settings.APP_REFERER,
            title=settings.APP_TITLE,
            verify_tls=settings.OPENROUTER_VERIFY_TLS,
            transport=transport,
        )

    @property
    def model(self) -> str:
        return self._model

    def close(self) -> None:
        """Close the underlying HTTP client."""
        self._client.close()

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.close()

    # ── Core API ──────────────────────────────────────────────────────

    def build_payload(self, prompt: str) -> dict[str, Any]:
        """Build the outbound request body for a single user turn."""
        return {
            "model": self._model,
            "input": [
                {"role": "user", "content": prompt},
            ],
        }

    def forward(self, prompt: str, api_key: str | None) -> Any:
        """Send one prompt to the provider and return its parsed JSON body.

        Args:
            prompt: The user's text.
            api_key: Provider credential for this request.

        Returns:
            The provider's JSON body, exactly as decoded.

        Raises:
            ConfigurationError: If no credential is given. No request is made.
            UpstreamError: On network failure, non-2xx status or undecodable body.
        """
        if not api_key:
            raise ConfigurationError()

        payload = self.build_payload(prompt)

        logger.info(
            "relay_forward",
            model=self._model,
            prompt_length=len(prompt),
        )

        start = time.monotonic()
        try:
            response = self._client.post(
                RESPONSES_ENDPOINT,
                json=payload,
                headers={"Authorization": f"Bearer {api_key}"},
            )
            response.raise_for_status()
            body = response.json()
        except httpx.HTTPStatusError as e:
            logger.error(
                "relay_upstream_error",
                status=e.response.status_code,
                body=e.response.text[:500],
            )
            raise UpstreamError(
                _status_error_message(e.response),
                upstream_status=e.response.status_code,
            ) from e
        except Exception as e:
            logger.error("relay_upstream_error", error=str(e), error_type=type(e).__name__)
            raise UpstreamError(str(e)) from e

        duration_ms = round((time.monotonic() - start) * 1000)
        logger.info(
            "relay_forwarded",
            model=body.get("model", self._model) if isinstance(body, dict) else self._model,
            duration_ms=duration_ms,
            usage=body.get("usage") if isinstance(body, dict) else None,
        )

        return body


def _status_error_message(response: httpx.Response) -> str:
    """Describe a non-2xx provider reply, keeping the provider's own reason."""
    status = f"{response.status_code} {response.reason_phrase}".strip()

    reason: Any = None
    try:
        data = response.json()
    except ValueError:
        data = None
    if isinstance(data, dict):
        reason = data.get("error")
        if isinstance(reason, dict):
            reason = reason.get("message")
    if not reason:
        reason = response.text.strip()[:MAX_REASON_LENGTH]

    if reason:
        return f"Provider error ({status}): {reason}"
    return f"Provider error ({status})"
