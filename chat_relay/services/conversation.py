"""Conversation store — the client-side turn log and submission lifecycle.

Holds the ordered transcript for one session together with the pending
flag, the latest error and the input buffer. A submission runs:

    user Turn appended → pending → relay call → assistant Turn | error → released

At most one submission is in flight. The user's turn is appended before
the call and never retracted; the pending flag and input buffer are
reset on every exit path.

Usage:
    store = ConversationStore(relay_client)
    store.submit("Tell me a joke")
    for turn in store.turns:
        print(turn.role, turn.content)
"""
from __future__ import annotations

import threading
from contextlib import contextmanager
from dataclasses import dataclass
from enum import Enum
from typing import Iterator, Protocol

import structlog

from chat_relay.models.provider import extract_reply_text
from chat_relay.utils.exceptions import ChatRelayError

logger = structlog.get_logger(__name__)

SEND_LABEL = "Send"
PENDING_LABEL = "Thinking..."
FALLBACK_ERROR = "An error occurred"


class Role(str, Enum):
    USER = "user"
    ASSISTANT = "assistant"
    SYSTEM = "system"


@dataclass(frozen=True)
class Turn:
    """One message of the visible conversation."""
    role: Role
    content: str


class ChatTransport(Protocol):
    """Anything that can carry one prompt to the provider and back."""

    def send_chat_message(self, prompt: str): ...


class ConversationStore:
    """Turn log and single-flight submission state for one session.

    Args:
        relay_client: Object with a `send_chat_message(prompt)` method,
            normally a RelayClient.
    """

    def __init__(self, relay_client: ChatTransport) -> None:
        self._client = relay_client
        self._turns: list[Turn] = []
        self._pending = False
        self._error: str | None = None
        self._input = ""
        self._lock = threading.Lock()

    # ── Observable state ──────────────────────────────────────────────

    @property
    def turns(self) -> tuple[Turn, ...]:
        return tuple(self._turns)

    @property
    def pending(self) -> bool:
        return self._pending

    @property
    def error(self) -> str | None:
        return self._error

    @property
    def input_buffer(self) -> str:
        return self._input

    @property
    def can_submit(self) -> bool:
        return not self._pending and bool(self._input.strip())

    @property
    def submit_label(self) -> str:
        return PENDING_LABEL if self._pending else SEND_LABEL

    def set_input(self, text: str) -> None:
        self._input = text

    # ── Submission ────────────────────────────────────────────────────

    def submit(self, text: str | None = None) -> Turn | None:
        """Submit one user turn and wait for the reply.

        Args:
            text: Text to send. Defaults to the current input buffer.

        Returns:
            The appended assistant Turn, or None when the submission was
            ignored or failed (see `error`).
        """
        if text is None:
            text = self._input
        if not text.strip():
            return None

        if not self._acquire():
            logger.debug("submit_ignored", reason="pending")
            return None

        with self._in_flight():
            self._turns.append(Turn(Role.USER, text))
            self._error = None
            logger.info("turn_submitted", turns=len(self._turns))
            return self._dispatch(text)

    def reset(self) -> bool:
        """Start a fresh session. Refused while a request is pending."""
        with self._lock:
            if self._pending:
                return False
            self._turns.clear()
            self._error = None
            self._input = ""
        return True

    # ── Internal Methods ──────────────────────────────────────────────

    def _acquire(self) -> bool:
        with self._lock:
            if self._pending:
                return False
            self._pending = True
            return True

    @contextmanager
    def _in_flight(self) -> Iterator[None]:
        """Release the pending flag and clear the input on every exit path."""
        try:
            yield
        finally:
            with self._lock:
                self._pending = False
                self._input = ""

    def _dispatch(self, prompt: str) -> Turn | None:
        try:
            reply = self._client.send_chat_message(prompt)
        except ChatRelayError as e:
            return self._fail(e.message)
        except Exception as e:
            logger.error("turn_unexpected_error", error=str(e), exc_info=True)
            return self._fail(str(e) or FALLBACK_ERROR)

        if isinstance(reply, dict) and reply.get("error"):
            return self._fail(str(reply["error"]))

        turn = Turn(Role.ASSISTANT, extract_reply_text(reply))
        self._turns.append(turn)
        logger.info("turn_completed", turns=len(self._turns), reply_length=len(turn.content))
        return turn

    def _fail(self, message: str) -> None:
        self._error = message
        logger.warning("turn_failed", error=message)
        return None
