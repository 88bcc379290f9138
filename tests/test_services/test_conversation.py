"""Unit tests for the conversation store."""
from unittest.mock import MagicMock

import pytest

from chat_relay.services.conversation import (
    PENDING_LABEL,
    SEND_LABEL,
    ConversationStore,
    Role,
    Turn,
)
from chat_relay.services.relay_client import RelayClient
from chat_relay.utils.exceptions import NETWORK_ERROR_MESSAGE, RelayError, RelayNetworkError


@pytest.fixture
def mock_client():
    """Create a mock RelayClient."""
    return MagicMock(spec=RelayClient)


@pytest.fixture
def store(mock_client):
    return ConversationStore(mock_client)


class TestSubmit:
    """Tests for ConversationStore.submit."""

    def test_success_appends_user_and_assistant(self, store, mock_client):
        mock_client.send_chat_message.return_value = {"output_text": "Hi!"}

        turn = store.submit("Hello")

        assert turn == Turn(Role.ASSISTANT, "Hi!")
        assert store.turns == (Turn(Role.USER, "Hello"), Turn(Role.ASSISTANT, "Hi!"))
        assert store.error is None
        mock_client.send_chat_message.assert_called_once_with("Hello")

    def test_user_text_kept_untrimmed(self, store, mock_client):
        mock_client.send_chat_message.return_value = {"output_text": "ok"}

        store.submit("  spaced out  ")

        assert store.turns[0].content == "  spaced out  "
        mock_client.send_chat_message.assert_called_once_with("  spaced out  ")

    def test_defaults_to_input_buffer(self, store, mock_client):
        mock_client.send_chat_message.return_value = {"output_text": "ok"}
        store.set_input("from the buffer")

        store.submit()

        mock_client.send_chat_message.assert_called_once_with("from the buffer")
        assert store.input_buffer == ""

    @pytest.mark.parametrize("text", ["", "   ", "\n\t"])
    def test_blank_input_is_ignored(self, store, mock_client, text):
        assert store.submit(text) is None
        assert store.turns == ()
        mock_client.send_chat_message.assert_not_called()

    def test_reply_normalized_from_output_items(self, store, mock_client):
        mock_client.send_chat_message.return_value = {
            "output": [{"type": "message", "content": [{"type": "output_text", "text": "B"}]}]
        }
        assert store.submit("Hi").content == "B"

    def test_reply_without_text(self, store, mock_client):
        mock_client.send_chat_message.return_value = {}
        assert store.submit("Hi").content == "No response"
        assert store.error is None

    def test_only_current_prompt_is_sent(self, store, mock_client):
        mock_client.send_chat_message.return_value = {"output_text": "ok"}

        store.submit("first")
        store.submit("second")

        assert [c.args for c in mock_client.send_chat_message.call_args_list] == [("first",), ("second",)]
        assert len(store.turns) == 4


class TestErrors:
    """Tests for error surfacing."""

    def test_gateway_error_sets_banner(self, store, mock_client):
        mock_client.send_chat_message.side_effect = RelayError("X", upstream_status=500)

        assert store.submit("Hello") is None

        assert store.error == "X"
        assert store.turns == (Turn(Role.USER, "Hello"),)

    def test_network_error_message(self, store, mock_client):
        mock_client.send_chat_message.side_effect = RelayNetworkError()

        store.submit("Hello")

        assert store.error == NETWORK_ERROR_MESSAGE

    def test_error_field_in_success_reply(self, store, mock_client):
        mock_client.send_chat_message.return_value = {"error": "quota exceeded"}

        store.submit("Hello")

        assert store.error == "quota exceeded"
        assert len(store.turns) == 1

    def test_unexpected_exception_is_surfaced(self, store, mock_client):
        mock_client.send_chat_message.side_effect = RuntimeError("boom")

        store.submit("Hello")

        assert store.error == "boom"

    def test_unexpected_exception_without_message(self, store, mock_client):
        mock_client.send_chat_message.side_effect = RuntimeError()

        store.submit("Hello")

        assert store.error == "An error occurred"

    def test_next_submission_clears_error(self, store, mock_client):
        mock_client.send_chat_message.side_effect = [RelayError("X"), {"output_text": "fine"}]

        store.submit("one")
        assert store.error == "X"
        store.submit("two")

        assert store.error is None
        assert [t.role for t in store.turns] == [Role.USER, Role.USER, Role.ASSISTANT]


class TestCleanup:
    """The pending flag and input buffer reset on every path."""

    @pytest.mark.parametrize(
        "outcome",
        [
            {"output_text": "ok"},
            RelayError("provider failed", upstream_status=500),
            RelayNetworkError(),
            RuntimeError("boom"),
        ],
    )
    def test_released_after_resolution(self, store, mock_client, outcome):
        if isinstance(outcome, Exception):
            mock_client.send_chat_message.side_effect = outcome
        else:
            mock_client.send_chat_message.return_value = outcome
        store.set_input("Hello")

        store.submit()

        assert store.pending is False
        assert store.input_buffer == ""
        assert store.submit_label == SEND_LABEL

    def test_released_when_normalization_raises(self, store, mock_client, monkeypatch):
        mock_client.send_chat_message.return_value = {"output_text": "ok"}

        def explode(payload):
            raise ValueError("bad payload")

        monkeypatch.setattr("chat_relay.services.conversation.extract_reply_text", explode)
        store.set_input("Hello")

        with pytest.raises(ValueError):
            store.submit()

        assert store.pending is False
        assert store.input_buffer == ""


class TestSingleFlight:
    """Only one submission may be in flight."""

    def test_resubmission_during_call_is_ignored(self, store, mock_client):
        observed = {}

        def send(prompt):
            observed["pending"] = store.pending
            observed["label"] = store.submit_label
            observed["can_submit"] = store.can_submit
            for _ in range(5):
                assert store.submit("again") is None
            return {"output_text": "done"}

        mock_client.send_chat_message.side_effect = send
        store.set_input("Hello")

        store.submit()

        assert observed == {"pending": True, "label": PENDING_LABEL, "can_submit": False}
        assert mock_client.send_chat_message.call_count == 1
        assert [t.content for t in store.turns] == ["Hello", "done"]

    def test_reset_refused_while_pending(self, store, mock_client):
        results = []

        def send(prompt):
            results.append(store.reset())
            return {"output_text": "done"}

        mock_client.send_chat_message.side_effect = send
        store.submit("Hello")

        assert results == [False]
        assert len(store.turns) == 2


class TestState:
    """Tests for observable state helpers."""

    def test_can_submit(self, store):
        assert store.can_submit is False
        store.set_input("  ")
        assert store.can_submit is False
        store.set_input("hi")
        assert store.can_submit is True

    def test_reset(self, store, mock_client):
        mock_client.send_chat_message.side_effect = RelayError("X")
        store.submit("Hello")
        store.set_input("draft")

        assert store.reset() is True
        assert store.turns == ()
        assert store.error is None
        assert store.input_buffer == ""

    def test_turns_are_immutable(self, store, mock_client):
        mock_client.send_chat_message.return_value = {"output_text": "ok"}
        store.submit("Hello")

        with pytest.raises(AttributeError):
            store.turns[0].content = "changed"
        assert isinstance(store.turns, tuple)
