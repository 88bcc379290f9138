"""Shared pytest fixtures for the chat relay test suite.

Provides reusable fixtures for:
- Settings with and without a provider credential
- Flask app and test client
- Provider payload samples
"""
import pytest

from chat_relay import create_app
from chat_relay.config import Settings

TEST_API_KEY = "sk-or-v1-test-key-12345"


def make_settings(**overrides) -> Settings:
    """Build Settings that ignore the developer's .env file."""
    values = {
        "OPENROUTER_API_KEY": TEST_API_KEY,
        "LOG_LEVEL": "WARNING",
        "LOG_FORMAT": "console",
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


@pytest.fixture
def settings():
    """Settings with a configured credential."""
    return make_settings()


@pytest.fixture
def app(settings):
    """Create a Flask application instance for testing."""
    app = create_app(settings)
    app.config["TESTING"] = True
    yield app
    app.config["PROVIDER_GATEWAY"].close()


@pytest.fixture
def client(app):
    """Create a Flask test client."""
    return app.test_client()


@pytest.fixture
def unconfigured_app():
    """Flask app whose settings carry no provider credential."""
    app = create_app(make_settings(OPENROUTER_API_KEY=None))
    app.config["TESTING"] = True
    yield app
    app.config["PROVIDER_GATEWAY"].close()


@pytest.fixture
def provider_reply():
    """A typical Responses API body with both text shapes present."""
    return {
        "id": "resp_123",
        "model": "nvidia/nemotron-3-nano-30b-a3b:free",
        "output_text": "Hi there!",
        "output": [
            {
                "type": "message",
                "role": "assistant",
                "content": [{"type": "output_text", "text": "Hi there!"}],
            }
        ],
        "usage": {"input_tokens": 3, "output_tokens": 4, "total_tokens": 7},
    }


@pytest.fixture
def settings_factory():
    """Return make_settings so tests can build variants."""
    return make_settings
