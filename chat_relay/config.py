"""Centralized application configuration using Pydantic Settings.

Loads configuration from environment variables and `.env` file with
full validation, type coercion, and sensible defaults. The settings object
is built once at process start and handed to `create_app()`; request
handlers read from it instead of the process environment.

Usage:
    from chat_relay.config import get_settings

    settings = get_settings()  # cached singleton
    print(settings.OPENROUTER_MODEL)
"""
from __future__ import annotations

from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Values shipped in example env files that must not count as a credential
_PLACEHOLDER_KEYS = {"sk-or-v1-xxxxx", "your-api-key-here"}


class Settings(BaseSettings):
    """Application settings loaded from environment variables / .env file.

    The provider credential is optional here: a gateway without one still
    starts, answers preflight requests, and reports the missing key on each
    chat request.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",  # silently ignore unknown env vars
    )

    # ── Flask ──────────────────────────────────────────────────────────
    FLASK_ENV: str = Field(default="development", description="Flask environment (development/production)")
    FLASK_DEBUG: bool = Field(default=False, description="Enable Flask debug mode")
    SECRET_KEY: str = Field(default="change-me-in-production", description="Flask secret key")

    # ── OpenRouter provider ───────────────────────────────────────────
    OPENROUTER_API_KEY: str | None = Field(default=None, description="OpenRouter API key")
    OPENROUTER_BASE_URL: str = Field(
        default="https://openrouter.ai/api/v1",
        description="OpenRouter API base URL",
    )
    OPENROUTER_MODEL: str = Field(
        default="nvidia/nemotron-3-nano-30b-a3b:free",
        description="Model identifier sent with every forwarded turn",
    )
    OPENROUTER_TIMEOUT: float = Field(default=120.0, gt=0, description="Outbound request timeout (seconds)")
    OPENROUTER_VERIFY_TLS: bool = Field(default=True, description="Verify the provider's TLS certificate")

    # ── Attribution headers ───────────────────────────────────────────
    APP_REFERER: str = Field(default="https://baeza.ai", description="HTTP-Referer sent to the provider")
    APP_TITLE: str = Field(default="Baeza AI", description="X-Title sent to the provider")

    # ── Relay client ──────────────────────────────────────────────────
    RELAY_BASE_URL: str = Field(default="http://localhost:5000", description="Base URL of the relay gateway")
    RELAY_TIMEOUT: float = Field(default=130.0, gt=0, description="Client-side timeout for one turn (seconds)")

    # ── Logging ───────────────────────────────────────────────────────
    LOG_LEVEL: str = Field(default="INFO", description="Logging level (DEBUG/INFO/WARNING/ERROR)")
    LOG_FORMAT: str = Field(default="json", description="Log output format ('json' for prod, 'console' for dev)")

    # ── Validators ────────────────────────────────────────────────────

    @field_validator("OPENROUTER_API_KEY")
    @classmethod
    def normalize_api_key(cls, v: str | None) -> str | None:
        """Treat blank or placeholder keys as not configured."""
        if v is None:
            return None
        v = v.strip()
        if not v or v in _PLACEHOLDER_KEYS:
            return None
        return v

    @field_validator("SECRET_KEY")
    @classmethod
    def validate_secret_key(cls, v: str, info) -> str:
        """Refuse the default secret key in production."""
        env = info.data.get("FLASK_ENV", "development")
        if env == "production" and v == "change-me-in-production":
            raise ValueError(
                "SECRET_KEY must be changed from the default in production. "
                "Generate one with: python -c \"import secrets; print(secrets.token_hex(32))\""
            )
        return v

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Normalize and validate log level."""
        v = v.upper().strip()
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if v not in valid_levels:
            raise ValueError(f"LOG_LEVEL must be one of {valid_levels}, got '{v}'")
        return v

    @field_validator("LOG_FORMAT")
    @classmethod
    def validate_log_format(cls, v: str) -> str:
        v = v.lower().strip()
        if v not in ("json", "console"):
            raise ValueError("LOG_FORMAT must be 'json' or 'console'")
        return v

    @field_validator("OPENROUTER_BASE_URL", "RELAY_BASE_URL")
    @classmethod
    def validate_urls(cls, v: str) -> str:
        """Ensure base URLs don't have trailing slashes."""
        return v.rstrip("/")

    @property
    def credential_configured(self) -> bool:
        return self.OPENROUTER_API_KEY is not None


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return a cached singleton Settings instance.

    Uses `lru_cache` so the `.env` file is only read once.
    """
    return Settings()
