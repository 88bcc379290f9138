"""Pydantic models for API request validation."""
from __future__ import annotations

from pydantic import BaseModel, Field, field_validator

DEFAULT_PROMPT = "Hello"


class ChatRequest(BaseModel):
    """Incoming relay request.

    Attributes:
        prompt: The text to forward. Missing or null falls back to
            "Hello" so the endpoint can be smoke-tested without a body.
    """
    prompt: str | None = Field(
        default=None,
        validate_default=True,
        description="Prompt to forward to the provider",
    )

    @field_validator("prompt")
    @classmethod
    def default_prompt(cls, v: str | None) -> str:
        return DEFAULT_PROMPT if v is None else v
