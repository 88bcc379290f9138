"""Pydantic models for the provider's Responses API payload.

The provider returns one of several shapes for the assistant text.
`extract_reply_text()` reduces a payload to a displayable string, in
priority order:

1. a non-empty top-level `output_text`
2. the first `output_text` part of the first `message` item in `output`
3. the literal "No response"

Only the fields on that path are decoded, one item at a time. Items or
content parts that do not fit their model are skipped, and unrelated
fields (`id`, `usage`, ...) are never looked at, so the extraction never
fails.
"""
from __future__ import annotations

from typing import Any, Iterator, Optional, TypeVar

import structlog
from pydantic import BaseModel, ConfigDict, ValidationError

logger = structlog.get_logger(__name__)

NO_RESPONSE = "No response"

M = TypeVar("M", bound=BaseModel)


class ContentPart(BaseModel):
    """One entry of an output item's `content` list."""
    model_config = ConfigDict(extra="allow")

    type: Optional[str] = None
    text: Optional[str] = None


class OutputItem(BaseModel):
    """One entry of the reply's `output` list.

    `content` stays raw; its parts are decoded lazily by `parts()`.
    """
    model_config = ConfigDict(extra="allow")

    type: Optional[str] = None
    role: Optional[str] = None
    content: Any = None

    def parts(self) -> Iterator[ContentPart]:
        return decode_each(self.content, ContentPart)

    def first_part(self, part_type: str) -> ContentPart | None:
        return next((part for part in self.parts() if part.type == part_type), None)


def decode_each(entries: Any, model: type[M]) -> Iterator[M]:
    """Yield every entry of a list that validates against `model`, skipping the rest."""
    if not isinstance(entries, list):
        return
    for entry in entries:
        try:
            yield model.model_validate(entry)
        except ValidationError as e:
            logger.debug("provider_entry_skipped", model=model.__name__, errors=e.error_count())


def first_message(payload: dict[str, Any]) -> OutputItem | None:
    """First decodable item of `output` whose type is "message"."""
    return next(
        (item for item in decode_each(payload.get("output"), OutputItem) if item.type == "message"),
        None,
    )


def extract_reply_text(payload: Any) -> str:
    """Reduce a raw provider payload to the text shown in the transcript.

    Args:
        payload: Parsed JSON body as relayed by the gateway.

    Returns:
        The assistant text, or "No response" when the payload carries none.
    """
    if not isinstance(payload, dict):
        logger.warning("provider_reply_unrecognized", payload_type=type(payload).__name__)
        return NO_RESPONSE

    output_text = payload.get("output_text")
    if isinstance(output_text, str) and output_text:
        return output_text

    message = first_message(payload)
    part = message.first_part("output_text") if message else None
    if part and part.text:
        return part.text

    return NO_RESPONSE
