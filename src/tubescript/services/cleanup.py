"""Optional transcript text cleanup through the Anthropic API.

The pipeline hands rendered transcript text plus a style hint to a
:class:`TextCleaner` and takes the returned string as a replacement. The reply
is not interpreted here.
"""

from __future__ import annotations

import logging
import os
from typing import TYPE_CHECKING, Protocol

import anthropic
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from ..config import DEFAULT_CLEANUP_MODEL

if TYPE_CHECKING:
    from ..config import Settings

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = (
    "You tidy up machine-generated video transcripts. Return only the revised "
    "transcript text with no preamble or commentary. Never invent content."
)

STYLE_INSTRUCTIONS = {
    "readable": (
        "Fix punctuation, capitalisation and obvious speech-recognition errors. "
        "Keep the wording and the line structure."
    ),
    "paragraphs": (
        "Merge the lines into well-punctuated paragraphs grouped by topic. "
        "Keep the wording. Drop any timestamps."
    ),
    "minimal": (
        "Remove filler words and repeated phrases. Change nothing else and keep "
        "the line structure."
    ),
}


class CleanupError(RuntimeError):
    """Raised when the cleanup service returns no usable text."""


class TextCleaner(Protocol):
    """Collaborator that rewrites rendered transcript text."""

    def clean(self, text: str, style: str) -> str:
        """Return a revised version of ``text`` following ``style``."""


def init_anthropic_client() -> anthropic.Anthropic:
    """Initialize and return an Anthropic client."""
    api_key = os.environ.get("ANTHROPIC_API_KEY")
    if not api_key:
        raise ValueError("ANTHROPIC_API_KEY environment variable is required")
    return anthropic.Anthropic(api_key=api_key)


def build_prompt(text: str, style: str) -> str:
    instruction = STYLE_INSTRUCTIONS.get(style.strip().lower(), style.strip())
    return f"{instruction}\n\n<transcript>\n{text}\n</transcript>"


@retry(
    retry=retry_if_exception_type(anthropic.APIError),
    stop=stop_after_attempt(3),
    wait=wait_exponential(multiplier=1, min=1, max=10),
    reraise=True,
)
def make_anthropic_call(
    client: anthropic.Anthropic,
    model: str,
    prompt: str,
    system: str,
    max_tokens: int,
) -> tuple[str, str]:
    """Make a call to the Anthropic API with retry logic.

    Returns:
        Tuple of (response_text, stop_reason)
    """
    logger.debug("Making cleanup call to %s", model)

    message = client.messages.create(
        model=model,
        max_tokens=max_tokens,
        temperature=0.0,
        system=system,
        messages=[{"role": "user", "content": prompt}],
    )

    parts: list[str] = []
    for block in message.content:
        text = getattr(block, "text", None)
        if text:
            parts.append(text)
    response_text = "".join(parts)

    stop_reason = getattr(message, "stop_reason", "") or ""
    if stop_reason and stop_reason not in {"end_turn", "stop_sequence"}:
        logger.warning(
            "Cleanup response stopped with stop_reason='%s' (response chars=%s)",
            stop_reason,
            len(response_text),
        )

    return response_text, stop_reason


class AnthropicTextCleaner:
    """`TextCleaner` that delegates to a Claude model."""

    def __init__(
        self,
        client: anthropic.Anthropic | None = None,
        *,
        model: str = DEFAULT_CLEANUP_MODEL,
        max_tokens: int = 8000,
    ) -> None:
        self.client = client or init_anthropic_client()
        self.model = model
        self.max_tokens = max_tokens

    @classmethod
    def from_settings(cls, settings: Settings) -> AnthropicTextCleaner:
        return cls(model=settings.cleanup_model)

    def clean(self, text: str, style: str) -> str:
        if not text.strip():
            return text
        response_text, _stop_reason = make_anthropic_call(
            self.client,
            self.model,
            build_prompt(text, style),
            SYSTEM_PROMPT,
            self.max_tokens,
        )
        if not response_text.strip():
            raise CleanupError(f"Cleanup model {self.model} returned an empty response")
        logger.info(
            "Cleaned transcript text (%d -> %d chars)", len(text), len(response_text)
        )
        return response_text


__all__ = [
    "STYLE_INSTRUCTIONS",
    "AnthropicTextCleaner",
    "CleanupError",
    "TextCleaner",
    "build_prompt",
    "init_anthropic_client",
    "make_anthropic_call",
]
