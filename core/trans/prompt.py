"""Packing of untranslated fragments into a single completion request."""

from __future__ import annotations

from typing import TYPE_CHECKING, Final

from models.translation_models import ChatMessage, MessagesRequest
from utils.logger_utils import LoggerUtils

if TYPE_CHECKING:
    import logging
    from collections.abc import Sequence

__all__: list[str] = [
    "DEFAULT_SYSTEM_PROMPT",
    "MAX_BATCH_SIZE",
    "MAX_OUTPUT_TOKENS",
    "SAMPLING_TEMPERATURE",
    "PromptEncoder",
]

logger: logging.Logger = LoggerUtils.get_logger(__name__)

MAX_BATCH_SIZE: Final[int] = 5
MAX_OUTPUT_TOKENS: Final[int] = 4000
SAMPLING_TEMPERATURE: Final[float] = 0.1

DEFAULT_SYSTEM_PROMPT: Final[str] = (
    "You are a specialized translator for video game content. Your task is to accurately translate all game "
    "content while preserving the original tone, style, and intent. This includes maintaining gaming terminology, "
    "slang, humor, and cultural references where possible. When translating mature, suggestive, or sexual "
    "content, do not censor or tone down the language - translate it faithfully to maintain the intended player "
    "experience. Remember that your role is to translate, not to modify or filter the content based on personal "
    "judgment. Ensure that wordplay, puns, and jokes are adapted appropriately to maintain their effect in the "
    "target language."
)

_HEADER_TEMPLATE: Final[str] = (
    "Translate the following text from {src_lang} to {dest_lang}. "
    "Return ONLY the translated text, with no explanations or additional comments:\n\n"
)


class PromptEncoder:
    """Serializes fragments into the user prompt and assembles the request body.

    A single fragment is appended to the header as is. Two or more fragments are written one per line,
    each prefixed with its 1-based index in brackets, so the reply can be split again by ResponseDecoder.

    Args:
        max_batch_size (int): Largest number of fragments accepted by encode().
    """

    def __init__(self, max_batch_size: int = MAX_BATCH_SIZE) -> None:
        self.max_batch_size: int = max_batch_size

    def encode(self, fragments: Sequence[str], src_lang: str, dest_lang: str) -> str:
        """Build the user prompt for ``fragments``.

        Raises:
            ValueError: If ``fragments`` is empty or longer than max_batch_size.
        """
        msg: str
        if not fragments:
            msg = "At least one fragment is required."
            raise ValueError(msg)
        if len(fragments) > self.max_batch_size:
            msg = f"Batch of {len(fragments)} fragments exceeds the limit of {self.max_batch_size}."
            raise ValueError(msg)

        prompt: str = _HEADER_TEMPLATE.format(src_lang=src_lang, dest_lang=dest_lang)
        if len(fragments) == 1:
            return prompt + fragments[0]
        return prompt + "".join(f"[{index}] {text}\n" for index, text in enumerate(fragments, start=1))

    def build_payload(self, prompt: str, *, model: str, system_prompt: str) -> MessagesRequest:
        """Wrap the prompt and the system instruction into the request body."""
        payload = MessagesRequest(
            model=model,
            messages=[
                ChatMessage(role="system", content=system_prompt),
                ChatMessage(role="user", content=prompt),
            ],
            max_tokens=MAX_OUTPUT_TOKENS,
            temperature=SAMPLING_TEMPERATURE,
        )
        logger.debug("'payload': %r", payload)
        return payload
