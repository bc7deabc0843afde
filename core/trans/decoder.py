"""Demultiplexing of a single model reply into per-fragment translations.

Replies to multi-fragment prompts are expected to echo the ``[n]`` index markers written by
PromptEncoder. Models do not always do so: markers may be dropped, reordered, duplicated or
mangled. The scan below never discards the whole batch because of one bad marker, and always
returns exactly one entry per requested fragment.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, NamedTuple

from core.trans.interface import EmptyResponseError
from models.translation_models import DecodedBatch
from utils.logger_utils import LoggerUtils

if TYPE_CHECKING:
    import logging
    from collections.abc import Sequence

__all__: list[str] = ["ResponseDecoder"]

logger: logging.Logger = LoggerUtils.get_logger(__name__)


class _ScanState(NamedTuple):
    """Position of the line scan.

    Attributes:
        index (int | None): 0-based slot the buffered lines belong to. None before the first valid marker.
        buffer (tuple[str, ...]): Lines collected for that slot.
    """

    index: int | None = None
    buffer: tuple[str, ...] = ()


class _Marker(NamedTuple):
    index: int
    rest: str


class ResponseDecoder:
    """Splits a raw reply into an ordered list of translations."""

    def decode(self, raw_text: str | None, expected_count: int, sources: Sequence[str] | None = None) -> DecodedBatch:
        """Recover ``expected_count`` translations from ``raw_text``.

        Args:
            raw_text (str | None): Text returned by the model.
            expected_count (int): Number of fragments in the request.
            sources (Sequence[str] | None): The untranslated fragments, used in place of
                translations that cannot be recovered. Without them such entries are empty strings.

        Returns:
            DecodedBatch: Exactly ``expected_count`` entries, in request order.

        Raises:
            EmptyResponseError: If ``raw_text`` is None or empty.
            ValueError: If ``expected_count`` is below 1 or does not match the number of sources.
        """
        if expected_count < 1:
            msg: str = f"Expected count must be at least 1, got {expected_count}."
            raise ValueError(msg)
        if sources is not None and len(sources) != expected_count:
            msg = f"Got {len(sources)} source fragments for {expected_count} expected translations."
            raise ValueError(msg)
        if not raw_text:
            msg = "The remote model returned an empty translation."
            raise EmptyResponseError(msg)

        if expected_count == 1:
            return DecodedBatch(translations=[raw_text.strip()])

        slots: list[str | None] = self._scan(raw_text, expected_count)
        return self._fill_missing(slots, sources)

    def _scan(self, raw_text: str, expected_count: int) -> list[str | None]:
        slots: list[str | None] = [None] * expected_count
        state = _ScanState()

        for line in raw_text.split("\n"):
            marker: _Marker | None = self._parse_marker(line, expected_count)
            if marker is not None:
                self._flush(state, slots)
                state = _ScanState(index=marker.index, buffer=(marker.rest,))
            elif state.index is not None:
                # Includes marker-like lines whose number is invalid or out of range.
                state = state._replace(buffer=(*state.buffer, line))
            elif self._looks_like_marker(line):
                logger.debug("Discarding invalid marker line before the first marker: '%s'", line)
            else:
                logger.debug("Discarding preamble line: '%s'", line)

        self._flush(state, slots)
        return slots

    @staticmethod
    def _flush(state: _ScanState, slots: list[str | None]) -> None:
        if state.index is None:
            return
        if slots[state.index] is not None:
            logger.debug("Duplicate marker [%d]; the later text replaces the earlier one.", state.index + 1)
        slots[state.index] = "\n".join(state.buffer).strip()

    @staticmethod
    def _looks_like_marker(line: str) -> bool:
        return len(line) > 1 and line[0] == "[" and line[1].isdecimal()

    def _parse_marker(self, line: str, expected_count: int) -> _Marker | None:
        """Return the marker at the start of ``line``, or None if the line is not a valid marker.

        A valid marker is ``[n]`` at the very start of the line with 1 <= n <= expected_count.
        """
        if not self._looks_like_marker(line):
            return None
        close: int = line.find("]")
        if close <= 1:
            return None
        number_text: str = line[1:close].strip()
        if not number_text.isdecimal():
            return None
        number: int = int(number_text)
        if not 1 <= number <= expected_count:
            logger.debug("Marker [%d] is out of range for %d fragments.", number, expected_count)
            return None
        return _Marker(index=number - 1, rest=line[close + 1 :].strip())

    @staticmethod
    def _fill_missing(slots: list[str | None], sources: Sequence[str] | None) -> DecodedBatch:
        translations: list[str] = []
        missing: list[int] = []
        for index, text in enumerate(slots):
            if text:
                translations.append(text)
                continue
            missing.append(index)
            translations.append(sources[index] if sources is not None else "")

        return DecodedBatch(
            translations=translations,
            had_missing_translations=bool(missing),
            missing_indices=missing,
        )
