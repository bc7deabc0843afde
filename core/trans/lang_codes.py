"""Language tag normalization and validation for the remote completion endpoint."""

from __future__ import annotations

from typing import TYPE_CHECKING, ClassVar, Final

from core.trans.interface import NotSupportedLanguagesError
from utils.logger_utils import LoggerUtils

if TYPE_CHECKING:
    import logging

__all__: list[str] = ["SUPPORTED_DESTINATION_LANGUAGES", "SUPPORTED_SOURCE_LANGUAGES", "LanguageNormalizer"]

logger: logging.Logger = LoggerUtils.get_logger(__name__)

_COMMON_LANGUAGES: Final[frozenset[str]] = frozenset(
    {
        "en", "ja", "zh", "zh-cn", "zh-hans", "zh-tw", "zh-hant", "ko", "fr", "de", "es", "it", "ru", "pt",
        "ar", "hi", "bn", "id", "ms", "th", "vi", "tr", "nl", "pl", "sv", "fi", "no", "da", "cs", "hu",
        "ro", "el", "uk", "he", "fa", "bg", "sr", "hr", "sk", "lt", "lv", "et", "sl",
    }
)  # fmt: skip

SUPPORTED_SOURCE_LANGUAGES: Final[frozenset[str]] = _COMMON_LANGUAGES | {"auto"}
SUPPORTED_DESTINATION_LANGUAGES: Final[frozenset[str]] = _COMMON_LANGUAGES


class LanguageNormalizer:
    """Maps host language tags onto the tags understood by the remote model."""

    # Chinese script and region variants collapse onto two canonical tags.
    _aliases: ClassVar[dict[str, str]] = {
        "zh-Hans": "zh",
        "zh-CN": "zh",
        "zh-hans": "zh",
        "zh-cn": "zh",
        "zh-Hant": "zh-tw",
        "zh-TW": "zh-tw",
        "zh-hant": "zh-tw",
    }

    @staticmethod
    def normalize(tag: str) -> str:
        """Return the canonical form of ``tag``.

        Unrecognized tags are returned unchanged so that validation can reject them.

        Examples:
            >>> LanguageNormalizer.normalize("zh-CN")
            'zh'
            >>> LanguageNormalizer.normalize("zh-Hant")
            'zh-tw'
        """
        return LanguageNormalizer._aliases.get(tag, tag)

    @staticmethod
    def validate_source(tag: str) -> str:
        """Normalize ``tag`` and check it against the supported source languages.

        Returns:
            str: The canonical tag.

        Raises:
            NotSupportedLanguagesError: If the tag is not a supported source language.
        """
        canonical: str = LanguageNormalizer.normalize(tag)
        if canonical not in SUPPORTED_SOURCE_LANGUAGES:
            msg: str = f"The source language '{tag}' is not supported."
            raise NotSupportedLanguagesError(msg)
        logger.debug("Source language: '%s' -> '%s'", tag, canonical)
        return canonical

    @staticmethod
    def validate_destination(tag: str) -> str:
        """Normalize ``tag`` and check it against the supported destination languages.

        Returns:
            str: The canonical tag.

        Raises:
            NotSupportedLanguagesError: If the tag is not a supported destination language.
        """
        canonical: str = LanguageNormalizer.normalize(tag)
        if canonical not in SUPPORTED_DESTINATION_LANGUAGES:
            msg: str = f"The destination language '{tag}' is not supported."
            raise NotSupportedLanguagesError(msg)
        logger.debug("Destination language: '%s' -> '%s'", tag, canonical)
        return canonical
