"""Unit tests for core.trans.lang_codes module."""

from __future__ import annotations

import pytest

from core.trans.interface import ConfigurationError, NotSupportedLanguagesError
from core.trans.lang_codes import SUPPORTED_DESTINATION_LANGUAGES, SUPPORTED_SOURCE_LANGUAGES, LanguageNormalizer


@pytest.mark.parametrize(
    ("tag", "expected"),
    [
        ("zh-CN", "zh"),
        ("zh-Hans", "zh"),
        ("zh-cn", "zh"),
        ("zh-Hant", "zh-tw"),
        ("zh-TW", "zh-tw"),
        ("zh-hant", "zh-tw"),
        ("ja", "ja"),
        ("xx", "xx"),
        ("", ""),
    ],
)
def test_normalize(tag: str, expected: str) -> None:
    assert LanguageNormalizer.normalize(tag) == expected


def test_validate_source_accepts_auto() -> None:
    assert LanguageNormalizer.validate_source("auto") == "auto"


def test_validate_source_returns_canonical_tag() -> None:
    assert LanguageNormalizer.validate_source("zh-Hans") == "zh"


def test_validate_source_rejects_unknown_tag() -> None:
    with pytest.raises(NotSupportedLanguagesError, match="'xx'"):
        LanguageNormalizer.validate_source("xx")


def test_destination_rejects_auto() -> None:
    with pytest.raises(NotSupportedLanguagesError, match="destination language 'auto'"):
        LanguageNormalizer.validate_destination("auto")


def test_unsupported_language_is_configuration_error() -> None:
    with pytest.raises(ConfigurationError):
        LanguageNormalizer.validate_destination("klingon")


def test_destination_set_is_source_set_without_auto() -> None:
    assert SUPPORTED_SOURCE_LANGUAGES - SUPPORTED_DESTINATION_LANGUAGES == {"auto"}
