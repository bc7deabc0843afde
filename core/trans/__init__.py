"""Batched translation against a remote completion endpoint.

This package provides the prompt encoder, the reply decoder, request pacing, language tag handling,
the endpoint implementations and the manager that drives them.
"""

from core.trans.decoder import ResponseDecoder
from core.trans.delay import DelayScheduler
from core.trans.interface import (
    ConfigurationError,
    EmptyResponseError,
    EndpointState,
    NotSupportedLanguagesError,
    PartialTranslationWarning,
    PolicyCorrectionWarning,
    ResponseParseError,
    Result,
    TransInterface,
    TranslateExceptionError,
    TranslationWarning,
)
from core.trans.lang_codes import LanguageNormalizer
from core.trans.manager import TransManager
from core.trans.prompt import PromptEncoder

__all__: list[str] = [
    "ConfigurationError",
    "DelayScheduler",
    "EmptyResponseError",
    "EndpointState",
    "LanguageNormalizer",
    "NotSupportedLanguagesError",
    "PartialTranslationWarning",
    "PolicyCorrectionWarning",
    "PromptEncoder",
    "ResponseDecoder",
    "ResponseParseError",
    "Result",
    "TransInterface",
    "TransManager",
    "TranslateExceptionError",
    "TranslationWarning",
]
