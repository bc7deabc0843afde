"""This module defines the abstract base class for translation endpoints and related exceptions.
It includes the Result data class for per-call outcomes, the endpoint lifecycle states,
and the error and warning categories raised by endpoints.
"""

from __future__ import annotations

import os
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, ClassVar

from utils.logger_utils import LoggerUtils

if TYPE_CHECKING:
    import logging

    from core.trans.context import ExtractionContext, InitializationContext, RequestCreationContext, TranslationContext

__all__: list[str] = [
    "ConfigurationError",
    "EmptyResponseError",
    "EndpointState",
    "EngineAttributes",
    "NotSupportedLanguagesError",
    "PartialTranslationWarning",
    "PolicyCorrectionWarning",
    "ResponseParseError",
    "Result",
    "TransInterface",
    "TranslateExceptionError",
    "TranslationWarning",
]

logger: logging.Logger = LoggerUtils.get_logger(__name__)


@dataclass
class EngineAttributes:
    """Endpoint identity and the limits the host must respect.

    Attributes:
        name (str): Name of the endpoint, used as the registry key.
        friendly_name (str): Display name.
        max_concurrency (int): Maximum number of calls in flight at once.
        max_translations_per_request (int): Maximum number of fragments packed into one request.
    """

    name: str
    friendly_name: str = ""
    max_concurrency: int = 1
    max_translations_per_request: int = 1


@dataclass
class Result:
    """Outcome of one translation call.

    Attributes:
        sources (list[str]): Fragments sent in the call.
        texts (list[str] | None): Translations in input order. None if the call failed.
        error (str | None): Failure message. None if the call succeeded.
        had_missing_translations (bool): Whether some translations fell back to their source text.
    """

    sources: list[str] = field(default_factory=list)
    texts: list[str] | None = None
    error: str | None = None
    had_missing_translations: bool = False

    @property
    def succeeded(self) -> bool:
        return self.error is None and self.texts is not None

    def __str__(self) -> str:
        if self.texts is None:
            return ""
        return "\n".join(self.texts)


class EndpointState(Enum):
    """Lifecycle states of an endpoint."""

    UNINITIALIZED = "uninitialized"
    READY = "ready"
    DELAYING = "delaying"
    REQUESTING = "requesting"
    COMPLETING = "completing"
    FAILING = "failing"


class TranslateExceptionError(Exception):
    """An error occurred during the translation process."""


class ConfigurationError(TranslateExceptionError):
    """The endpoint cannot start with the current configuration."""


class NotSupportedLanguagesError(ConfigurationError):
    """An unsupported language code was specified."""


class EmptyResponseError(TranslateExceptionError):
    """The remote reply contained no usable text."""


class ResponseParseError(TranslateExceptionError):
    """The remote reply could not be parsed."""


class TranslationWarning(UserWarning):
    """Base category for non-fatal translation diagnostics."""


class PolicyCorrectionWarning(TranslationWarning):
    """A configured value was below its policy floor and has been raised."""


class PartialTranslationWarning(TranslationWarning):
    """Some fragments were not translated and their source text was used instead."""


class TransInterface(ABC):
    """Abstract base class for batched translation endpoints.

    An endpoint is driven by a host through four hooks, always in this order and never overlapping:
    ``on_before_translate`` -> ``on_create_request`` -> (host transport) -> ``on_extract_translation``.
    When the transport fails, ``on_transport_failed`` takes the place of ``on_extract_translation``.
    ``initialize`` runs once before the first call.

    Attributes:
        registered (ClassVar[dict[str, type[TransInterface]]]): Registered endpoint classes keyed by name.
    """

    registered: ClassVar[dict[str, type[TransInterface]]] = {}

    def __init_subclass__(cls, **kwargs) -> None:
        """Register the subclass under its distinguished name.

        Subclasses returning an empty name are not registered.

        Raises:
            TypeError: If the subclass does not provide fetch_engine_name().
            ValueError: If an endpoint with the same name is already registered.
        """
        super().__init_subclass__(**kwargs)
        if not hasattr(cls, "fetch_engine_name") or not callable(cls.fetch_engine_name):
            msg = "Subclasses of TransInterface must implement the static method fetch_engine_name()."
            raise TypeError(msg)

        if not isinstance(cls.fetch_engine_name(), str) or cls.fetch_engine_name() == "":
            return

        if cls.fetch_engine_name() in cls.registered:
            msg: str = f"A translation engine with the name '{cls.fetch_engine_name()}' is already registered."
            raise ValueError(msg)

        cls.registered[cls.fetch_engine_name()] = cls

    def __init__(self) -> None:
        self._engine_attributes: EngineAttributes | None = None

    @property
    def engine_attributes(self) -> EngineAttributes:
        """Get the engine attributes.

        Raises:
            RuntimeError: If the attributes have not been set yet.
        """
        if self._engine_attributes is None:
            msg = "Engine attributes have not been set."
            raise RuntimeError(msg)
        return self._engine_attributes

    @engine_attributes.setter
    def engine_attributes(self, attributes: EngineAttributes) -> None:
        if self._engine_attributes is not None:
            msg = "Engine attributes can only be set once."
            raise RuntimeError(msg)
        self._engine_attributes = attributes

    @property
    def engine_name(self) -> str:
        return self.engine_attributes.name

    @property
    def max_concurrency(self) -> int:
        return self.engine_attributes.max_concurrency

    @property
    def max_translations_per_request(self) -> int:
        return self.engine_attributes.max_translations_per_request

    @property
    @abstractmethod
    def state(self) -> EndpointState:
        """Current lifecycle state of the endpoint."""
        raise NotImplementedError

    @staticmethod
    @abstractmethod
    def fetch_engine_name() -> str:
        """Fetch the distinguished name of the endpoint.

        Called during class registration in __init_subclass__, so the implementation
        must be available at subclass definition time.
        """
        raise NotImplementedError

    @abstractmethod
    def initialize(self, context: InitializationContext) -> None:
        """Resolve settings and validate the language pair.

        Raises:
            ConfigurationError: If the endpoint cannot start. No partial configuration is kept.
        """
        raise NotImplementedError

    @abstractmethod
    async def on_before_translate(self, context: TranslationContext) -> None:
        """Suspend the current call before its request is built."""
        raise NotImplementedError

    @abstractmethod
    def on_create_request(self, context: RequestCreationContext) -> None:
        """Build the outbound request and hand it to ``context.complete``."""
        raise NotImplementedError

    def on_transport_failed(self, context: TranslationContext, error: Exception) -> None:
        """Called instead of ``on_extract_translation`` when the request could not be delivered.

        The host reports the call as failed. Endpoints use this hook to return to their idle state.
        """
        _ = context, error

    @abstractmethod
    def on_extract_translation(self, context: ExtractionContext) -> None:
        """Turn the raw response into translations and finish the call.

        Exactly one of ``context.complete`` or ``context.fail`` is called. Per-call errors never propagate.
        """
        raise NotImplementedError

    def get_authentication_key(self) -> str:
        """Retrieve the authentication key from the environment.

        The variable is named after the engine, with the suffix "_API_OAUTH"
        (for example "CLAUDE_API_OAUTH").

        Returns:
            str: The key, or an empty string if the variable is not set.
        """
        return os.getenv(f"{self.fetch_engine_name().upper()}_API_OAUTH", "")
