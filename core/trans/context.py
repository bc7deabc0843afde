"""Capabilities a host passes to a translation endpoint.

The endpoint never reaches for global state: settings, scheduling, certificate handling,
the per-call fragments and the completion callbacks all arrive through these interfaces.
``core.trans.manager`` provides the implementations used by this application.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, TypeVar

if TYPE_CHECKING:
    from models.translation_models import HttpRequest, HttpResponse

__all__: list[str] = [
    "ExtractionContext",
    "InitializationContext",
    "RequestCreationContext",
    "SettingT",
    "TranslationContext",
]

SettingT = TypeVar("SettingT", str, float, int, bool)


class InitializationContext(Protocol):
    """Host services available while an endpoint initializes."""

    @property
    def source_language(self) -> str: ...

    @property
    def destination_language(self) -> str: ...

    def get_or_create_setting(self, section: str, key: str, default: SettingT) -> SettingT:
        """Return the stored value, creating it with ``default`` when absent."""
        ...

    def set_setting(self, section: str, key: str, value: str | float | bool) -> None:
        """Persist a corrected value."""
        ...

    def set_translation_delay(self, seconds: float) -> None:
        """Register the baseline pacing value with the host scheduler."""
        ...

    def disable_certificate_checks_for(self, host: str) -> None:
        """Exempt ``host`` from certificate validation."""
        ...


class TranslationContext(Protocol):
    """State of the call in progress."""

    @property
    def untranslated_texts(self) -> list[str]: ...

    @property
    def source_language(self) -> str: ...

    @property
    def destination_language(self) -> str: ...


class RequestCreationContext(TranslationContext, Protocol):
    def complete(self, request: HttpRequest) -> None:
        """Hand the finished request to the transport."""
        ...


class ExtractionContext(TranslationContext, Protocol):
    @property
    def response(self) -> HttpResponse: ...

    def complete(self, translations: str | list[str], *, had_missing_translations: bool = False) -> None:
        """Finish the call successfully."""
        ...

    def fail(self, message: str, error: Exception | None = None) -> None:
        """Finish the call with an error."""
        ...
