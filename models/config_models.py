"""Configuration data models for the batch translation host and its endpoint.

``Config`` mirrors the typed sections of the INI file. ``DelayWindow`` and ``EndpointConfig``
hold the endpoint state resolved during initialization and never change afterwards.
"""

from __future__ import annotations

from dataclasses import dataclass, field

__all__: list[str] = ["Config", "DelayWindow", "EndpointConfig", "General", "Translation"]


@dataclass
class General:
    DEBUG: bool = False
    LOG_FILE: str = ""
    LOG_LEVEL: str = "INFO"


@dataclass
class Translation:
    ENGINE: str = "claude"
    SOURCE_LANGUAGE: str = "ja"
    DESTINATION_LANGUAGE: str = "en"
    TIMEOUT: float = 60.0


@dataclass
class Config:
    GENERAL: General = field(default_factory=General)
    TRANSLATION: Translation = field(default_factory=Translation)


@dataclass(frozen=True)
class DelayWindow:
    """Bounds of the randomized pause taken before each request.

    Attributes:
        minimum (float): Lower bound in seconds.
        maximum (float): Upper bound in seconds.
    """

    minimum: float
    maximum: float


@dataclass(frozen=True)
class EndpointConfig:
    """Settings resolved by the endpoint during initialization.

    Attributes:
        api_key (str): Key sent with every request. Excluded from the representation.
        endpoint_url (str): URL the requests are posted to.
        model (str): Model identifier placed in the request body.
        system_prompt (str): System instruction sent with every request.
        delay_window (DelayWindow): Pacing bounds after the policy floor has been applied.
    """

    api_key: str = field(repr=False)
    endpoint_url: str
    model: str
    system_prompt: str
    delay_window: DelayWindow
