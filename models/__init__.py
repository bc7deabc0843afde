"""Data models for the batch translation adapter.

This package contains dataclass definitions for configuration, resolved endpoint settings,
transport requests and responses, and the JSON payloads exchanged with the remote model.
"""

from __future__ import annotations

from models.config_models import Config, DelayWindow, EndpointConfig, General, Translation
from models.translation_models import (
    ChatMessage,
    ContentBlock,
    DecodedBatch,
    HttpRequest,
    HttpResponse,
    MessagesRequest,
    MessagesResponse,
)

__all__: list[str] = [
    "ChatMessage",
    "Config",
    "ContentBlock",
    "DecodedBatch",
    "DelayWindow",
    "EndpointConfig",
    "General",
    "HttpRequest",
    "HttpResponse",
    "MessagesRequest",
    "MessagesResponse",
    "Translation",
]
