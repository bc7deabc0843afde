"""Models for translation calls: decoded batches, transport requests and wire payloads."""

from __future__ import annotations

from dataclasses import dataclass, field

from dataclasses_json import DataClassJsonMixin, dataclass_json

__all__: list[str] = [
    "ChatMessage",
    "ContentBlock",
    "DecodedBatch",
    "HttpRequest",
    "HttpResponse",
    "MessagesRequest",
    "MessagesResponse",
]


@dataclass
class DecodedBatch:
    """Per-fragment translations recovered from a single model reply.

    Attributes:
        translations (list[str]): One entry per input fragment, in input order.
        had_missing_translations (bool): Whether any entry fell back to its source text.
        missing_indices (list[int]): 0-based indices of the entries that fell back.
    """

    translations: list[str] = field(default_factory=list)
    had_missing_translations: bool = False
    missing_indices: list[int] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.translations)


@dataclass
class HttpRequest:
    """Outbound request handed from the endpoint to the host transport.

    Attributes:
        method (str): HTTP method.
        url (str): Target URL.
        data (str): Serialized request body.
        headers (dict[str, str]): Request headers, filled in by the endpoint.
    """

    method: str
    url: str
    data: str
    headers: dict[str, str] = field(default_factory=dict)

    def __repr__(self) -> str:
        # Header values carry the API key, so only their names are shown.
        return f"HttpRequest(method={self.method!r}, url={self.url!r}, headers={list(self.headers)!r})"


@dataclass
class HttpResponse:
    """Response returned by the host transport.

    Attributes:
        status (int): HTTP status code.
        data (str): Response body decoded as UTF-8.
    """

    status: int
    data: str


@dataclass_json
@dataclass
class ChatMessage(DataClassJsonMixin):
    """One role/content entry of the request ``messages`` array."""

    role: str
    content: str


@dataclass_json
@dataclass
class MessagesRequest(DataClassJsonMixin):
    """Request body posted to the completion endpoint."""

    model: str
    messages: list[ChatMessage]
    max_tokens: int = 4000
    temperature: float = 0.1

    def __repr__(self) -> str:
        # Message contents can be long, so only the roles are shown.
        return (
            f"MessagesRequest(model={self.model!r}, max_tokens={self.max_tokens}, "
            f"temperature={self.temperature}, roles={[m.role for m in self.messages]!r})"
        )


@dataclass_json
@dataclass
class ContentBlock(DataClassJsonMixin):
    """One element of the reply ``content`` array."""

    type: str | None = None
    text: str | None = None


@dataclass_json
@dataclass
class MessagesResponse(DataClassJsonMixin):
    """Reply envelope. Only the ``content`` array is read; other keys are ignored."""

    content: list[ContentBlock] | None = None
