"""Unit tests for core.trans.engines.trans_claude module."""

from __future__ import annotations

import json
import random
from dataclasses import dataclass, field
from typing import Any

import pytest

from core.trans.engines import trans_claude
from core.trans.engines.trans_claude import ClaudeTranslation
from core.trans.interface import (
    ConfigurationError,
    EmptyResponseError,
    EndpointState,
    NotSupportedLanguagesError,
    PartialTranslationWarning,
    PolicyCorrectionWarning,
    ResponseParseError,
    TransInterface,
)
from models.translation_models import HttpRequest, HttpResponse


@dataclass
class FakeInitContext:
    """In-memory host for endpoint initialization."""

    settings: dict[tuple[str, str], Any] = field(default_factory=dict)
    source_language: str = "ja"
    destination_language: str = "en"
    saved: dict[tuple[str, str], Any] = field(default_factory=dict)
    delays: list[float] = field(default_factory=list)
    insecure_hosts: list[str] = field(default_factory=list)

    def get_or_create_setting(self, section: str, key: str, default: Any) -> Any:
        if (section, key) not in self.settings:
            self.settings[(section, key)] = default
        return self.settings[(section, key)]

    def set_setting(self, section: str, key: str, value: Any) -> None:
        self.settings[(section, key)] = value
        self.saved[(section, key)] = value

    def set_translation_delay(self, seconds: float) -> None:
        self.delays.append(seconds)

    def disable_certificate_checks_for(self, host: str) -> None:
        self.insecure_hosts.append(host)


@dataclass
class FakeCallContext:
    untranslated_texts: list[str]
    source_language: str = "ja"
    destination_language: str = "en"
    response: HttpResponse | None = None
    request: HttpRequest | None = None
    completed: str | list[str] | None = None
    had_missing_translations: bool = False
    failure: tuple[str, Exception | None] | None = None

    def complete(self, value: Any, *, had_missing_translations: bool = False) -> None:
        if isinstance(value, HttpRequest):
            self.request = value
            return
        self.completed = value
        self.had_missing_translations = had_missing_translations

    def fail(self, message: str, error: Exception | None = None) -> None:
        self.failure = (message, error)


def _reply(text: Any) -> HttpResponse:
    return HttpResponse(status=200, data=json.dumps({"id": "msg_1", "content": [{"type": "text", "text": text}]}))


@pytest.fixture(autouse=True)
def no_sleep(monkeypatch: pytest.MonkeyPatch) -> list[float]:
    slept: list[float] = []

    async def fake_sleep(delay: float) -> None:
        slept.append(delay)

    monkeypatch.setattr(trans_claude.asyncio, "sleep", fake_sleep)
    return slept


@pytest.fixture
def init_context() -> FakeInitContext:
    return FakeInitContext(settings={("Claude", "ApiKey"): "sk-test"})


@pytest.fixture
def engine(init_context: FakeInitContext) -> ClaudeTranslation:
    instance = ClaudeTranslation(rng=random.Random(42))
    instance.initialize(init_context)
    return instance


def test_engine_is_registered() -> None:
    assert TransInterface.registered["claude"] is ClaudeTranslation


def test_engine_attributes() -> None:
    instance = ClaudeTranslation()

    assert instance.engine_name == "claude"
    assert instance.engine_attributes.friendly_name == "Claude AI Translator"
    assert instance.max_concurrency == 1
    assert instance.max_translations_per_request == 5
    assert instance.state is EndpointState.UNINITIALIZED


def test_engine_attributes_cannot_be_replaced() -> None:
    instance = ClaudeTranslation()

    with pytest.raises(RuntimeError, match="only be set once"):
        instance.engine_attributes = instance.engine_attributes


def test_initialize_creates_defaults(engine: ClaudeTranslation, init_context: FakeInitContext) -> None:
    config = engine.endpoint_config

    assert engine.state is EndpointState.READY
    assert config.endpoint_url == "https://api.anthropic.com/v1/messages"
    assert config.model == "claude-3-5-haiku-latest"
    assert config.system_prompt.startswith("You are a specialized translator for video game content.")
    assert config.delay_window.minimum == 1.0
    assert config.delay_window.maximum == 3.0
    assert init_context.settings[("Claude", "MinDelaySeconds")] == 1.0
    assert init_context.insecure_hosts == ["api.anthropic.com"]
    assert len(init_context.delays) == 1
    assert 1.0 <= init_context.delays[0] <= 3.0
    assert engine.translation_delay == init_context.delays[0]


def test_endpoint_config_repr_hides_api_key(engine: ClaudeTranslation) -> None:
    assert "sk-test" not in repr(engine.endpoint_config)


def test_initialize_requires_api_key(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("CLAUDE_API_OAUTH", raising=False)
    instance = ClaudeTranslation()

    with pytest.raises(ConfigurationError, match="ApiKey"):
        instance.initialize(FakeInitContext())

    assert instance.state is EndpointState.UNINITIALIZED
    with pytest.raises(ConfigurationError):
        _ = instance.endpoint_config


def test_initialize_reads_api_key_from_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("CLAUDE_API_OAUTH", "sk-env")
    instance = ClaudeTranslation()

    instance.initialize(FakeInitContext())

    assert instance.endpoint_config.api_key == "sk-env"


def test_initialize_corrects_and_persists_low_delays() -> None:
    context = FakeInitContext(
        settings={
            ("Claude", "ApiKey"): "sk-test",
            ("Claude", "MinDelaySeconds"): 0.5,
            ("Claude", "MaxDelaySeconds"): 2.0,
        }
    )
    instance = ClaudeTranslation()

    with pytest.warns(PolicyCorrectionWarning):
        instance.initialize(context)

    assert instance.endpoint_config.delay_window.minimum == 1.0
    assert instance.endpoint_config.delay_window.maximum == 3.0
    assert context.saved == {("Claude", "MinDelaySeconds"): 1.0, ("Claude", "MaxDelaySeconds"): 3.0}


@pytest.mark.parametrize(("source", "destination"), [("xx", "en"), ("ja", "auto")])
def test_initialize_rejects_unsupported_languages(source: str, destination: str) -> None:
    context = FakeInitContext(
        settings={("Claude", "ApiKey"): "sk-test"}, source_language=source, destination_language=destination
    )
    instance = ClaudeTranslation()

    with pytest.raises(NotSupportedLanguagesError):
        instance.initialize(context)

    assert instance.state is EndpointState.UNINITIALIZED


def test_initialize_rejects_endpoint_without_host() -> None:
    context = FakeInitContext(settings={("Claude", "ApiKey"): "sk-test", ("Claude", "ApiEndpoint"): "not a url"})

    with pytest.raises(ConfigurationError, match="Invalid API endpoint URL"):
        ClaudeTranslation().initialize(context)


@pytest.mark.asyncio
async def test_before_translate_sleeps_for_sampled_delay(engine: ClaudeTranslation, no_sleep: list[float]) -> None:
    await engine.on_before_translate(FakeCallContext(["a"]))

    assert engine.state is EndpointState.DELAYING
    assert len(no_sleep) == 1
    assert 1.0 <= no_sleep[0] <= 3.0
    assert no_sleep[0] == engine.translation_delay


def test_create_request_builds_payload_and_headers(engine: ClaudeTranslation) -> None:
    context = FakeCallContext(["Hello", "World"], source_language="en", destination_language="zh-CN")

    engine.on_create_request(context)

    assert engine.state is EndpointState.REQUESTING
    assert context.request is not None
    assert context.request.method == "POST"
    assert context.request.url == "https://api.anthropic.com/v1/messages"
    assert context.request.headers == {
        "x-api-key": "sk-test",
        "anthropic-version": "2023-06-01",
        "Content-Type": "application/json",
    }
    body = json.loads(context.request.data)
    assert body["model"] == "claude-3-5-haiku-latest"
    assert body["max_tokens"] == 4000
    assert body["temperature"] == 0.1
    assert [m["role"] for m in body["messages"]] == ["system", "user"]
    assert body["messages"][1]["content"].startswith("Translate the following text from en to zh.")
    assert body["messages"][1]["content"].endswith("[1] Hello\n[2] World\n")


def test_create_request_requires_initialization() -> None:
    with pytest.raises(ConfigurationError):
        ClaudeTranslation().on_create_request(FakeCallContext(["a"]))


def test_extract_single_fragment_completes_with_string(engine: ClaudeTranslation) -> None:
    context = FakeCallContext(["こんにちは"], response=_reply("  Hello  "))

    engine.on_extract_translation(context)

    assert context.completed == "Hello"
    assert context.failure is None
    assert engine.state is EndpointState.READY


def test_extract_batch_completes_with_list(engine: ClaudeTranslation) -> None:
    context = FakeCallContext(["Hello", "World"], response=_reply("[2] 世界\n[1] こんにちは"))

    engine.on_extract_translation(context)

    assert context.completed == ["こんにちは", "世界"]
    assert context.had_missing_translations is False


def test_extract_partial_batch_warns_and_falls_back(engine: ClaudeTranslation) -> None:
    context = FakeCallContext(["Hello", "World"], response=_reply("[1] こんにちは"))

    with pytest.warns(PartialTranslationWarning, match=r"missing: \[2\]"):
        engine.on_extract_translation(context)

    assert context.completed == ["こんにちは", "World"]
    assert context.had_missing_translations is True
    assert engine.state is EndpointState.READY


@pytest.mark.parametrize("text", ["", None])
def test_extract_empty_text_fails(engine: ClaudeTranslation, text: str | None) -> None:
    context = FakeCallContext(["Hello", "World"], response=_reply(text))

    engine.on_extract_translation(context)

    assert context.completed is None
    assert context.failure is not None
    message, error = context.failure
    assert message == "Claude API returned empty translation."
    assert isinstance(error, EmptyResponseError)
    assert engine.state is EndpointState.READY


@pytest.mark.parametrize(
    "body",
    [
        "not json",
        "[]",
        json.dumps({"id": "x"}),
        json.dumps({"content": []}),
        json.dumps({"content": "text"}),
        json.dumps({"content": [{"type": "text", "text": 3}]}),
        json.dumps({"content": [{"type": "text", "text": ["[1] Hello"]}]}),
        json.dumps({"content": [{"type": "text", "text": {"value": "Hello"}}]}),
    ],
)
def test_extract_malformed_envelope_fails(engine: ClaudeTranslation, body: str) -> None:
    context = FakeCallContext(["Hello"], response=HttpResponse(status=200, data=body))

    engine.on_extract_translation(context)

    assert context.completed is None
    assert context.failure is not None
    message, error = context.failure
    assert message.startswith("Failed to parse Claude API response: ")
    assert isinstance(error, ResponseParseError)
    assert engine.state is EndpointState.READY


def test_extract_failure_is_logged(engine: ClaudeTranslation, caplog: pytest.LogCaptureFixture) -> None:
    context = FakeCallContext(["Hello"], response=HttpResponse(status=200, data="{"))

    engine.on_extract_translation(context)

    assert any("Failed to parse Claude API response" in rec.message for rec in caplog.records)


def test_extract_rejects_non_string_text(engine: ClaudeTranslation) -> None:
    context = FakeCallContext(["Hello"], response=_reply(3))

    engine.on_extract_translation(context)

    assert context.completed is None
    assert context.failure is not None
    assert "'text' must be a string, got int" in context.failure[0]


def test_transport_failure_returns_engine_to_ready(
    engine: ClaudeTranslation, caplog: pytest.LogCaptureFixture
) -> None:
    context = FakeCallContext(["Hello"])
    engine.on_create_request(context)
    assert engine.state is EndpointState.REQUESTING

    engine.on_transport_failed(context, ConnectionError("reset by peer"))

    assert engine.state is EndpointState.READY
    assert context.completed is None
    assert any("Claude API request failed: reset by peer" in rec.message for rec in caplog.records)
