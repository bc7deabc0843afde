"""Claude messages API endpoint.

Packs up to five fragments into one prompt, paces requests with a random pause,
and splits the single text reply back into one translation per fragment.
"""

from __future__ import annotations

import asyncio
import json
import warnings
from typing import TYPE_CHECKING, Final
from urllib.parse import urlsplit

from marshmallow.exceptions import ValidationError

from core.trans.decoder import ResponseDecoder
from core.trans.delay import MAXIMUM_DELAY_FLOOR, MINIMUM_DELAY_FLOOR, DelayScheduler
from core.trans.interface import (
    ConfigurationError,
    EmptyResponseError,
    EndpointState,
    EngineAttributes,
    PartialTranslationWarning,
    ResponseParseError,
    TransInterface,
)
from core.trans.lang_codes import LanguageNormalizer
from core.trans.prompt import DEFAULT_SYSTEM_PROMPT, MAX_BATCH_SIZE, PromptEncoder
from models.config_models import DelayWindow, EndpointConfig
from models.translation_models import DecodedBatch, HttpRequest, MessagesRequest, MessagesResponse
from utils.logger_utils import LoggerUtils

if TYPE_CHECKING:
    import logging
    import random

    from core.trans.context import ExtractionContext, InitializationContext, RequestCreationContext, TranslationContext

__all__: list[str] = ["ClaudeTranslation"]

logger: logging.Logger = LoggerUtils.get_logger(__name__)

SETTINGS_SECTION: Final[str] = "Claude"
DEFAULT_API_ENDPOINT: Final[str] = "https://api.anthropic.com/v1/messages"
DEFAULT_MODEL: Final[str] = "claude-3-5-haiku-latest"
API_VERSION: Final[str] = "2023-06-01"


class ClaudeTranslation(TransInterface):
    """Batched translation endpoint for the Claude messages API.

    Args:
        rng (random.Random | None): Random source for the pacing delay.
    """

    def __init__(self, rng: random.Random | None = None) -> None:
        super().__init__()
        self.engine_attributes = EngineAttributes(
            name=self.fetch_engine_name(),
            friendly_name="Claude AI Translator",
            max_concurrency=1,
            max_translations_per_request=MAX_BATCH_SIZE,
        )
        self._scheduler = DelayScheduler(rng)
        self._encoder = PromptEncoder(MAX_BATCH_SIZE)
        self._decoder = ResponseDecoder()
        self.__config: EndpointConfig | None = None
        self._state: EndpointState = EndpointState.UNINITIALIZED
        self.translation_delay: float = 0.0

    @staticmethod
    def fetch_engine_name() -> str:
        return "claude"

    @property
    def state(self) -> EndpointState:
        return self._state

    @property
    def endpoint_config(self) -> EndpointConfig:
        if self.__config is None:
            msg = "The Claude endpoint is not initialised"
            raise ConfigurationError(msg)
        return self.__config

    def initialize(self, context: InitializationContext) -> None:
        """Resolve the endpoint settings and validate the language pair.

        Raises:
            ConfigurationError: If no API key is available.
            NotSupportedLanguagesError: If the source or destination language is not supported.
        """
        logger.debug("'%s' Initialization start", self.__class__.__name__)
        msg: str

        api_key: str = context.get_or_create_setting(SETTINGS_SECTION, "ApiKey", "") or self.get_authentication_key()
        if not api_key:
            msg = (
                "Claude API key is required. Please set it in the configuration file under "
                f"[{SETTINGS_SECTION}] section with key 'ApiKey'."
            )
            raise ConfigurationError(msg)

        endpoint_url: str = context.get_or_create_setting(SETTINGS_SECTION, "ApiEndpoint", DEFAULT_API_ENDPOINT)
        model: str = context.get_or_create_setting(SETTINGS_SECTION, "Model", DEFAULT_MODEL)
        system_prompt: str = context.get_or_create_setting(SETTINGS_SECTION, "SystemPrompt", DEFAULT_SYSTEM_PROMPT)
        delay_window: DelayWindow = self._resolve_delay_window(context)

        LanguageNormalizer.validate_source(context.source_language)
        LanguageNormalizer.validate_destination(context.destination_language)

        host: str | None = urlsplit(endpoint_url).hostname
        if not host:
            msg = f"Invalid API endpoint URL: '{endpoint_url}'"
            raise ConfigurationError(msg)
        context.disable_certificate_checks_for(host)

        self.translation_delay = self._scheduler.sample(delay_window)
        context.set_translation_delay(self.translation_delay)

        self.__config = EndpointConfig(
            api_key=api_key,
            endpoint_url=endpoint_url,
            model=model,
            system_prompt=system_prompt,
            delay_window=delay_window,
        )
        self._state = EndpointState.READY
        logger.info("'%s' initialised: %r", self.__class__.__name__, self.__config)

    def _resolve_delay_window(self, context: InitializationContext) -> DelayWindow:
        """Read the delay bounds, raising them to their floors and persisting any correction."""
        configured = DelayWindow(
            minimum=context.get_or_create_setting(SETTINGS_SECTION, "MinDelaySeconds", MINIMUM_DELAY_FLOOR),
            maximum=context.get_or_create_setting(SETTINGS_SECTION, "MaxDelaySeconds", MAXIMUM_DELAY_FLOOR),
        )
        corrected: DelayWindow = self._scheduler.apply_policy_floor(configured)
        if corrected.minimum != configured.minimum:
            context.set_setting(SETTINGS_SECTION, "MinDelaySeconds", corrected.minimum)
        if corrected.maximum != configured.maximum:
            context.set_setting(SETTINGS_SECTION, "MaxDelaySeconds", corrected.maximum)
        return corrected

    async def on_before_translate(self, context: TranslationContext) -> None:
        """Wait a freshly sampled delay before the request of this call is built."""
        _ = context
        self._state = EndpointState.DELAYING
        self.translation_delay = self._scheduler.sample(self.endpoint_config.delay_window)
        logger.debug("Waiting %.2f sec before the next request", self.translation_delay)
        await asyncio.sleep(self.translation_delay)

    def on_create_request(self, context: RequestCreationContext) -> None:
        """Encode the fragments of this call and hand the request to the transport."""
        config: EndpointConfig = self.endpoint_config
        self._state = EndpointState.REQUESTING
        src_lang: str = LanguageNormalizer.normalize(context.source_language)
        dest_lang: str = LanguageNormalizer.normalize(context.destination_language)

        prompt: str = self._encoder.encode(context.untranslated_texts, src_lang, dest_lang)
        logger.debug("'prompt': '%s'", prompt)
        payload: MessagesRequest = self._encoder.build_payload(
            prompt, model=config.model, system_prompt=config.system_prompt
        )

        request = HttpRequest(method="POST", url=config.endpoint_url, data=payload.to_json(ensure_ascii=False))
        request.headers["x-api-key"] = config.api_key
        request.headers["anthropic-version"] = API_VERSION
        request.headers["Content-Type"] = "application/json"
        context.complete(request)

    def on_transport_failed(self, context: TranslationContext, error: Exception) -> None:
        """Close the call after the request could not be delivered."""
        _ = context
        self._state = EndpointState.FAILING
        logger.error("Claude API request failed: %s", error)
        self._state = EndpointState.READY

    def on_extract_translation(self, context: ExtractionContext) -> None:
        """Decode the reply and finish the call.

        Completes with a single string for one fragment and with a list otherwise.
        Any failure is reported through ``context.fail`` and leaves the endpoint ready.
        """
        fragments: list[str] = context.untranslated_texts
        try:
            decoded: DecodedBatch = self._decode_response(context.response.data, fragments)
        except EmptyResponseError as err:
            self._state = EndpointState.FAILING
            logger.error("Claude API returned empty translation: %s", err)
            context.fail("Claude API returned empty translation.", err)
        except ResponseParseError as err:
            self._state = EndpointState.FAILING
            logger.error("%s", err)
            context.fail(str(err), err)
        else:
            self._state = EndpointState.COMPLETING
            if decoded.had_missing_translations:
                warnings.warn(
                    "[Claude] Some translations were missing in the response. Using original text as fallback. "
                    f"(missing: {[i + 1 for i in decoded.missing_indices]})",
                    PartialTranslationWarning,
                    stacklevel=2,
                )
            if len(fragments) == 1:
                context.complete(decoded.translations[0])
            else:
                context.complete(decoded.translations, had_missing_translations=decoded.had_missing_translations)
        finally:
            self._state = EndpointState.READY

    def _decode_response(self, body: str, fragments: list[str]) -> DecodedBatch:
        """Extract the reply text from the envelope and split it per fragment.

        Raises:
            EmptyResponseError: If the reply carries no text.
            ResponseParseError: For any other failure, with the underlying cause chained.
        """
        try:
            text: str | None = self._extract_text(body)
            return self._decoder.decode(text, len(fragments), fragments)
        except (EmptyResponseError, ResponseParseError):
            raise
        except Exception as err:  # noqa: BLE001
            msg: str = f"Failed to parse Claude API response: {err}"
            raise ResponseParseError(msg) from err

    @staticmethod
    def _extract_text(body: str) -> str | None:
        """Pull the reply text out of the response envelope.

        Raises:
            ResponseParseError: If the body is not a JSON object with a non-empty ``content`` array.
        """
        try:
            parsed = json.loads(body)
            if not isinstance(parsed, dict):
                msg: str = f"expected a JSON object, got {type(parsed).__name__}"
                raise TypeError(msg)
            envelope: MessagesResponse = MessagesResponse.from_dict(parsed, infer_missing=True)
        except (json.JSONDecodeError, ValidationError, TypeError, AttributeError, KeyError) as err:
            msg = f"Failed to parse Claude API response: {err}"
            raise ResponseParseError(msg) from err

        if not isinstance(envelope.content, list) or not envelope.content:
            msg = "Failed to parse Claude API response: no 'content' entries"
            raise ResponseParseError(msg)

        text: object = parsed["content"][0].get("text") if isinstance(parsed["content"][0], dict) else None
        if text is not None and not isinstance(text, str):
            msg = f"Failed to parse Claude API response: 'text' must be a string, got {type(text).__name__}"
            raise ResponseParseError(msg)
        return envelope.content[0].text
