from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from core.trans.engines import ClaudeTranslation  # noqa: F401
from core.trans.interface import ConfigurationError, Result, TransInterface, TranslateExceptionError
from handlers.async_comm import AsyncCommError, AsyncHttp
from utils.logger_utils import LoggerUtils

if TYPE_CHECKING:
    import logging
    from collections.abc import Sequence

    from config.loader import ConfigLoader
    from core.trans.context import SettingT
    from models.config_models import Config
    from models.translation_models import HttpRequest, HttpResponse


__all__: list[str] = ["TransManager"]

logger: logging.Logger = LoggerUtils.get_logger(__name__)


class _InitializationContext:
    """Host services handed to an endpoint during initialization."""

    def __init__(self, manager: TransManager) -> None:
        self._manager: TransManager = manager

    @property
    def source_language(self) -> str:
        return self._manager.config.TRANSLATION.SOURCE_LANGUAGE

    @property
    def destination_language(self) -> str:
        return self._manager.config.TRANSLATION.DESTINATION_LANGUAGE

    def get_or_create_setting(self, section: str, key: str, default: SettingT) -> SettingT:
        return self._manager.settings.get_or_create_setting(section, key, default)

    def set_setting(self, section: str, key: str, value: str | float | bool) -> None:
        self._manager.settings.set_setting(section, key, value)

    def set_translation_delay(self, seconds: float) -> None:
        logger.debug("Translation delay set to %.2f sec", seconds)
        self._manager.translation_delay = seconds

    def disable_certificate_checks_for(self, host: str) -> None:
        self._manager.http.disable_certificate_checks_for(host)


@dataclass
class _TranslationContext:
    untranslated_texts: list[str]
    source_language: str
    destination_language: str


@dataclass
class _RequestCreationContext(_TranslationContext):
    request: HttpRequest | None = None

    def complete(self, request: HttpRequest) -> None:
        if self.request is not None:
            msg = "The request for this call has already been created."
            raise RuntimeError(msg)
        self.request = request


@dataclass
class _ExtractionContext(_TranslationContext):
    response: HttpResponse
    result: Result | None = field(default=None, init=False)

    def complete(self, translations: str | list[str], *, had_missing_translations: bool = False) -> None:
        self._ensure_open()
        texts: list[str] = [translations] if isinstance(translations, str) else list(translations)
        self.result = Result(
            sources=self.untranslated_texts,
            texts=texts,
            had_missing_translations=had_missing_translations,
        )

    def fail(self, message: str, error: Exception | None = None) -> None:
        self._ensure_open()
        logger.debug("Translation call failed: %s (%r)", message, error)
        self.result = Result(sources=self.untranslated_texts, error=message)

    def _ensure_open(self) -> None:
        if self.result is not None:
            msg = "This translation call has already finished."
            raise RuntimeError(msg)


class TransManager:
    """Host that drives a translation endpoint.

    Fragments are packed into batches no larger than the endpoint allows. Each batch goes through
    the endpoint hooks in order, with at most ``max_concurrency`` calls in flight.

    Args:
        config (Config): Host configuration.
        settings (ConfigLoader): Store for the endpoint's own settings.
        http (AsyncHttp | None): Transport. Created on initialize() when omitted.
    """

    def __init__(self, config: Config, settings: ConfigLoader, http: AsyncHttp | None = None) -> None:
        self.config: Config = config
        self.settings: ConfigLoader = settings
        self.__http: AsyncHttp | None = http
        self.__owns_http: bool = http is None
        self.__engine: TransInterface | None = None
        self.__semaphore: asyncio.Semaphore | None = None
        self.translation_delay: float = 0.0
        logger.debug("Registered translation engines: %s", TransInterface.registered)

    @property
    def http(self) -> AsyncHttp:
        if self.__http is None:
            msg = "The HTTP transport is not initialized"
            raise RuntimeError(msg)
        return self.__http

    @property
    def engine(self) -> TransInterface:
        """The initialized endpoint.

        Raises:
            TranslateExceptionError: If initialize() has not completed.
        """
        if self.__engine is None:
            msg = "No translation engine is initialized"
            raise TranslateExceptionError(msg)
        return self.__engine

    async def initialize(self) -> None:
        """Create and initialize the configured endpoint.

        Raises:
            ConfigurationError: If the engine is unknown or cannot start with the current settings.
        """
        logger.info("TransManager initialization started")
        name: str = self.config.TRANSLATION.ENGINE
        engine_cls: type[TransInterface] | None = TransInterface.registered.get(name)
        if engine_cls is None:
            msg: str = f"Translation engine not found: '{name}'"
            raise ConfigurationError(msg)

        if self.__http is None:
            self.__http = AsyncHttp()

        instance: TransInterface = engine_cls()
        try:
            instance.initialize(_InitializationContext(self))
        except TranslateExceptionError as err:
            logger.critical("Exception in '%s' translation setup: %s", name, err)
            raise

        self.__engine = instance
        self.__semaphore = asyncio.Semaphore(instance.max_concurrency)
        logger.info("Translation engine initialized: '%s'", name)
        logger.debug("Engine attributes: %s", instance.engine_attributes)

    async def translate(self, fragments: Sequence[str]) -> list[Result]:
        """Translate ``fragments``, packing them into as few calls as the endpoint allows.

        Returns:
            list[Result]: One result per call, in input order.
        """
        size: int = self.engine.max_translations_per_request
        batches: list[list[str]] = [list(fragments[i : i + size]) for i in range(0, len(fragments), size)]
        logger.debug("Translating %d fragments in %d calls", len(fragments), len(batches))
        return list(await asyncio.gather(*(self.translate_batch(batch) for batch in batches)))

    async def translate_batch(self, fragments: Sequence[str]) -> Result:
        """Run one translation call.

        Transport errors and endpoint failures are returned as a failed Result.

        Raises:
            ValueError: If ``fragments`` is empty or larger than the endpoint allows.
            TranslateExceptionError: If initialize() has not completed.
        """
        engine: TransInterface = self.engine
        msg: str
        if not fragments:
            msg = "At least one fragment is required."
            raise ValueError(msg)
        if len(fragments) > engine.max_translations_per_request:
            msg = f"Batch of {len(fragments)} fragments exceeds the limit of {engine.max_translations_per_request}."
            raise ValueError(msg)

        semaphore: asyncio.Semaphore = self.__semaphore or asyncio.Semaphore(engine.max_concurrency)
        self.__semaphore = semaphore
        call = _TranslationContext(
            untranslated_texts=list(fragments),
            source_language=self.config.TRANSLATION.SOURCE_LANGUAGE,
            destination_language=self.config.TRANSLATION.DESTINATION_LANGUAGE,
        )
        async with semaphore:
            await engine.on_before_translate(call)

            creation = _RequestCreationContext(**vars(call))
            engine.on_create_request(creation)
            if creation.request is None:
                return Result(sources=call.untranslated_texts, error="The endpoint did not create a request.")

            try:
                response: HttpResponse = await self.http.post(
                    url=creation.request.url,
                    body=creation.request.data,
                    headers=creation.request.headers,
                    total_timeout=self.config.TRANSLATION.TIMEOUT,
                )
            except AsyncCommError as err:
                logger.error("Translation request failed: %s", err)
                engine.on_transport_failed(call, err)
                return Result(sources=call.untranslated_texts, error=str(err))

            extraction = _ExtractionContext(**vars(call), response=response)
            engine.on_extract_translation(extraction)

        if extraction.result is None:
            return Result(sources=call.untranslated_texts, error="The endpoint did not finish the call.")
        logger.debug("Translation result: %s", extraction.result)
        return extraction.result

    async def close(self) -> None:
        """Release the transport if this manager created it."""
        logger.info("Class '%s' termination process started.", self.__class__.__name__)
        if self.__owns_http and self.__http is not None:
            await self.__http.close()
        logger.info("Class '%s' termination process completed.", self.__class__.__name__)
