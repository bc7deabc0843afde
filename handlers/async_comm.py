"""Asynchronous HTTP transport used by the translation host.

``AsyncHttp`` sends the requests built by translation endpoints and returns the raw response body.
Certificate validation can be switched off for individual hosts that an endpoint asks to exempt.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Final, Literal, Self
from urllib.parse import urlsplit

import aiohttp
from aiohttp.client import ClientSession

from models.translation_models import HttpResponse
from utils.logger_utils import LoggerUtils

if TYPE_CHECKING:
    import logging


__all__: list[str] = ["AsyncCommError", "AsyncCommTimeoutError", "AsyncHttp"]

logger: logging.Logger = LoggerUtils.get_logger(__name__)

HTTPMethod = Literal["POST"]

CONNECT_TIMEOUT: Final[float] = 5.0


class AsyncHttp:
    """Asynchronous HTTP client returning raw text responses.

    The aiohttp session is created on construction and can be re-created after close()
    by entering the context again.
    """

    def __init__(self) -> None:
        logger.info("%s initializing", self.__class__.__name__)
        self.__session: ClientSession | None = None
        self._insecure_hosts: set[str] = set()
        self.initialize_session()

    async def __aenter__(self) -> Self:
        logger.debug("%s entering context", self.__class__.__name__)
        self.initialize_session(suppress_already_log=True)
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        _ = exc_type, exc_val, exc_tb
        logger.debug("%s exiting context", self.__class__.__name__)
        await self.close()

    def initialize_session(self, *, suppress_already_log: bool = False) -> None:
        """Create the aiohttp session unless an open one exists.

        Args:
            suppress_already_log (bool): If True, do not log when the session is already initialized.
        """
        if self.__session is None or self.__session.closed:
            self.__session = ClientSession(raise_for_status=True)
            logger.debug("%s session initialized", self.__class__.__name__)
        elif not suppress_already_log:
            logger.debug("%s session already initialized", self.__class__.__name__)

    @property
    def session(self) -> ClientSession:
        if self.__session is None or self.__session.closed:
            msg = "Session is not initialized or has been closed"
            raise RuntimeError(msg)
        return self.__session

    async def close(self) -> None:
        """Close the aiohttp session if it is open."""
        if self.__session and not self.__session.closed:
            await self.__session.close()
        logger.info("%s session closed", self.__class__.__name__)

    def disable_certificate_checks_for(self, host: str) -> None:
        """Skip certificate validation for requests to ``host``."""
        host = host.lower()
        if host not in self._insecure_hosts:
            logger.warning("Certificate validation disabled for host '%s'", host)
        self._insecure_hosts.add(host)

    def is_certificate_check_disabled(self, url: str) -> bool:
        return (urlsplit(url).hostname or "") in self._insecure_hosts

    async def post(
        self,
        *,
        url: str,
        body: str,
        headers: dict[str, str] | None = None,
        total_timeout: float = 60.0,
    ) -> HttpResponse:
        """Perform an asynchronous HTTP POST request with a pre-serialized body.

        Args:
            url (str): The URL to send the POST request to.
            body (str): The request body, sent as UTF-8.
            headers (dict[str, str] | None): Request headers.
            total_timeout (float): Total timeout for the request in seconds. 0 or less disables it.

        Returns:
            HttpResponse: Status code and body text.

        Raises:
            AsyncCommTimeoutError: If the server does not answer in time.
            AsyncCommError: If the connection fails, the server answers with an error status,
                or any other client error occurs.
        """
        logger.debug("'url': '%s', 'headers': %s, 'timeout': '%s'", url, list(headers or {}), total_timeout)
        return await self._request(
            "POST",
            url=url,
            total_timeout=total_timeout,
            data=body.encode("utf-8"),
            headers=headers or {},
        )

    def _build_timeout(self, total_timeout: float) -> aiohttp.ClientTimeout:
        if total_timeout <= 0:
            return aiohttp.ClientTimeout(total=None)
        if total_timeout < CONNECT_TIMEOUT:
            # A connect timeout longer than the total would never apply.
            return aiohttp.ClientTimeout(total=total_timeout)
        return aiohttp.ClientTimeout(connect=CONNECT_TIMEOUT, total=total_timeout)

    async def _request(
        self,
        method: HTTPMethod,
        *,
        url: str,
        total_timeout: float,
        **kwargs: Any,
    ) -> HttpResponse:
        logger.debug("[%s] url=%s timeout=%s", method, url, total_timeout)
        if self.is_certificate_check_disabled(url):
            kwargs["ssl"] = False

        try:
            async with self.session.request(
                method=method,
                url=url,
                timeout=self._build_timeout(total_timeout),
                **kwargs,
            ) as resp:
                resp.raise_for_status()
                raw: bytes = await resp.read()
                return HttpResponse(status=resp.status, data=raw.decode("utf-8", errors="replace"))

        except TimeoutError as err:
            logger.debug(err)
            msg = "Timeout due to a lack of response from the server."
            raise AsyncCommTimeoutError(msg) from err
        except ConnectionResetError as err:
            logger.debug(err)
            msg = "The connection to the server has been disconnected."
            raise AsyncCommError(msg) from err
        except aiohttp.ClientConnectorError as err:
            logger.debug(err)
            msg = "The server could not be reached."
            raise AsyncCommError(msg) from err
        except aiohttp.ClientResponseError as err:
            logger.debug(err)
            msg = "Error response from the server."
            raise AsyncCommError(msg, response=err) from err
        except aiohttp.ClientError as err:
            logger.debug(err)
            msg = f"The request to the server failed: {err.__class__.__name__}"
            raise AsyncCommError(msg) from err


class AsyncCommError(Exception):
    """Base class for asynchronous communication errors.

    When a ``response`` keyword argument carrying an aiohttp response error is given,
    its status code is appended to the message.
    """

    def __init__(self, msg: str | BaseException, **kwargs: Any) -> None:
        self.msg: str = str(msg)
        self.status: int | None = None

        rsp: aiohttp.ClientResponseError | None = kwargs.pop("response", None)
        if isinstance(rsp, aiohttp.ClientResponseError):
            self.status = rsp.status
            self.msg = f"{self.msg}: status='{rsp.status}'"

        super().__init__(self.msg)


class AsyncCommTimeoutError(AsyncCommError):
    """Error raised when a request does not complete within its timeout."""
