"""Transport handlers for the batch translation adapter.

This package provides the asynchronous HTTP client used to reach translation endpoints.
"""

from handlers.async_comm import AsyncCommError, AsyncCommTimeoutError, AsyncHttp

__all__: list[str] = [
    "AsyncCommError",
    "AsyncCommTimeoutError",
    "AsyncHttp",
]
