"""Core components of the batch translation adapter.

This package contains the translation endpoint interface, the Claude endpoint,
the prompt and reply codecs, request pacing and the manager that drives an endpoint.
"""

from core.version import VERSION

__all__: list[str] = ["VERSION"]
