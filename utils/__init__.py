"""Utility modules for the batch translation adapter.

This package provides the logging setup shared by every module.
"""

from utils.logger_utils import LoggerUtils

__all__: list[str] = ["LoggerUtils"]
