"""Shared utilities."""

from ._logging import (
    LogFormatType,
    create_logger,
    get_log_level,
    log_level_from_string,
)

__all__ = [
    "LogFormatType",
    "create_logger",
    "get_log_level",
    "log_level_from_string",
]
