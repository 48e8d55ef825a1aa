"""Logging utilities for modpage.

Loggers are standalone structlog loggers: creating one never touches the
global structlog configuration.
"""

import logging
import sys
from logging.handlers import RotatingFileHandler
from os import getenv
from pathlib import Path
from typing import Literal, cast

import structlog
from structlog.typing import FilteringBoundLogger

LogFormatType = Literal["json", "text"]

DEFAULT_MAX_BYTES = 10 * 1024 * 1024
DEFAULT_BACKUP_COUNT = 5


def get_log_level() -> int:
    """Get the log level from environment variables.

    Checks MODPAGE_DEBUG first (sets DEBUG if present), then
    MODPAGE_LOG_LEVEL. Defaults to INFO if neither is set.
    """
    if getenv("MODPAGE_DEBUG", None):
        return logging.DEBUG

    log_levels = logging.getLevelNamesMapping()
    return log_levels.get(getenv("MODPAGE_LOG_LEVEL", "info").upper(), logging.INFO)


def log_level_from_string(level: str, *, respect_env: bool = False) -> int:
    """Convert a log level string to a logging level integer.

    Args:
        level: Log level string (debug, info, warning, error).
        respect_env: If True, MODPAGE_DEBUG overrides to DEBUG level.

    Returns:
        The logging level as an integer.
    """
    if respect_env and getenv("MODPAGE_DEBUG", None):
        return logging.DEBUG

    log_levels = logging.getLevelNamesMapping()
    return log_levels.get(level.upper(), logging.INFO)


def create_logger(
    *,
    level: str | None = None,
    log_format: LogFormatType = "text",
    log_file: str = "",
    max_bytes: int = DEFAULT_MAX_BYTES,
    backup_count: int = DEFAULT_BACKUP_COUNT,
) -> FilteringBoundLogger:
    """Create a standalone structlog logger.

    The level is, in order of precedence: MODPAGE_DEBUG, ``level``,
    MODPAGE_LOG_LEVEL, INFO.

    Args:
        level: Log level threshold (debug, info, warning, error).
        log_format: Output format, either "json" or "text".
        log_file: File to write to through a rotating handler. Empty writes
            to stderr.
        max_bytes: Size at which the log file rotates.
        backup_count: Number of rotated files to keep.

    Returns:
        A configured FilteringBoundLogger instance.
    """
    effective_level = (
        log_level_from_string(level, respect_env=True)
        if level is not None
        else get_log_level()
    )

    raw_logger: object
    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        stdlib_logger = logging.getLogger(f"modpage.{log_path.stem}.{id(log_path)}")
        stdlib_logger.handlers.clear()
        stdlib_logger.propagate = False
        stdlib_logger.setLevel(effective_level)

        handler = RotatingFileHandler(
            log_path,
            maxBytes=max_bytes,
            backupCount=backup_count,
            encoding="utf-8",
        )
        handler.setLevel(effective_level)
        handler.setFormatter(logging.Formatter("%(message)s"))
        stdlib_logger.addHandler(handler)
        raw_logger = stdlib_logger
    else:
        raw_logger = structlog.PrintLoggerFactory(file=sys.stderr)()

    processors: list[structlog.typing.Processor] = [
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
    ]

    if log_format == "json":
        processors.append(structlog.processors.dict_tracebacks)
        processors.append(structlog.processors.JSONRenderer())
    else:
        # "timestamp [level] event key=value ..."
        processors.append(structlog.dev.ConsoleRenderer(colors=False))

    return cast(
        "FilteringBoundLogger",
        structlog.wrap_logger(
            raw_logger,
            processors=processors,
            wrapper_class=structlog.make_filtering_bound_logger(effective_level),
            context_class=dict,
        ),
    )
