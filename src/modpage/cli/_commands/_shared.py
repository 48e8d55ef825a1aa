"""Shared CLI utilities for commands."""

from enum import IntEnum
from typing import Never

from rich.console import Console
from rich.markup import escape

__all__ = [
    "ExitCode",
    "exit_with_error",
    "get_error_console",
]


class ExitCode(IntEnum):
    """Standard exit codes for modpage CLI commands."""

    SUCCESS = 0
    LOAD_ERROR = 1
    VALIDATION_ERROR = 2
    NOT_FOUND = 3
    IO_ERROR = 4
    INTERNAL_ERROR = 5


def get_error_console() -> Console:
    return Console(stderr=True)


def exit_with_error(
    message: str,
    code: ExitCode = ExitCode.INTERNAL_ERROR,
    *,
    console: Console | None = None,
) -> Never:
    """Print an error message and exit with the specified code.

    Raises:
        SystemExit: Always raised with the specified exit code.
    """
    if console is None:
        console = get_error_console()

    console.print(f"[red]Error:[/red] {escape(message)}")
    raise SystemExit(code)
