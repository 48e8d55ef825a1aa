# pyright: reportUnusedCallResult=false
"""CLI context for global state management.

The CLIContext is set once at CLI startup and made available to all
commands via contextvars.
"""

import contextvars
from dataclasses import dataclass, field
from pathlib import Path

from rich.console import Console
from structlog.typing import FilteringBoundLogger

from modpage.config import Config

_current_cli_context: contextvars.ContextVar["CLIContext | None"] = (
    contextvars.ContextVar("cli_context", default=None)
)


@dataclass(frozen=True, slots=True)
class CLIContext:
    """Global CLI context with configuration and options.

    Attributes:
        config: Loaded configuration object.
        project_root: Project root given on the command line, if any.
        config_error: Error message if config loading failed.
        logger: Structured logger for commands.
        console: Console for command output.
        error_console: Console for errors.
    """

    config: Config = field(repr=False)
    project_root: Path | None = None
    config_error: str | None = None
    logger: FilteringBoundLogger | None = field(default=None, repr=False)
    console: Console = field(default_factory=Console, repr=False)
    error_console: Console = field(
        default_factory=lambda: Console(stderr=True), repr=False
    )

    @classmethod
    def get_current(cls) -> "CLIContext":
        """Get the active CLIContext, or a default one if none is set."""
        ctx = _current_cli_context.get()
        if ctx is not None:
            return ctx
        return cls(config=Config.from_dict({}))

    @classmethod
    def set_current(cls, ctx: "CLIContext") -> None:
        _current_cli_context.set(ctx)

    @classmethod
    def reset(cls) -> None:
        """Reset to the default context."""
        _current_cli_context.set(None)
