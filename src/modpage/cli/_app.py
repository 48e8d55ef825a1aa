"""The command-line interface for modpage."""
# ruff: noqa: TC003  # Path needed at runtime for cyclopts parameter parsing

from pathlib import Path
from typing import Annotated

from cyclopts import App, Parameter
from rich.console import Console

from modpage.config import LogLevel, safe_load_config
from modpage.utils import create_logger

from ._commands import register_commands
from ._context import CLIContext

HELP = "Compose module templates over shared layouts and serve them."


def create_app(
    console: Console | None = None,
    error_console: Console | None = None,
    *,
    exit_on_error: bool = True,
) -> App:
    if console is None:
        console = Console()
    if error_console is None:
        error_console = Console(stderr=True)
    app = App(
        name="modpage",
        help=HELP,
        help_on_error=True,
        console=console,
        error_console=error_console,
        exit_on_error=exit_on_error,
    )

    @app.meta.default
    def _default(  # pyright: ignore[reportUnusedFunction]
        *tokens: Annotated[str, Parameter(show=False, allow_leading_hyphen=True)],
        config: Annotated[
            Path | None, Parameter(name="--config", help="Path to config file")
        ] = None,
        project_root: Annotated[
            Path | None, Parameter(name="--project-root", help="Path to project root")
        ] = None,
        log_level: Annotated[
            LogLevel | None, Parameter(name="--log-level", help="Log level")
        ] = None,
    ) -> None:
        """Launch modpage with global options.

        Args:
            tokens: Command tokens to pass to subcommands.
            config: Explicit path to config file.
            project_root: Path to project root directory.
            log_level: Override the configured log level.
        """
        cli_overrides: dict[str, object] | None = None
        if log_level is not None:
            cli_overrides = {"logging": {"level": log_level.value}}

        loaded_config, config_error = safe_load_config(
            config_path=config,
            project_root=project_root,
            cli_overrides=cli_overrides,
        )

        logger = create_logger(
            level=loaded_config.logging.level.value,
            log_format=loaded_config.logging.format.value,  # type: ignore[arg-type]
            log_file=loaded_config.logging.file,
        )

        ctx = CLIContext(
            config=loaded_config,
            project_root=project_root,
            config_error=config_error,
            logger=logger,
            console=console,
            error_console=error_console,
        )
        CLIContext.set_current(ctx)

        try:
            app(tokens)
        finally:
            CLIContext.reset()

    register_commands(app)
    return app


def main() -> None:
    """Default entrypoint for the `modpage` CLI."""
    app = create_app()
    app.meta()
