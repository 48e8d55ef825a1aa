"""modpage CLI commands."""
# pyright: reportUnusedCallResult=false

from cyclopts import App

from ._check import app as check_app
from ._render import app as render_app
from ._serve import app as serve_app
from ._shared import ExitCode, exit_with_error, get_error_console

__all__ = [
    "ExitCode",
    "check_app",
    "exit_with_error",
    "get_error_console",
    "register_commands",
    "render_app",
    "serve_app",
]


def register_commands(app: App) -> None:
    app.command(check_app)
    app.command(render_app)
    app.command(serve_app)
