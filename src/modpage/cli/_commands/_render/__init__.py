# pyright: reportUnusedCallResult=false
"""Render a module page to stdout."""

from typing import Annotated

from cyclopts import App, Parameter

from modpage.cli._commands._shared import ExitCode, exit_with_error
from modpage.cli._context import CLIContext
from modpage.composition import Site, header_swap
from modpage.exceptions import (
    ModpageError,
    ModuleUnavailableError,
    TemplateError,
    UnknownModuleError,
)

app = App(name="render", help="Render a module page", help_on_error=True)


@app.default
def render(
    module: Annotated[str, Parameter(help="Module id or slug.")],
    *,
    fragment: Annotated[
        bool, Parameter(help="Render only the page block, as for htmx requests.")
    ] = False,
) -> None:
    """Render a module and print the HTML."""
    ctx = CLIContext.get_current()
    try:
        site = Site.from_config(ctx.config, logger=ctx.logger)
    except TemplateError as e:
        exit_with_error(str(e), ExitCode.LOAD_ERROR, console=ctx.error_console)
    _ = site.initialize()

    try:
        found, page = site.render_module(module, fragment=fragment)
    except (UnknownModuleError, ModuleUnavailableError) as e:
        exit_with_error(str(e), ExitCode.NOT_FOUND, console=ctx.error_console)
    except ModpageError as e:
        exit_with_error(str(e), ExitCode.INTERNAL_ERROR, console=ctx.error_console)

    body = header_swap(found) + page.body if fragment else page.body
    ctx.console.print(
        body, markup=False, highlight=False, emoji=False, soft_wrap=True
    )
    for failure in page.failures:
        ctx.error_console.print(
            f"[yellow]Warning:[/yellow] block {failure.block!r} omitted: "
            f"{failure.message}",
            highlight=False,
        )
