# pyright: reportUnusedCallResult=false
"""Serve rendered modules over HTTP."""

from typing import Annotated, Any, Literal

from cyclopts import App, Parameter

from modpage.cli._commands._shared import ExitCode, exit_with_error
from modpage.cli._context import CLIContext
from modpage.exceptions import ConfigError, TemplateError

app = App(name="serve", help="Run the modpage web server", help_on_error=True)

UvicornLogLevel = Literal["critical", "error", "warning", "info", "debug", "trace"]


def server_overrides(  # noqa: PLR0913
    *,
    host: str | None,
    port: int | None,
    module_list: bool | None,
    admin: bool | None,
    ssl_certfile: str | None,
    ssl_keyfile: str | None,
) -> dict[str, Any]:  # pyright: ignore[reportExplicitAny]
    """Nested config overrides for the options given on the command line."""
    values = {
        "host": host,
        "port": port,
        "module_list_enabled": module_list,
        "admin_enabled": admin,
        "ssl_certfile": ssl_certfile,
        "ssl_keyfile": ssl_keyfile,
    }
    server = {key: value for key, value in values.items() if value is not None}
    return {"server": server} if server else {}


@app.default
def serve(  # noqa: PLR0913
    *,
    host: Annotated[
        str | None, Parameter(help="Bind socket to this host. Overrides config.")
    ] = None,
    port: Annotated[
        int | None, Parameter(help="Bind socket to this port. Overrides config.")
    ] = None,
    module_list: Annotated[
        bool | None, Parameter(help="Serve the module listing at /modules/list.")
    ] = None,
    admin: Annotated[
        bool | None, Parameter(help="Enable the template editing API.")
    ] = None,
    ssl_certfile: Annotated[str | None, Parameter(help="TLS certificate file.")] = None,
    ssl_keyfile: Annotated[str | None, Parameter(help="TLS key file.")] = None,
    log_level: Annotated[
        UvicornLogLevel, Parameter(help="uvicorn log level.")
    ] = "info",
    access_log: Annotated[bool, Parameter(help="Enable access log.")] = True,
) -> None:
    """Build every module's templates and serve them with uvicorn."""
    import uvicorn

    from modpage.server import create_app

    ctx = CLIContext.get_current()
    try:
        config = ctx.config.with_overrides(
            server_overrides(
                host=host,
                port=port,
                module_list=module_list,
                admin=admin,
                ssl_certfile=ssl_certfile,
                ssl_keyfile=ssl_keyfile,
            )
        )
    except ConfigError as e:
        exit_with_error(str(e), ExitCode.VALIDATION_ERROR, console=ctx.error_console)

    try:
        web_app = create_app(config, logger=ctx.logger)
    except TemplateError as e:
        exit_with_error(str(e), ExitCode.LOAD_ERROR, console=ctx.error_console)

    server = config.server
    options: dict[str, object] = {
        "host": server.host,
        "port": server.port,
        "log_level": log_level,
        "access_log": access_log,
    }
    if server.ssl_certfile and server.ssl_keyfile:
        options["ssl_certfile"] = server.ssl_certfile
        options["ssl_keyfile"] = server.ssl_keyfile

    scheme = "https" if "ssl_certfile" in options else "http"
    ctx.console.print(f"Starting modpage on {scheme}://{server.host}:{server.port}")
    uvicorn.run(web_app, **options)  # pyright: ignore[reportArgumentType]
