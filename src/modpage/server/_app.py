from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import cast

import structlog
from fastapi import FastAPI, Request
from fastapi.responses import PlainTextResponse
from fastapi.staticfiles import StaticFiles
from structlog.typing import FilteringBoundLogger

from modpage.composition import Site
from modpage.config import Config
from modpage.exceptions import (
    ModpageError,
    ModuleNotLoadedError,
    ModuleUnavailableError,
    RenderError,
    TemplateMissingError,
    UnknownModuleError,
    UnknownTemplateError,
    UnsupportedPreviewError,
)

from ._admin import router as admin_router
from ._api import router as api_router
from ._pages import listing_router
from ._pages import router as pages_router

ERROR_STATUS: dict[type[ModpageError], int] = {
    UnknownModuleError: 404,
    UnknownTemplateError: 404,
    ModuleUnavailableError: 403,
    UnsupportedPreviewError: 400,
    ModuleNotLoadedError: 500,
    TemplateMissingError: 500,
    RenderError: 500,
}


def status_for(error: ModpageError) -> int:
    for error_type in type(error).__mro__:
        if error_type in ERROR_STATUS:
            return ERROR_STATUS[cast("type[ModpageError]", error_type)]
    return 500


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None]:
    logger = cast("FilteringBoundLogger", app.state.logger)
    site = cast("Site", app.state.site)
    logger.info(
        "server_started",
        modules=len(site.modules),
        published=len(site.cache),
    )
    yield
    logger.info("server_stopped")


async def handle_modpage_error(request: Request, exc: Exception) -> PlainTextResponse:
    error = cast("ModpageError", exc)
    status_code = status_for(error)
    logger = cast("FilteringBoundLogger", request.app.state.logger)
    log = logger.error if status_code >= 500 else logger.info  # noqa: PLR2004
    log("request_failed", path=request.url.path, status=status_code, error=str(error))
    return PlainTextResponse(str(error), status_code=status_code)


def create_app(
    config: Config | None = None,
    *,
    site: Site | None = None,
    logger: FilteringBoundLogger | None = None,
) -> FastAPI:
    """Create the HTTP application.

    The site is built and initialized before the app is returned, so broken
    layouts fail here rather than on the first request.

    Args:
        config: Configuration. Defaults are used when omitted.
        site: A prepared site, for tests. Built from ``config`` when omitted.
        logger: Logger for the app and site.

    Returns:
        The FastAPI application.

    Raises:
        BaseTemplateError: If the layout templates cannot be loaded.
    """
    config = config if config is not None else Config.from_dict({})
    log = logger if logger is not None else structlog.get_logger()
    if site is None:
        site = Site.from_config(config, logger=log)
        _ = site.initialize()

    app = FastAPI(docs_url=None, redoc_url=None, lifespan=lifespan)
    app.state.config = config
    app.state.site = site
    app.state.logger = log

    app.add_exception_handler(ModpageError, handle_modpage_error)

    app.include_router(router=api_router)
    if config.server.admin_enabled:
        app.include_router(router=admin_router)
    if config.server.module_list_enabled:
        app.include_router(router=listing_router)
    app.include_router(router=pages_router)

    static_dir = config.paths.static_path
    if static_dir.is_dir():
        app.mount("/static", StaticFiles(directory=static_dir), name="static")

    return app
