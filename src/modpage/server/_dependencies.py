from typing import Annotated, cast

from fastapi import Depends, Header, Request
from structlog.typing import FilteringBoundLogger

from modpage.composition import Site

FRAGMENT_HEADER = "HX-Request"
BLOCK_FAILURES_HEADER = "X-Modpage-Block-Failures"


def get_site(request: Request) -> Site:
    return cast("Site", request.app.state.site)


def get_logger(request: Request) -> FilteringBoundLogger:
    return cast("FilteringBoundLogger", request.app.state.logger)


def wants_fragment(
    hx_request: Annotated[str | None, Header(alias=FRAGMENT_HEADER)] = None,
) -> bool:
    """Whether the client asked for a partial-page update."""
    return hx_request is not None and hx_request.lower() == "true"


SiteDep = Annotated[Site, Depends(get_site)]
LoggerDep = Annotated[FilteringBoundLogger, Depends(get_logger)]
FragmentDep = Annotated[bool, Depends(wants_fragment)]
