from fastapi import APIRouter, HTTPException
from fastapi.responses import FileResponse, HTMLResponse

from modpage.composition import RenderedPage, header_swap
from modpage.modules import Module
from modpage.server._dependencies import (
    BLOCK_FAILURES_HEADER,
    FragmentDep,
    SiteDep,
)

router = APIRouter(include_in_schema=False)
listing_router = APIRouter(include_in_schema=False)


def html_response(
    page: RenderedPage,
    *,
    module: Module | None = None,
    swap_header: bool = False,
) -> HTMLResponse:
    """Wrap a rendered page, prefixing fragments with the header swap."""
    body = page.body
    if page.fragment and swap_header:
        body = header_swap(module) + body
    headers = {BLOCK_FAILURES_HEADER: str(len(page.failures))} if module else None
    return HTMLResponse(content=body, headers=headers)


@router.get("/", response_class=HTMLResponse)
def get_root(site: SiteDep, fragment: FragmentDep) -> HTMLResponse:
    page = site.render_root(fragment=fragment)
    return html_response(page, swap_header=True)


@listing_router.get("/modules/list", response_class=HTMLResponse)
def get_module_list(site: SiteDep, fragment: FragmentDep) -> HTMLResponse:
    return html_response(site.render_module_list(fragment=fragment))


@router.get("/modules/{module_id}/static/{path:path}")
def get_module_static(module_id: str, path: str, site: SiteDep) -> FileResponse:
    """Serve a file from a module's templates directory."""
    module = site.get_module(module_id)
    root = site.templates_dir(module).resolve()
    try:
        target = (root / path).resolve()
        _ = target.relative_to(root)
    except (ValueError, OSError) as e:
        raise HTTPException(status_code=400, detail="Invalid file path") from e

    if not target.is_file():
        raise HTTPException(status_code=404, detail=f"File {path!r} not found")
    return FileResponse(path=target)


@router.get("/{module_ref}", response_class=HTMLResponse)
def get_module_page(
    module_ref: str,
    site: SiteDep,
    fragment: FragmentDep,
) -> HTMLResponse:
    module, page = site.render_module(module_ref, fragment=fragment)
    return html_response(page, module=module, swap_header=True)
