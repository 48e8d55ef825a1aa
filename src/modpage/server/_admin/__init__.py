"""Template editing API.

Only mounted when ``server.admin_enabled`` is set. There is no
authentication; bind the server to a trusted interface.
"""

from fastapi import APIRouter, HTTPException, Request
from fastapi.responses import HTMLResponse, PlainTextResponse
from starlette.concurrency import run_in_threadpool

from modpage.exceptions import UnknownTemplateError
from modpage.server._dependencies import BLOCK_FAILURES_HEADER, LoggerDep, SiteDep
from modpage.server._schemas import PreviewRequest

router = APIRouter(prefix="/admin/api/modules/{module_id}", tags=["admin"])


@router.get("/templates/{filename}", response_class=PlainTextResponse)
def get_template(module_id: str, filename: str, site: SiteDep) -> PlainTextResponse:
    try:
        source = site.template_source(module_id, filename)
    except UnknownTemplateError as e:
        raise HTTPException(status_code=404, detail=str(e)) from e
    return PlainTextResponse(source)


@router.put("/templates/{filename}", response_class=PlainTextResponse)
async def put_template(
    module_id: str,
    filename: str,
    request: Request,
    site: SiteDep,
    logger: LoggerDep,
) -> PlainTextResponse:
    """Save a template file; the raw request body is the new content."""
    body = await request.body()
    try:
        content = body.decode("utf-8")
    except UnicodeDecodeError as e:
        raise HTTPException(status_code=400, detail="Body must be UTF-8") from e

    try:
        result = await run_in_threadpool(
            site.save_template, module_id, filename, content
        )
    except UnknownTemplateError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    except OSError as e:
        logger.exception("template_write_failed", module_id=module_id, filename=filename)
        raise HTTPException(status_code=500, detail="Failed to save file") from e

    message = f"File {filename} saved successfully."
    if result.build_error is not None:
        message += f"\nWarning: templates were not reloaded: {result.build_error}"
    return PlainTextResponse(message)


@router.post("/preview", response_class=HTMLResponse)
def post_preview(
    module_id: str,
    payload: PreviewRequest,
    site: SiteDep,
) -> HTMLResponse:
    """Render an unsaved edit. Rendering errors come back inline with 200."""
    if not payload.filename:
        raise HTTPException(status_code=400, detail="filename is required")
    result = site.preview(module_id, payload.filename, payload.content)
    return HTMLResponse(
        content=result.html,
        headers={BLOCK_FAILURES_HEADER: str(len(result.failures))},
    )
