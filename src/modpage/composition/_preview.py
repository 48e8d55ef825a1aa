"""Rendering of unsaved template edits."""

from dataclasses import dataclass

import structlog
from structlog.typing import FilteringBoundLogger

from modpage.composition._builder import ModuleSetBuilder
from modpage.composition._renderer import BlockFailure, PageRenderer, error_markup
from modpage.exceptions import ModuleBuildError, TemplateError, UnsupportedPreviewError
from modpage.modules import (
    BASE_FILENAME,
    ENTRY_BLOCK,
    Module,
    defined_name,
    is_markup_file,
    is_stylesheet_file,
)
from modpage.templating import ModulePageContent


@dataclass(frozen=True, slots=True)
class PreviewResult:
    """Preview output.

    Attributes:
        html: Rendered HTML, or an inline error block when ``ok`` is False.
        ok: Whether rendering succeeded.
        failures: Sub-templates omitted while rendering an entry-point file.
    """

    html: str
    ok: bool = True
    failures: tuple[BlockFailure, ...] = ()


def wrap_stylesheet(content: str) -> str:
    return f'<style type="text/css">\n{content}\n</style>'


class PreviewRenderer:
    """Renders a module with one file's content replaced by an in-flight edit.

    Each preview builds its own set, so the cache and the base set are never
    touched.
    """

    __slots__ = ("_builder", "_logger", "_renderer")

    def __init__(
        self,
        builder: ModuleSetBuilder,
        renderer: PageRenderer,
        *,
        logger: FilteringBoundLogger | None = None,
    ) -> None:
        self._builder: ModuleSetBuilder = builder
        self._renderer: PageRenderer = renderer
        self._logger: FilteringBoundLogger = (
            logger if logger is not None else structlog.get_logger()
        )

    def is_entry_file(self, module: Module, filename: str) -> bool:
        """Whether ``filename`` holds the module's entry-point block."""
        entry = module.template(filename)
        if entry is None:
            return filename == BASE_FILENAME
        return entry.is_base

    def render(self, module: Module, filename: str, content: str) -> PreviewResult:
        """Render a preview of ``filename`` with ``content``.

        Style sheets are returned wrapped in a ``<style>`` element without
        reading any other file. Markup previews build a synthetic set; parse
        and execution errors come back as an inline error block.

        Raises:
            UnsupportedPreviewError: If the file type cannot be previewed.
        """
        if is_stylesheet_file(filename):
            return PreviewResult(wrap_stylesheet(content))
        if not is_markup_file(filename):
            raise UnsupportedPreviewError(filename)

        log = self._logger.bind(module_id=module.id, filename=filename)
        try:
            block_set = self._builder.build(module, {filename: content})
        except ModuleBuildError as e:
            log.info("preview_build_failed", error=str(e))
            return PreviewResult(str(error_markup(str(e))), ok=False)

        if self.is_entry_file(module, filename):
            rendered = self._renderer.render_content(module, block_set)
            page = ModulePageContent(module=module, content=rendered.html)
            block = ENTRY_BLOCK
            try:
                html = self._renderer.execute(block_set, block, page, module=module)
            except TemplateError as e:
                log.info("preview_render_failed", block=block, error=str(e))
                return PreviewResult(
                    str(error_markup(str(e))), ok=False, failures=rendered.failures
                )
            return PreviewResult(html, failures=rendered.failures)

        block = defined_name(filename)
        try:
            html = self._renderer.execute(block_set, block, module, module=module)
        except TemplateError as e:
            log.info("preview_render_failed", block=block, error=str(e))
            return PreviewResult(str(error_markup(str(e))), ok=False)
        return PreviewResult(html)
