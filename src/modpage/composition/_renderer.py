"""Page rendering: ordered sub-templates, entry-point block and layout."""

from collections.abc import Iterable
from dataclasses import dataclass, field

import structlog
from markupsafe import Markup, escape
from structlog.typing import FilteringBoundLogger

from modpage.exceptions import RenderError, TemplateMissingError
from modpage.modules import ENTRY_BLOCK, LAYOUT_BLOCK, Module
from modpage.templating import (
    BlockData,
    BlockSet,
    EmptyContent,
    LayoutContext,
    ModuleListContent,
    ModulePageContent,
    RenderContext,
)

HEADER_SWAP_ID = "module-header-info"


@dataclass(frozen=True, slots=True)
class BlockFailure:
    """A sub-template that failed and was left out of the page."""

    block: str
    filename: str
    message: str


@dataclass(frozen=True, slots=True)
class RenderedContent:
    """Concatenated output of a module's ordered sub-templates."""

    html: str
    failures: tuple[BlockFailure, ...] = ()


@dataclass(frozen=True, slots=True)
class RenderedPage:
    """A rendered response body.

    Attributes:
        body: The HTML document or fragment.
        fragment: Whether only the entry-point block was rendered.
        failures: Sub-templates omitted from the content.
    """

    body: str
    fragment: bool
    failures: tuple[BlockFailure, ...] = field(default_factory=tuple)


def header_swap(module: Module | None) -> str:
    """Out-of-band swap snippet that updates the page header for htmx."""
    text = f"Module: {module.display_name}" if module is not None else ""
    return (
        f'<span id="{HEADER_SWAP_ID}" hx-swap-oob="innerHTML">{escape(text)}</span>'
    )


class PageRenderer:
    """Renders modules, the home page and the module listing.

    Attributes:
        module_list_enabled: Passed to the layout so it can link the listing.
    """

    __slots__ = ("_logger", "module_list_enabled")

    def __init__(
        self,
        *,
        module_list_enabled: bool = False,
        logger: FilteringBoundLogger | None = None,
    ) -> None:
        self.module_list_enabled: bool = module_list_enabled
        self._logger: FilteringBoundLogger = (
            logger if logger is not None else structlog.get_logger()
        )

    def render_content(self, module: Module, block_set: BlockSet) -> RenderedContent:
        """Execute a module's renderable sub-templates in order.

        A sub-template that fails is logged and omitted, and rendering carries
        on with the next one. Failures are reported on the result.
        """
        parts: list[str] = []
        failures: list[BlockFailure] = []
        for entry in module.renderable_templates():
            block = entry.defined_name
            try:
                parts.append(block_set.execute(block, module))
            except Exception as e:  # noqa: BLE001
                self._logger.warning(
                    "sub_template_failed",
                    module_id=module.id,
                    block=block,
                    filename=entry.name,
                    error=str(e),
                )
                failures.append(BlockFailure(block, entry.name, str(e)))
        return RenderedContent("".join(parts), tuple(failures))

    def render_module(
        self,
        module: Module,
        block_set: BlockSet,
        *,
        fragment: bool,
    ) -> RenderedPage:
        """Render a module as a fragment (``page``) or full document (``layout``).

        Raises:
            TemplateMissingError: If the required block is not in the set.
            RenderError: If executing the block fails.
        """
        content = self.render_content(module, block_set)
        page = ModulePageContent(module=module, content=content.html)
        body = self._render_view(block_set, page, fragment=fragment, module=module)
        return RenderedPage(body, fragment, content.failures)

    def render_root(self, base_set: BlockSet, *, fragment: bool) -> RenderedPage:
        body = self._render_view(base_set, EmptyContent(), fragment=fragment)
        return RenderedPage(body, fragment)

    def render_module_list(
        self,
        base_set: BlockSet,
        modules: Iterable[Module],
        *,
        fragment: bool = False,
    ) -> RenderedPage:
        listing = ModuleListContent(modules=tuple(modules))
        body = self._render_view(base_set, listing, fragment=fragment)
        return RenderedPage(body, fragment)

    def _render_view(
        self,
        block_set: BlockSet,
        page: RenderContext,
        *,
        fragment: bool,
        module: Module | None = None,
    ) -> str:
        if fragment:
            return self.execute(block_set, ENTRY_BLOCK, page, module=module)
        layout = LayoutContext(module_list_enabled=self.module_list_enabled, page=page)
        return self.execute(block_set, LAYOUT_BLOCK, layout, module=module)

    def execute(
        self,
        block_set: BlockSet,
        block: str,
        data: BlockData,
        *,
        module: Module | None = None,
    ) -> str:
        """Execute a required block, translating failures.

        Raises:
            TemplateMissingError: If ``block`` is not in the set.
            RenderError: If executing the block fails.
        """
        module_id = module.id if module is not None else None
        if block not in block_set:
            raise TemplateMissingError(block, module_id=module_id)
        try:
            return block_set.execute(block, data)
        except Exception as e:
            self._logger.exception(
                "block_render_failed",
                module_id=module_id,
                block=block,
            )
            msg = f"Failed to render {block!r}: {e}"
            raise RenderError(msg, block=block, module_id=module_id, cause=e) from e


def error_markup(message: str) -> Markup:
    """Inline, escaped error block shown in place of a failed preview."""
    return Markup(  # noqa: S704
        "<pre style='color:red; font-family:monospace;'>"
        f"Preview Rendering Error:\n{escape(message)}</pre>"
    )
