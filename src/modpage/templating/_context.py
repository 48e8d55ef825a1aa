"""Rendering contexts passed to layout and page blocks.

The layout discriminates what it is rendering through the ``view`` variable,
which `template_variables` derives from an explicit tagged union rather than
from the runtime type of an arbitrary value.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Literal, assert_never

from markupsafe import Markup

from modpage.modules import Module

type ViewName = Literal["home", "module_list", "module_page"]


@dataclass(frozen=True, slots=True)
class EmptyContent:
    """Nothing to show: the root page."""


@dataclass(frozen=True, slots=True)
class ModuleListContent:
    """A listing of modules."""

    modules: tuple[Module, ...] = field(default_factory=tuple)


@dataclass(frozen=True, slots=True)
class ModulePageContent:
    """A single module's page data.

    Attributes:
        module: The module being rendered.
        content: Pre-rendered HTML of the module's ordered sub-templates.
    """

    module: Module
    content: str = ""


type RenderContext = EmptyContent | ModuleListContent | ModulePageContent


@dataclass(frozen=True, slots=True)
class LayoutContext:
    """Data for the full-document ``layout`` block."""

    module_list_enabled: bool
    page: RenderContext = field(default_factory=EmptyContent)


def view_name(content: RenderContext) -> ViewName:
    match content:
        case EmptyContent():
            return "home"
        case ModuleListContent():
            return "module_list"
        case ModulePageContent():
            return "module_page"
        case _:
            assert_never(content)


type BlockData = RenderContext | LayoutContext | Module | Mapping[str, object] | None


def template_variables(data: BlockData) -> dict[str, object]:
    """Convert block data into Jinja2 template variables.

    Args:
        data: The value a block is executed with.

    Returns:
        A new dictionary of template variables.

    Raises:
        TypeError: If the data has no template representation.
    """
    match data:
        case None | EmptyContent():
            return {"view": "home"}
        case ModuleListContent(modules=modules):
            return {"view": "module_list", "modules": list(modules)}
        case ModulePageContent(module=module, content=content):
            return {
                "view": "module_page",
                "module": module,
                "content": Markup(content),  # noqa: S704
            }
        case LayoutContext(module_list_enabled=enabled, page=page):
            return {
                "view": view_name(page),
                "module_list_enabled": enabled,
                "page": page,
            }
        case Module():
            return {"module": data}
        case Mapping():
            return dict(data)
        case _:
            msg = f"Cannot render block with data of type {type(data).__name__}"
            raise TypeError(msg)
