r"""modpage templating: named-block sets on top of Jinja2.

Basic usage:
    from modpage.templating import BlockSet, create_environment

    env = create_environment()
    blocks = BlockSet(env, name="demo")
    blocks.parse("greeting.html", "{% block hello %}Hi {{ module.name }}{% endblock %}")
    blocks.execute("hello", {"module": {"name": "World"}})

Composing sets:
    module_set = base.clone(name="m1")
    for name, block in parsed.items():
        module_set.graft(name, block)

    # A layout calls {{ render_block("page", page) }}; the call resolves
    # through module_set, so the module's "page" wins over the base one.
    module_set.execute("layout", LayoutContext(module_list_enabled=False))
"""

from ._blocks import Block, BlockSet
from ._context import (
    BlockData,
    EmptyContent,
    LayoutContext,
    ModuleListContent,
    ModulePageContent,
    RenderContext,
    ViewName,
    template_variables,
    view_name,
)
from ._environment import EnvironmentConfig, create_environment

__all__ = [
    "Block",
    "BlockData",
    "BlockSet",
    "EmptyContent",
    "EnvironmentConfig",
    "LayoutContext",
    "ModuleListContent",
    "ModulePageContent",
    "RenderContext",
    "ViewName",
    "create_environment",
    "template_variables",
    "view_name",
]
