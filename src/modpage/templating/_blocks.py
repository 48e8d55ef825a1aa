"""Named-block registry.

A `BlockSet` maps block names to compiled Jinja2 blocks. Each parsed file
contributes a file-level block named after the file (``widget.html`` ->
``widget``) plus one block per ``{% block NAME %}`` definition it contains.

Blocks reference each other through the ``render_block(name, data)`` global,
which is bound to the set that is executing. A block grafted from one set
into another therefore resolves names in its new set.
"""

from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from typing import Self, cast

from jinja2 import Environment, Template, TemplateSyntaxError
from markupsafe import Markup

from modpage.exceptions import BlockNotFoundError, TemplateParseError
from modpage.modules import defined_name
from modpage.templating._context import BlockData, template_variables

__all__ = ["Block", "BlockSet"]


@dataclass(frozen=True, slots=True)
class Block:
    """A compiled, independently executable named block.

    Attributes:
        name: The name the block is registered under.
        template: The compiled template of the file the block came from.
        inner: Name of the ``{% block %}`` inside the template, or None to
            render the whole file.
        filename: Source filename, for diagnostics.
    """

    name: str
    template: Template
    inner: str | None = None
    filename: str = ""

    def render(self, variables: dict[str, object]) -> str:
        """Render the block with the given template variables."""
        if self.inner is None:
            return self.template.render(variables)

        render_func = self.template.blocks[self.inner]
        context = self.template.new_context(variables)
        environment = self.template.environment
        try:
            return cast("str", environment.concat(render_func(context)))  # pyright: ignore[reportAttributeAccessIssue]
        except Exception:  # noqa: BLE001
            environment.handle_exception()


class BlockSet:
    """An owned mapping of block name to compiled block.

    Compiled blocks are immutable, so `clone` only has to copy the mapping
    for the copy to be structurally independent: grafting into a clone never
    changes the original.

    Attributes:
        name: Label for diagnostics (module id, ``base``, ...).
    """

    __slots__ = ("_blocks", "_environment", "name")

    def __init__(
        self,
        environment: Environment,
        *,
        name: str = "",
        blocks: dict[str, Block] | None = None,
    ) -> None:
        self._environment: Environment = environment
        self._blocks: dict[str, Block] = dict(blocks) if blocks else {}
        self.name: str = name

    @property
    def environment(self) -> Environment:
        return self._environment

    def __contains__(self, name: object) -> bool:
        return name in self._blocks

    def __len__(self) -> int:
        return len(self._blocks)

    def __iter__(self) -> Iterator[str]:
        return iter(self._blocks)

    def __repr__(self) -> str:
        return f"BlockSet(name={self.name!r}, blocks={sorted(self._blocks)!r})"

    def names(self) -> list[str]:
        """Registered block names, sorted."""
        return sorted(self._blocks)

    def items(self) -> Iterator[tuple[str, Block]]:
        return iter(list(self._blocks.items()))

    def get(self, name: str) -> Block | None:
        return self._blocks.get(name)

    # -------------------------------------------------------------------------
    # Composition
    # -------------------------------------------------------------------------

    def parse(self, filename: str, source: str) -> list[str]:
        """Compile a file and register its blocks.

        The file-level block is registered first, so a ``{% block %}`` with
        the same name as the file takes precedence.

        Args:
            filename: The file's name, used for its defined name and errors.
            source: Template source.

        Returns:
            Names registered by this file, in registration order.

        Raises:
            TemplateParseError: If the source does not compile.
        """
        env = self._environment
        try:
            code = env.compile(source, name=filename, filename=filename)
        except TemplateSyntaxError as e:
            raise TemplateParseError(
                e.message or str(e), filename=filename, line=e.lineno
            ) from e
        template = env.template_class.from_code(env, code, env.make_globals(None))

        file_block = defined_name(filename)
        self._blocks[file_block] = Block(file_block, template, None, filename)
        registered = [file_block]
        for inner in template.blocks:
            self._blocks[inner] = Block(inner, template, inner, filename)
            registered.append(inner)
        return registered

    def parse_files(self, sources: Iterable[tuple[str, str]]) -> None:
        """Compile ``(filename, source)`` pairs in order.

        Later definitions of a name replace earlier ones.
        """
        for filename, source in sources:
            _ = self.parse(filename, source)

    def clone(self, *, name: str | None = None) -> Self:
        """Return an independent copy of this set."""
        return type(self)(
            self._environment,
            name=self.name if name is None else name,
            blocks=self._blocks,
        )

    def graft(self, name: str, block: Block) -> None:
        """Register ``block`` under ``name``, replacing any existing block."""
        self._blocks[name] = block

    # -------------------------------------------------------------------------
    # Execution
    # -------------------------------------------------------------------------

    def execute(self, name: str, data: BlockData = None) -> str:
        """Execute a named block.

        Args:
            name: Block name.
            data: Rendering context, converted by `template_variables`.

        Returns:
            Rendered output.

        Raises:
            BlockNotFoundError: If no block is registered under ``name``, here
                or in a block it renders.
        """
        block = self._blocks.get(name)
        if block is None:
            raise BlockNotFoundError(name)

        variables = template_variables(data)
        variables["render_block"] = self._render_block
        return block.render(variables)

    def _render_block(self, name: str, data: BlockData = None) -> Markup:
        return Markup(self.execute(name, data))  # noqa: S704
