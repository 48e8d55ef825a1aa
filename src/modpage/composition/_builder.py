"""Per-module template set composition.

A module's compiled set is the base set's blocks plus the module's own
blocks, module blocks winning on name collisions. Every set is built on a
fresh clone of the base set so modules never see each other's blocks.
"""

from collections.abc import Mapping
from pathlib import Path

import structlog
from structlog.typing import FilteringBoundLogger

from modpage.exceptions import ModuleBuildError, TemplateParseError
from modpage.modules import Module, discover_module_files
from modpage.templating import BlockSet

__all__ = ["ModuleSetBuilder", "read_module_sources"]


def read_module_sources(
    templates_dir: Path,
    overrides: Mapping[str, str] | None = None,
) -> list[tuple[str, str]]:
    """Read a module's template files as ``(filename, source)`` pairs.

    Args:
        templates_dir: The module's ``templates`` directory.
        overrides: Filename to in-flight content. An override replaces the
            on-disk content of that file; an override for a file that is not
            on disk is appended after the discovered files.

    Returns:
        Sources in discovery order.

    Raises:
        OSError: If a file cannot be read.
    """
    pending = dict(overrides) if overrides else {}
    sources: list[tuple[str, str]] = []
    for path in discover_module_files(templates_dir):
        if path.name in pending:
            sources.append((path.name, pending.pop(path.name)))
        else:
            sources.append((path.name, path.read_text(encoding="utf-8")))
    sources.extend(pending.items())
    return sources


class ModuleSetBuilder:
    """Builds isolated compiled sets for modules from a shared base set.

    Attributes:
        base_set: The shared layout set. Only ever cloned, never modified.
        project_root: Root that relative module directories resolve against.
        modules_dir: Default parent of module directories.
    """

    __slots__ = ("_logger", "base_set", "modules_dir", "project_root")

    def __init__(
        self,
        base_set: BlockSet,
        project_root: Path,
        *,
        modules_dir: str | Path = "modules",
        logger: FilteringBoundLogger | None = None,
    ) -> None:
        self.base_set: BlockSet = base_set
        self.project_root: Path = project_root
        self.modules_dir: Path = Path(modules_dir)
        self._logger: FilteringBoundLogger = (
            logger if logger is not None else structlog.get_logger()
        )

    def build(
        self,
        module: Module,
        overrides: Mapping[str, str] | None = None,
    ) -> BlockSet:
        """Compose the compiled set for a module.

        1. Parse the module's files into a throwaway set.
        2. Clone the base set.
        3. Graft every module block into the clone by name.

        Grafted blocks resolve ``render_block`` calls through the clone, so a
        single parse gives module blocks the same visibility a re-parse into
        the clone would.

        Args:
            module: The module to build.
            overrides: Optional in-flight file contents (see
                `read_module_sources`).

        Returns:
            A new set owned by the caller.

        Raises:
            ModuleBuildError: If the module has no template files, a file
                cannot be read, or a file fails to parse.
        """
        templates_dir = module.templates_dir(self.project_root, self.modules_dir)
        log = self._logger.bind(module_id=module.id)

        try:
            sources = read_module_sources(templates_dir, overrides)
        except OSError as e:
            msg = f"Failed to read templates for module {module.id}: {e}"
            raise ModuleBuildError(msg, module_id=module.id, cause=e) from e

        if not sources:
            msg = f"No template files (.html, .tmpl, .css) found in {templates_dir}"
            raise ModuleBuildError(msg, module_id=module.id)

        own = BlockSet(self.base_set.environment, name=module.id)
        try:
            own.parse_files(sources)
        except TemplateParseError as e:
            msg = f"Failed to parse templates for module {module.id}: {e}"
            raise ModuleBuildError(msg, module_id=module.id, cause=e) from e

        composed = self.base_set.clone(name=module.id)
        for name, block in own.items():
            composed.graft(name, block)

        log.debug(
            "module_set_built",
            files=[filename for filename, _ in sources],
            blocks=own.names(),
            overrides=sorted(overrides) if overrides else [],
        )
        return composed
