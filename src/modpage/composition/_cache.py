"""Cache of compiled per-module template sets."""

from collections.abc import Iterable
from dataclasses import dataclass, field

import structlog
from structlog.typing import FilteringBoundLogger

from modpage.composition._builder import ModuleSetBuilder
from modpage.composition._locks import KeyedLocks, ReadWriteLock
from modpage.exceptions import ModuleBuildError
from modpage.modules import Module
from modpage.templating import BlockSet


@dataclass(slots=True)
class BuildReport:
    """Outcome of building sets for a batch of modules.

    Attributes:
        built: Ids of modules with a published set.
        failed: Module id to failure message.
        skipped: Ids of inactive modules that were not built.
    """

    built: list[str] = field(default_factory=list)
    failed: dict[str, str] = field(default_factory=dict)
    skipped: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failed


class TemplateSetCache:
    """Module id to compiled set, safe for concurrent readers.

    Sets are built outside the read/write lock; the write lock is only held
    to swap a finished set in or out, so a slow rebuild never blocks renders.
    Builds of the same module are serialized by a per-module mutex that
    covers both reading the files and publishing, so the last build to
    publish is always the one that read the newest files.
    """

    __slots__ = ("_builder", "_building", "_lock", "_logger", "_sets")

    def __init__(
        self,
        builder: ModuleSetBuilder,
        *,
        logger: FilteringBoundLogger | None = None,
    ) -> None:
        self._builder: ModuleSetBuilder = builder
        self._lock: ReadWriteLock = ReadWriteLock()
        self._building: KeyedLocks = KeyedLocks()
        self._logger: FilteringBoundLogger = (
            logger if logger is not None else structlog.get_logger()
        )
        self._sets: dict[str, BlockSet] = {}

    @property
    def building(self) -> KeyedLocks:
        """Per-module mutexes held while a module is built and published."""
        return self._building

    @property
    def builder(self) -> ModuleSetBuilder:
        return self._builder

    def __contains__(self, module_id: object) -> bool:
        with self._lock.read():
            return module_id in self._sets

    def __len__(self) -> int:
        with self._lock.read():
            return len(self._sets)

    def module_ids(self) -> list[str]:
        """Ids with a published set, sorted."""
        with self._lock.read():
            return sorted(self._sets)

    def get(self, module_id: str) -> BlockSet | None:
        """Return the published set for a module, if any."""
        with self._lock.read():
            return self._sets.get(module_id)

    def publish(self, module_id: str, block_set: BlockSet) -> None:
        """Make a set visible to readers, replacing any previous one."""
        with self._lock.write():
            self._sets[module_id] = block_set

    def evict(self, module_id: str) -> None:
        with self._lock.write():
            _ = self._sets.pop(module_id, None)

    def build_all(self, modules: Iterable[Module]) -> BuildReport:
        """Build and publish sets for every active module.

        A module that fails to build is logged and recorded in the report;
        the remaining modules are still built.
        """
        report = BuildReport()
        for module in modules:
            if not module.is_active:
                report.skipped.append(module.id)
                continue
            try:
                with self._building.hold(module.id):
                    self.publish(module.id, self._builder.build(module))
            except ModuleBuildError as e:
                self._logger.error(  # noqa: TRY400
                    "module_build_failed",
                    module_id=module.id,
                    error=str(e),
                )
                report.failed[module.id] = str(e)
                continue
            report.built.append(module.id)

        self._logger.info(
            "module_sets_built",
            built=len(report.built),
            failed=len(report.failed),
            skipped=len(report.skipped),
        )
        return report

    def rebuild(self, module: Module) -> BlockSet:
        """Rebuild one module's set and swap it in.

        Raises:
            ModuleBuildError: If the build fails. The previous set, if any,
                stays published.
        """
        with self._building.hold(module.id):
            try:
                block_set = self._builder.build(module)
            except ModuleBuildError as e:
                self._logger.warning(
                    "module_rebuild_failed",
                    module_id=module.id,
                    error=str(e),
                    kept_previous=module.id in self,
                )
                raise
            self.publish(module.id, block_set)
        self._logger.info("module_rebuilt", module_id=module.id)
        return block_set
