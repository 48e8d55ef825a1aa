"""The site: every composition component wired together.

`Site` owns the module catalogue, the base set and the template set cache.
It has explicit lifecycles: `initialize` builds everything at startup and
`save_template` rebuilds one module after an edit.
"""

import threading
from dataclasses import dataclass
from pathlib import Path, PurePath
from typing import Self

import structlog
from structlog.typing import FilteringBoundLogger

from modpage.composition._builder import ModuleSetBuilder
from modpage.composition._cache import BuildReport, TemplateSetCache
from modpage.composition._loader import load_base_set
from modpage.composition._locks import KeyedLocks
from modpage.composition._preview import PreviewRenderer, PreviewResult
from modpage.composition._renderer import PageRenderer, RenderedPage
from modpage.config import Config
from modpage.exceptions import (
    ModuleBuildError,
    ModuleNotLoadedError,
    ModuleStoreError,
    ModuleUnavailableError,
    UnknownModuleError,
    UnknownTemplateError,
)
from modpage.modules import JsonModuleStore, Module, ModuleStore
from modpage.templating import BlockSet, EnvironmentConfig, create_environment


@dataclass(frozen=True, slots=True)
class SaveResult:
    """Outcome of saving a template file.

    Attributes:
        module: The module as stored after the save.
        build_error: Why the rebuild failed, if it did. The file is saved
            either way; on failure the previously published set stays live.
    """

    module: Module
    build_error: str | None = None

    @property
    def rebuilt(self) -> bool:
        return self.build_error is None


def slug_index(catalogue: dict[str, Module]) -> dict[str, Module]:
    """Map each slug to its active module; the lowest id wins a shared slug."""
    index: dict[str, Module] = {}
    for module_id in sorted(catalogue):
        module = catalogue[module_id]
        if module.is_active:
            _ = index.setdefault(module.slug, module)
    return index


class Site:
    """Composition root for rendering a site's modules."""

    def __init__(  # noqa: PLR0913
        self,
        *,
        store: ModuleStore,
        base_set: BlockSet,
        builder: ModuleSetBuilder,
        cache: TemplateSetCache,
        renderer: PageRenderer,
        previewer: PreviewRenderer,
        logger: FilteringBoundLogger | None = None,
    ) -> None:
        self.store: ModuleStore = store
        self.base_set: BlockSet = base_set
        self.builder: ModuleSetBuilder = builder
        self.cache: TemplateSetCache = cache
        self.renderer: PageRenderer = renderer
        self.previewer: PreviewRenderer = previewer
        self._logger: FilteringBoundLogger = (
            logger if logger is not None else structlog.get_logger()
        )
        self._catalogue_lock: threading.Lock = threading.Lock()
        self._catalogue: dict[str, Module] = {}
        self._slugs: dict[str, Module] = {}
        self._editing: KeyedLocks = KeyedLocks()

    @classmethod
    def from_config(
        cls,
        config: Config,
        *,
        logger: FilteringBoundLogger | None = None,
    ) -> Self:
        """Create a site from configuration.

        Loads the base set immediately; modules are loaded by `initialize`.

        Raises:
            BaseTemplateError: If the layout templates cannot be loaded.
        """
        log = logger if logger is not None else structlog.get_logger()
        paths = config.paths
        environment = create_environment(
            EnvironmentConfig(
                autoescape=config.templating.autoescape,
                strict_undefined=config.templating.strict_undefined,
            )
        )
        base_set = load_base_set(paths.layouts_path, environment, logger=log)
        builder = ModuleSetBuilder(
            base_set,
            paths.project_root,
            modules_dir=paths.modules_dir,
            logger=log,
        )
        renderer = PageRenderer(
            module_list_enabled=config.server.module_list_enabled, logger=log
        )
        return cls(
            store=JsonModuleStore(paths.metadata_path),
            base_set=base_set,
            builder=builder,
            cache=TemplateSetCache(builder, logger=log),
            renderer=renderer,
            previewer=PreviewRenderer(builder, renderer, logger=log),
            logger=log,
        )

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    def initialize(self) -> BuildReport:
        """Load module metadata and build every active module's set.

        Metadata that cannot be read is logged and leaves the catalogue
        empty; it does not stop the site from serving layouts.
        """
        try:
            modules = self.store.read_all()
        except ModuleStoreError as e:
            self._logger.error("module_metadata_load_failed", error=str(e))  # noqa: TRY400
            modules = []

        self._set_catalogue(modules)
        self._logger.info(
            "modules_loaded",
            total=len(modules),
            active=sum(1 for m in modules if m.is_active),
        )
        return self.cache.build_all(self.modules)

    def _set_catalogue(self, modules: list[Module]) -> None:
        catalogue = {m.id: m for m in modules}
        slugs = slug_index(catalogue)
        with self._catalogue_lock:
            self._catalogue = catalogue
            self._slugs = slugs

    def _replace_module(self, module: Module) -> None:
        with self._catalogue_lock:
            catalogue = dict(self._catalogue)
            catalogue[module.id] = module
            self._catalogue = catalogue
            self._slugs = slug_index(catalogue)

    # -------------------------------------------------------------------------
    # Catalogue
    # -------------------------------------------------------------------------

    @property
    def modules(self) -> list[Module]:
        """All known modules ordered by ``order``, then id."""
        with self._catalogue_lock:
            catalogue = self._catalogue
        return sorted(catalogue.values(), key=lambda m: (m.order, m.id))

    @property
    def active_modules(self) -> list[Module]:
        return [m for m in self.modules if m.is_active]

    def get_module(self, module_id: str) -> Module:
        """Look up a module by id, active or not.

        Raises:
            UnknownModuleError: If no module has this id.
        """
        with self._catalogue_lock:
            module = self._catalogue.get(module_id)
        if module is None:
            raise UnknownModuleError(module_id)
        return module

    def find_module(self, ref: str) -> Module | None:
        """Resolve a reference by id, then by slug among active modules."""
        with self._catalogue_lock:
            module = self._catalogue.get(ref)
            return module if module is not None else self._slugs.get(ref)

    def resolve_active(self, ref: str) -> Module:
        """Resolve a reference to a servable module.

        Raises:
            UnknownModuleError: If nothing matches ``ref``.
            ModuleUnavailableError: If the module is inactive.
        """
        module = self.find_module(ref)
        if module is None:
            raise UnknownModuleError(ref)
        if not module.is_active:
            raise ModuleUnavailableError(module.id)
        return module

    def duplicate_slugs(self) -> dict[str, list[str]]:
        """Slugs shared by more than one active module, with their ids."""
        by_slug: dict[str, list[str]] = {}
        for module in self.active_modules:
            by_slug.setdefault(module.slug, []).append(module.id)
        return {slug: ids for slug, ids in by_slug.items() if len(ids) > 1}

    def templates_dir(self, module: Module) -> Path:
        return module.templates_dir(self.builder.project_root, self.builder.modules_dir)

    # -------------------------------------------------------------------------
    # Rendering
    # -------------------------------------------------------------------------

    def render_module(self, ref: str, *, fragment: bool) -> tuple[Module, RenderedPage]:
        """Render an active module's page.

        Raises:
            UnknownModuleError: If nothing matches ``ref``.
            ModuleUnavailableError: If the module is inactive.
            ModuleNotLoadedError: If the module has no published set.
            TemplateMissingError: If ``page`` or ``layout`` is missing.
            RenderError: If the page or layout fails to execute.
        """
        module = self.resolve_active(ref)
        block_set = self.cache.get(module.id)
        if block_set is None:
            raise ModuleNotLoadedError(module.id)
        page = self.renderer.render_module(module, block_set, fragment=fragment)
        if page.failures:
            self._logger.warning(
                "module_rendered_with_failures",
                module_id=module.id,
                failed_blocks=[f.block for f in page.failures],
            )
        return module, page

    def render_root(self, *, fragment: bool) -> RenderedPage:
        return self.renderer.render_root(self.base_set, fragment=fragment)

    def render_module_list(self, *, fragment: bool = False) -> RenderedPage:
        return self.renderer.render_module_list(
            self.base_set, self.active_modules, fragment=fragment
        )

    # -------------------------------------------------------------------------
    # Editing
    # -------------------------------------------------------------------------

    def _template_path(self, module: Module, filename: str) -> Path:
        if not filename or PurePath(filename).name != filename:
            raise UnknownTemplateError(module.id, filename)
        if module.template(filename) is None:
            raise UnknownTemplateError(module.id, filename)
        return self.templates_dir(module) / filename

    def template_source(self, module_id: str, filename: str) -> str:
        """Read a template file listed in a module's metadata.

        Raises:
            UnknownModuleError: If no module has this id.
            UnknownTemplateError: If the file is not listed or not on disk.
        """
        module = self.get_module(module_id)
        path = self._template_path(module, filename)
        try:
            return path.read_text(encoding="utf-8")
        except FileNotFoundError as e:
            raise UnknownTemplateError(module.id, filename) from e

    def save_template(self, module_id: str, filename: str, content: str) -> SaveResult:
        """Write a template file and rebuild the module's set.

        The metadata timestamp is bumped; a failure to persist it is logged
        and does not undo the save. Inactive modules are not rebuilt.

        Saves to the same module run one at a time from the file write through
        the rebuild, so the published set always matches the file on disk.

        Raises:
            UnknownModuleError: If no module has this id.
            UnknownTemplateError: If the file is not listed in the metadata.
            OSError: If the file cannot be written.
        """
        module = self.get_module(module_id)
        with self._editing.hold(module.id):
            return self._save_locked(module.id, filename, content)

    def _save_locked(self, module_id: str, filename: str, content: str) -> SaveResult:
        module = self.get_module(module_id)
        path = self._template_path(module, filename)
        log = self._logger.bind(module_id=module.id, filename=filename)

        path.parent.mkdir(parents=True, exist_ok=True)
        _ = path.write_text(content, encoding="utf-8")

        updated = module.touched()
        try:
            self.store.save(updated)
        except ModuleStoreError as e:
            log.warning("module_metadata_save_failed", error=str(e))
        self._replace_module(updated)
        log.info("template_saved", path=str(path))

        if not updated.is_active:
            return SaveResult(updated)
        try:
            _ = self.cache.rebuild(updated)
        except ModuleBuildError as e:
            return SaveResult(updated, build_error=str(e))
        return SaveResult(updated)

    def preview(self, module_id: str, filename: str, content: str) -> PreviewResult:
        """Render a module with unsaved content for one file.

        Raises:
            UnknownModuleError: If no module has this id.
            UnsupportedPreviewError: If the file type cannot be previewed.
        """
        module = self.get_module(module_id)
        return self.previewer.render(module, filename, content)
