"""Module template composition and rendering.

Lifecycle:
    site = Site.from_config(config)   # loads the base (layout) set
    site.initialize()                 # builds every active module's set
    module, page = site.render_module("m1", fragment=False)
    site.save_template("m1", "widget.html", source)  # rebuilds m1 only
"""

from ._builder import ModuleSetBuilder, read_module_sources
from ._cache import BuildReport, TemplateSetCache
from ._loader import BASE_SET_NAME, load_base_set
from ._locks import KeyedLocks, ReadWriteLock
from ._preview import PreviewRenderer, PreviewResult, wrap_stylesheet
from ._renderer import (
    HEADER_SWAP_ID,
    BlockFailure,
    PageRenderer,
    RenderedContent,
    RenderedPage,
    error_markup,
    header_swap,
)
from ._site import SaveResult, Site

__all__ = [
    "BASE_SET_NAME",
    "HEADER_SWAP_ID",
    "BlockFailure",
    "BuildReport",
    "KeyedLocks",
    "ModuleSetBuilder",
    "PageRenderer",
    "PreviewRenderer",
    "PreviewResult",
    "ReadWriteLock",
    "RenderedContent",
    "RenderedPage",
    "SaveResult",
    "Site",
    "TemplateSetCache",
    "error_markup",
    "header_swap",
    "load_base_set",
    "read_module_sources",
    "wrap_stylesheet",
]
