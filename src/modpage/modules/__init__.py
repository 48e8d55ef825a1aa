"""Module metadata: models, file conventions and persistence.

Example:
    >>> from pathlib import Path
    >>> from modpage.modules import JsonModuleStore
    >>> store = JsonModuleStore(Path(".module_metadata"))
    >>> [m.id for m in store.read_all()]
    []
"""

from ._files import (
    BASE_FILENAME,
    ENTRY_BLOCK,
    LAYOUT_BLOCK,
    MARKUP_EXTENSIONS,
    STYLESHEET_EXTENSIONS,
    defined_name,
    discover_layout_files,
    discover_module_files,
    is_markup_file,
    is_stylesheet_file,
)
from ._models import Module, TemplateEntry
from ._store import JsonModuleStore, ModuleStore

__all__ = [
    "BASE_FILENAME",
    "ENTRY_BLOCK",
    "LAYOUT_BLOCK",
    "MARKUP_EXTENSIONS",
    "STYLESHEET_EXTENSIONS",
    "JsonModuleStore",
    "Module",
    "ModuleStore",
    "TemplateEntry",
    "defined_name",
    "discover_layout_files",
    "discover_module_files",
    "is_markup_file",
    "is_stylesheet_file",
]
