"""Template file naming and discovery."""

from pathlib import Path, PurePath
from typing import Final

MARKUP_EXTENSIONS: Final = (".html", ".tmpl")
STYLESHEET_EXTENSIONS: Final = (".css",)

ENTRY_BLOCK: Final = "page"
LAYOUT_BLOCK: Final = "layout"
BASE_FILENAME: Final = "base.html"


def defined_name(filename: str) -> str:
    """Return the block name a file is addressed by.

    Example:
        >>> defined_name("widget.html")
        'widget'
    """
    path = PurePath(filename)
    return path.name.removesuffix(path.suffix)


def is_markup_file(filename: str) -> bool:
    return PurePath(filename).suffix in MARKUP_EXTENSIONS


def is_stylesheet_file(filename: str) -> bool:
    return PurePath(filename).suffix in STYLESHEET_EXTENSIONS


def discover_module_files(templates_dir: Path) -> list[Path]:
    """Find the template files of a module.

    Markup files come first, then style sheets; each group is sorted by name
    so discovery order is deterministic.

    Args:
        templates_dir: The module's `templates` directory.

    Returns:
        Ordered list of files. Empty if the directory does not exist.
    """
    if not templates_dir.is_dir():
        return []

    files = [p for p in templates_dir.iterdir() if p.is_file()]
    markup = sorted(
        (p for p in files if p.suffix in MARKUP_EXTENSIONS), key=lambda p: p.name
    )
    sheets = sorted(
        (p for p in files if p.suffix in STYLESHEET_EXTENSIONS), key=lambda p: p.name
    )
    return [*markup, *sheets]


def discover_layout_files(layouts_dir: Path) -> list[Path]:
    """Find the shared layout files (``*.html``), sorted by name."""
    if not layouts_dir.is_dir():
        return []
    return sorted(p for p in layouts_dir.glob("*.html") if p.is_file())
