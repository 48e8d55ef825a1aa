"""Base (layout) template loading."""

from pathlib import Path

import structlog
from jinja2 import Environment
from structlog.typing import FilteringBoundLogger

from modpage.exceptions import BaseTemplateError, TemplateParseError
from modpage.modules import discover_layout_files
from modpage.templating import BlockSet

BASE_SET_NAME = "base"


def load_base_set(
    layouts_dir: Path,
    environment: Environment,
    *,
    logger: FilteringBoundLogger | None = None,
) -> BlockSet:
    """Parse the shared layout files into one named-block set.

    The returned set is treated as immutable: module sets are built from
    clones of it and never write into it.

    Args:
        layouts_dir: Directory holding the layout ``*.html`` files.
        environment: Jinja2 environment to compile with.
        logger: Optional logger.

    Returns:
        The base block set.

    Raises:
        BaseTemplateError: If no layout files exist or one fails to parse.
    """
    log = logger if logger is not None else structlog.get_logger()
    files = discover_layout_files(layouts_dir)
    if not files:
        msg = f"No layout templates found in {layouts_dir}"
        raise BaseTemplateError(msg, directory=layouts_dir)

    base = BlockSet(environment, name=BASE_SET_NAME)
    for path in files:
        try:
            source = path.read_text(encoding="utf-8")
            _ = base.parse(path.name, source)
        except TemplateParseError as e:
            msg = f"Failed to parse layout template {e}"
            raise BaseTemplateError(msg, directory=layouts_dir) from e
        except OSError as e:
            msg = f"Failed to read layout template {path}: {e}"
            raise BaseTemplateError(msg, directory=layouts_dir) from e

    log.info(
        "base_templates_loaded",
        directory=str(layouts_dir),
        files=[p.name for p in files],
        blocks=base.names(),
    )
    return base
