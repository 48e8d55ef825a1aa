"""Shared test fixtures for modpage tests."""

import json
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass
from pathlib import Path

import pytest
from rich.console import Console

from modpage.config import Config
from modpage.modules import Module, TemplateEntry
from modpage.templating import BlockSet, create_environment

LAYOUT_HTML = """\
{% block layout %}<!DOCTYPE html>
<html>
<head><title>modpage</title></head>
<body>
<header id="module-header-info"></header>
{% if module_list_enabled %}<a href="/modules/list">Modules</a>{% endif %}
<main>{{ render_block("page", page) }}</main>
</body>
</html>{% endblock %}
"""

BASE_PAGE_HTML = """\
{% block page %}{% if view == "module_list" %}<ul>{% for m in modules %}<li>{{ m.name }}</li>{% endfor %}</ul>{% else %}<p>Welcome</p>{% endif %}{% endblock %}
"""

MODULE_BASE_HTML = """\
{% block page %}<section class="module" data-id="{{ module.id }}">{{ content }}</section>{% endblock %}
"""

WIDGET_HTML = '<div class="widget">{{ module.name }} widget</div>'
CONTENT_HTML = '<div class="content">{{ module.description }}</div>'
STYLE_CSS = ".widget { color: blue; }"


@dataclass(frozen=True, slots=True)
class SiteProject:
    """Paths for a site project on disk."""

    root: Path
    layouts_dir: Path
    modules_dir: Path
    metadata_dir: Path
    static_dir: Path

    def config(self, **server: object) -> Config:
        return Config.from_dict(
            {"paths": {"project_root": str(self.root)}, "server": dict(server)}
        )

    def templates_dir(self, module_id: str) -> Path:
        return self.modules_dir / module_id / "templates"


def write_module(
    project: SiteProject,
    module_id: str,
    files: Mapping[str, str],
    *,
    entries: Sequence[Mapping[str, object]] | None = None,
    **metadata: object,
) -> Path:
    """Write a module's template files and metadata JSON.

    Args:
        project: The site project.
        module_id: Module id.
        files: Filename to template source.
        entries: Template metadata entries. Defaults to one entry per file,
            with ``base.html`` as the base and the rest ordered by filename.
        metadata: Extra top-level metadata fields.

    Returns:
        The module's templates directory.
    """
    templates_dir = project.templates_dir(module_id)
    templates_dir.mkdir(parents=True, exist_ok=True)
    for filename, source in files.items():
        (templates_dir / filename).write_text(source, encoding="utf-8")

    if entries is None:
        entries = [
            {
                "name": filename,
                "path": f"templates/{filename}",
                "isBase": filename == "base.html",
                "order": index,
            }
            for index, filename in enumerate(sorted(files))
        ]

    data = {
        "id": module_id,
        "name": module_id.upper(),
        "templates": list(entries),
        "createdAt": "2024-01-01T00:00:00Z",
        "lastUpdated": "2024-01-01T00:00:00Z",
        **metadata,
    }
    project.metadata_dir.mkdir(parents=True, exist_ok=True)
    (project.metadata_dir / f"{module_id}.json").write_text(json.dumps(data))
    return templates_dir


@pytest.fixture
def site_project(tmp_path: Path) -> SiteProject:
    """Create a site with shared layouts and module ``m1``.

    Structure:
        tmp_path/site/
            web/templates/layout.html    # defines "layout"
            web/templates/page.html      # defines the fallback "page"
            web/static/app.css
            modules/m1/templates/
                base.html                # base, order 0, defines "page"
                content.html             # order 2
                widget.html              # order 1
                style.css
            .module_metadata/m1.json
    """
    root = tmp_path / "site"
    layouts_dir = root / "web" / "templates"
    layouts_dir.mkdir(parents=True)
    (layouts_dir / "layout.html").write_text(LAYOUT_HTML)
    (layouts_dir / "page.html").write_text(BASE_PAGE_HTML)

    static_dir = root / "web" / "static"
    static_dir.mkdir(parents=True)
    (static_dir / "app.css").write_text("body { margin: 0; }")

    project = SiteProject(
        root=root,
        layouts_dir=layouts_dir,
        modules_dir=root / "modules",
        metadata_dir=root / ".module_metadata",
        static_dir=static_dir,
    )
    write_module(
        project,
        "m1",
        {
            "base.html": MODULE_BASE_HTML,
            "content.html": CONTENT_HTML,
            "widget.html": WIDGET_HTML,
            "style.css": STYLE_CSS,
        },
        entries=[
            {"name": "base.html", "path": "templates/base.html", "isBase": True},
            {"name": "content.html", "path": "templates/content.html", "order": 2},
            {"name": "widget.html", "path": "templates/widget.html", "order": 1},
            {"name": "style.css", "path": "templates/style.css", "order": 3},
        ],
        name="Module One",
        slug="module-one",
        description="First module",
    )
    return project


@pytest.fixture
def make_module() -> Callable[..., Module]:
    """Build a Module from ``(filename, order)`` pairs."""

    def _make(
        templates: Sequence[tuple[str, int]] = (),
        *,
        module_id: str = "m1",
        base: str | None = "base.html",
        **fields: object,
    ) -> Module:
        entries = [
            TemplateEntry(name=name, path=f"templates/{name}", order=order)
            for name, order in templates
        ]
        if base is not None:
            entries.insert(
                0, TemplateEntry(name=base, path=f"templates/{base}", is_base=True)
            )
        return Module.model_validate(
            {"id": module_id, "name": module_id.upper(), "templates": entries, **fields}
        )

    return _make


@pytest.fixture
def block_set() -> BlockSet:
    return BlockSet(create_environment(), name="test")


@pytest.fixture
def console() -> Console:
    return Console(
        width=200,
        force_terminal=True,
        highlight=False,
        color_system=None,
        legacy_windows=False,
    )
