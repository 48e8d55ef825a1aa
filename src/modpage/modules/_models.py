"""Module metadata models.

Field aliases match the on-disk JSON metadata format (``isBase``,
``createdAt``, ``lastUpdated``), so existing metadata files load unchanged.

A missing ``is_active`` field means active, for modules and template entries
alike. Metadata written by older tooling treated a missing field as inactive;
such files should set ``is_active`` explicitly. Saved metadata always carries
the field, so a round trip never changes a module's state.
"""

from datetime import UTC, datetime
from pathlib import Path, PurePath
from typing import Any, ClassVar, Self

from pydantic import BaseModel, ConfigDict, Field, model_validator

from modpage.modules._files import (
    defined_name,
    is_markup_file,
    is_stylesheet_file,
)


def _now() -> datetime:
    return datetime.now(tz=UTC)


class TemplateEntry(BaseModel):
    """One file backing a named block.

    Attributes:
        name: Filename, e.g. ``card.html``.
        path: Path relative to the module directory.
        is_base: Whether this is the module's base template (defines ``page``).
        order: Insertion order among sub-templates.
        is_active: Whether the file is enabled.
    """

    model_config: ClassVar[ConfigDict] = ConfigDict(
        frozen=True, populate_by_name=True, extra="ignore"
    )

    name: str = Field(min_length=1)
    path: str = ""
    is_base: bool = Field(default=False, alias="isBase")
    order: int = 0
    is_active: bool = True

    @property
    def defined_name(self) -> str:
        """Block name derived from the filename."""
        return defined_name(self.name)

    @property
    def extension(self) -> str:
        return PurePath(self.name).suffix

    @property
    def is_markup(self) -> bool:
        return is_markup_file(self.name)

    @property
    def is_stylesheet(self) -> bool:
        return is_stylesheet_file(self.name)


class Module(BaseModel):
    """A composable unit with its own directory and template files."""

    model_config: ClassVar[ConfigDict] = ConfigDict(
        frozen=True, populate_by_name=True, extra="ignore"
    )

    id: str = Field(min_length=1)
    name: str = ""
    slug: str = ""
    directory: str = ""
    order: int = 0
    created_at: datetime = Field(default_factory=_now, alias="createdAt")
    last_updated: datetime = Field(default_factory=_now, alias="lastUpdated")
    is_active: bool = True
    group: str = ""
    layout: str = ""
    assets: tuple[str, ...] = ()
    description: str = ""
    templates: tuple[TemplateEntry, ...] = ()

    @model_validator(mode="before")
    @classmethod
    def _default_slug(cls, data: Any) -> Any:  # noqa: ANN401
        if isinstance(data, dict) and not data.get("slug"):
            return {**data, "slug": data.get("id", "")}
        return data

    @property
    def display_name(self) -> str:
        return self.name or self.id

    @property
    def base_template(self) -> TemplateEntry | None:
        """The entry marked as base, or None when metadata has none."""
        for entry in self.templates:
            if entry.is_base:
                return entry
        return None

    def template(self, filename: str) -> TemplateEntry | None:
        """Look up a template entry by filename."""
        for entry in self.templates:
            if entry.name == filename:
                return entry
        return None

    def renderable_templates(self) -> list[TemplateEntry]:
        """Active, non-base markup entries in render order.

        The sort is stable, so entries sharing an ``order`` keep their
        metadata order.
        """
        candidates = [
            t for t in self.templates if t.is_active and not t.is_base and t.is_markup
        ]
        return sorted(candidates, key=lambda t: t.order)

    def templates_dir(
        self, project_root: Path, modules_dir: str | Path = "modules"
    ) -> Path:
        """Resolve the module's ``templates`` directory.

        Args:
            project_root: Root that relative module directories resolve against.
            modules_dir: Parent of module directories, used when the module
                has no explicit ``directory``.

        Returns:
            ``<directory>/templates``, where ``directory`` defaults to
            ``<modules_dir>/<id>``.
        """
        base = Path(self.directory) if self.directory else Path(modules_dir) / self.id
        if not base.is_absolute():
            base = project_root / base
        return base / "templates"

    def touched(self) -> Self:
        """Return a copy with ``last_updated`` set to now."""
        return self.model_copy(update={"last_updated": _now()})
