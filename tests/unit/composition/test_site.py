import threading
from collections.abc import Mapping
from pathlib import Path

import orjson
import pytest
from structlog.testing import capture_logs

from modpage.composition import Site, _builder
from modpage.exceptions import (
    ModuleNotLoadedError,
    ModuleUnavailableError,
    UnknownModuleError,
    UnknownTemplateError,
    UnsupportedPreviewError,
)
from tests.conftest import MODULE_BASE_HTML, SiteProject, write_module


@pytest.fixture
def site(site_project: SiteProject) -> Site:
    site = Site.from_config(site_project.config())
    _ = site.initialize()
    return site


class TestInitialize:
    def test_builds_active_modules(self, site_project: SiteProject) -> None:
        write_module(site_project, "m2", {"base.html": MODULE_BASE_HTML})
        write_module(
            site_project, "off", {"base.html": MODULE_BASE_HTML}, is_active=False
        )
        site = Site.from_config(site_project.config())

        report = site.initialize()

        assert report.ok
        assert sorted(report.built) == ["m1", "m2"]
        assert report.skipped == ["off"]
        assert [m.id for m in site.modules] == ["m1", "m2", "off"]
        assert [m.id for m in site.active_modules] == ["m1", "m2"]

    def test_unreadable_metadata_leaves_catalogue_empty(
        self, site_project: SiteProject
    ) -> None:
        (site_project.metadata_dir / "bad.json").write_text("{not json")
        site = Site.from_config(site_project.config())

        with capture_logs() as logs:
            report = site.initialize()

        assert site.modules == []
        assert report.built == []
        assert any(e["event"] == "module_metadata_load_failed" for e in logs)

    def test_broken_module_does_not_block_others(
        self, site_project: SiteProject
    ) -> None:
        write_module(site_project, "broken", {"base.html": "{% block page %}"})
        site = Site.from_config(site_project.config())

        report = site.initialize()

        assert not report.ok
        assert "broken" in report.failed
        assert "m1" in site.cache
        assert "broken" not in site.cache


class TestLookup:
    def test_find_by_id_and_slug(self, site: Site) -> None:
        by_id = site.find_module("m1")
        by_slug = site.find_module("module-one")

        assert by_id is not None
        assert by_slug is by_id
        assert site.find_module("missing") is None

    def test_shared_slug_resolves_to_lowest_id(self, site_project: SiteProject) -> None:
        write_module(site_project, "b", {"base.html": MODULE_BASE_HTML}, slug="same")
        write_module(site_project, "a", {"base.html": MODULE_BASE_HTML}, slug="same")
        site = Site.from_config(site_project.config())
        _ = site.initialize()

        module = site.find_module("same")

        assert module is not None
        assert module.id == "a"

    def test_slug_lookup_follows_saved_module(self, site: Site) -> None:
        result = site.save_template("m1", "widget.html", "<i>x</i>")

        assert site.find_module("module-one") is result.module

    def test_id_wins_over_slug(self, site_project: SiteProject) -> None:
        write_module(site_project, "m2", {"base.html": MODULE_BASE_HTML}, slug="m1")
        site = Site.from_config(site_project.config())
        _ = site.initialize()

        module = site.find_module("m1")

        assert module is not None
        assert module.id == "m1"

    def test_slug_ignores_inactive(self, site_project: SiteProject) -> None:
        write_module(
            site_project,
            "off",
            {"base.html": MODULE_BASE_HTML},
            slug="hidden",
            is_active=False,
        )
        site = Site.from_config(site_project.config())
        _ = site.initialize()

        assert site.find_module("hidden") is None

    def test_resolve_active(self, site_project: SiteProject) -> None:
        write_module(
            site_project, "off", {"base.html": MODULE_BASE_HTML}, is_active=False
        )
        site = Site.from_config(site_project.config())
        _ = site.initialize()

        assert site.resolve_active("module-one").id == "m1"
        with pytest.raises(ModuleUnavailableError):
            _ = site.resolve_active("off")
        with pytest.raises(UnknownModuleError):
            _ = site.resolve_active("nope")

    def test_get_module_unknown(self, site: Site) -> None:
        with pytest.raises(UnknownModuleError):
            _ = site.get_module("nope")

    def test_duplicate_slugs(self, site_project: SiteProject) -> None:
        write_module(site_project, "a", {"base.html": MODULE_BASE_HTML}, slug="same")
        write_module(site_project, "b", {"base.html": MODULE_BASE_HTML}, slug="same")
        site = Site.from_config(site_project.config())
        _ = site.initialize()

        assert site.duplicate_slugs() == {"same": ["a", "b"]}


class TestRendering:
    def test_render_module_by_slug(self, site: Site) -> None:
        module, page = site.render_module("module-one", fragment=True)

        assert module.id == "m1"
        assert page.body.startswith('<section class="module" data-id="m1">')
        assert page.failures == ()

    def test_not_loaded(self, site_project: SiteProject) -> None:
        write_module(site_project, "broken", {"base.html": "{% block page %}"})
        site = Site.from_config(site_project.config())
        _ = site.initialize()

        with pytest.raises(ModuleNotLoadedError):
            _ = site.render_module("broken", fragment=False)

    def test_render_root(self, site: Site) -> None:
        page = site.render_root(fragment=True)

        assert page.body == "<p>Welcome</p>"

    def test_module_list_has_only_active(self, site_project: SiteProject) -> None:
        write_module(
            site_project, "off", {"base.html": MODULE_BASE_HTML}, is_active=False
        )
        site = Site.from_config(site_project.config())
        _ = site.initialize()

        page = site.render_module_list(fragment=True)

        assert page.body == "<ul><li>Module One</li></ul>"


class TestTemplateSource:
    def test_reads_listed_file(self, site: Site) -> None:
        assert site.template_source("m1", "widget.html").startswith('<div class="widget">')

    @pytest.mark.parametrize("filename", ["unlisted.html", "../m1.json", ""])
    def test_rejects_unlisted(self, site: Site, filename: str) -> None:
        with pytest.raises(UnknownTemplateError):
            _ = site.template_source("m1", filename)

    def test_listed_but_missing_on_disk(
        self, site: Site, site_project: SiteProject
    ) -> None:
        (site_project.templates_dir("m1") / "widget.html").unlink()

        with pytest.raises(UnknownTemplateError):
            _ = site.template_source("m1", "widget.html")


class TestSaveTemplate:
    def test_rebuilds_module(self, site: Site, site_project: SiteProject) -> None:
        before = site.cache.get("m1")

        result = site.save_template("m1", "widget.html", "<i>new</i>")

        assert result.rebuilt
        assert site.cache.get("m1") is not before
        assert (site_project.templates_dir("m1") / "widget.html").read_text() == (
            "<i>new</i>"
        )
        _, page = site.render_module("m1", fragment=True)
        assert "<i>new</i>" in page.body

    def test_touches_metadata(self, site: Site, site_project: SiteProject) -> None:
        before = site.get_module("m1").last_updated

        result = site.save_template("m1", "widget.html", "<i>new</i>")

        assert result.module.last_updated > before
        assert site.get_module("m1").last_updated == result.module.last_updated
        stored = orjson.loads((site_project.metadata_dir / "m1.json").read_bytes())
        assert stored["lastUpdated"] != "2024-01-01T00:00:00Z"

    def test_failed_rebuild_keeps_previous_set(self, site: Site) -> None:
        before = site.cache.get("m1")

        result = site.save_template("m1", "widget.html", "{% if %}")

        assert not result.rebuilt
        assert result.build_error is not None
        assert "widget.html" in result.build_error
        assert site.cache.get("m1") is before

    def test_inactive_module_is_not_rebuilt(self, site_project: SiteProject) -> None:
        write_module(
            site_project, "off", {"base.html": MODULE_BASE_HTML}, is_active=False
        )
        site = Site.from_config(site_project.config())
        _ = site.initialize()

        result = site.save_template("off", "base.html", "{% if %}")

        assert result.rebuilt
        assert "off" not in site.cache

    def test_unlisted_file(self, site: Site) -> None:
        with pytest.raises(UnknownTemplateError):
            _ = site.save_template("m1", "new.html", "x")


class TestPreview:
    def test_preview_leaves_cache(self, site: Site) -> None:
        before = site.cache.get("m1")

        result = site.preview("m1", "widget.html", "<b>draft</b>")

        assert result.html == "<b>draft</b>"
        assert site.cache.get("m1") is before

    def test_unknown_module(self, site: Site) -> None:
        with pytest.raises(UnknownModuleError):
            _ = site.preview("nope", "widget.html", "")

    def test_unsupported(self, site: Site) -> None:
        with pytest.raises(UnsupportedPreviewError):
            _ = site.preview("m1", "notes.txt", "")


class TestIsolationAndRebuild:
    def test_modules_do_not_see_each_others_blocks(
        self, site_project: SiteProject
    ) -> None:
        write_module(site_project, "m2", {"base.html": MODULE_BASE_HTML})
        site = Site.from_config(site_project.config())
        _ = site.initialize()

        m2_set = site.cache.get("m2")
        m1_set = site.cache.get("m1")

        assert m1_set is not None
        assert m2_set is not None
        assert "content" in m1_set
        assert "content" not in m2_set
        assert "widget" not in m2_set
        _, page = site.render_module("m2", fragment=True)
        assert page.body == '<section class="module" data-id="m2"></section>'

    def test_rebuild_matches_fresh_start(
        self, site: Site, site_project: SiteProject
    ) -> None:
        _ = site.save_template("m1", "content.html", "<p>{{ module.id }} edited</p>")
        _, rebuilt = site.render_module("m1", fragment=False)

        fresh = Site.from_config(site_project.config())
        _ = fresh.initialize()
        _, started = fresh.render_module("m1", fragment=False)

        assert rebuilt.body == started.body
        assert "m1 edited" in started.body


class TestConcurrentSaves:
    def test_latest_save_wins_over_slow_earlier_build(
        self, site: Site, site_project: SiteProject, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        first_read = threading.Event()
        release = threading.Event()
        calls: list[int] = []
        real_read = _builder.read_module_sources

        def slow_first_read(
            templates_dir: Path, overrides: Mapping[str, str] | None = None
        ) -> list[tuple[str, str]]:
            sources = real_read(templates_dir, overrides)
            calls.append(len(calls))
            if len(calls) == 1:
                first_read.set()
                _ = release.wait(timeout=5)
            return sources

        monkeypatch.setattr(_builder, "read_module_sources", slow_first_read)

        first = threading.Thread(
            target=site.save_template, args=("m1", "widget.html", "<b>v1</b>")
        )
        second = threading.Thread(
            target=site.save_template, args=("m1", "widget.html", "<b>v2</b>")
        )
        first.start()
        assert first_read.wait(timeout=5)
        second.start()
        second.join(timeout=0.5)
        release.set()
        first.join(timeout=5)
        second.join(timeout=5)

        on_disk = (site_project.templates_dir("m1") / "widget.html").read_text()
        _, page = site.render_module("m1", fragment=True)
        assert on_disk == "<b>v2</b>"
        assert "<b>v2</b>" in page.body
        assert "<b>v1</b>" not in page.body

    def test_saves_to_different_modules_do_not_wait_on_each_other(
        self, site_project: SiteProject, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        write_module(
            site_project, "m2", {"base.html": MODULE_BASE_HTML, "card.html": "c"}
        )
        site = Site.from_config(site_project.config())
        _ = site.initialize()
        m1_reading = threading.Event()
        release = threading.Event()
        real_read = _builder.read_module_sources

        def block_m1(
            templates_dir: Path, overrides: Mapping[str, str] | None = None
        ) -> list[tuple[str, str]]:
            if templates_dir == site_project.templates_dir("m1"):
                m1_reading.set()
                _ = release.wait(timeout=5)
            return real_read(templates_dir, overrides)

        monkeypatch.setattr(_builder, "read_module_sources", block_m1)

        slow = threading.Thread(
            target=site.save_template, args=("m1", "widget.html", "<b>slow</b>")
        )
        slow.start()
        assert m1_reading.wait(timeout=5)
        try:
            result = site.save_template("m2", "card.html", "<b>fast</b>")
            m1_still_building = slow.is_alive()
        finally:
            release.set()
            slow.join(timeout=5)

        assert result.rebuilt
        assert m1_still_building
        _, page = site.render_module("m1", fragment=True)
        assert "<b>slow</b>" in page.body
