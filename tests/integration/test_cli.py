from collections.abc import Callable
from pathlib import Path

import pytest
import uvicorn

from modpage.cli import CLIContext
from modpage.cli._commands._shared import ExitCode
from tests.conftest import MODULE_BASE_HTML, SiteProject, write_module


class TestCheck:
    def test_ok(
        self,
        site_project: SiteProject,
        modpage_cli: Callable[..., int],
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        code = modpage_cli("--project-root", str(site_project.root), "check")

        out = capsys.readouterr().out
        assert code == ExitCode.SUCCESS
        assert "Layout blocks: layout, page" in out
        assert "OK: 1 built, 0 inactive" in out

    def test_broken_module(
        self,
        site_project: SiteProject,
        modpage_cli: Callable[..., int],
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        write_module(site_project, "broken", {"base.html": "{% block page %}"})

        code = modpage_cli("--project-root", str(site_project.root), "check")

        assert code == ExitCode.VALIDATION_ERROR
        assert "failed" in capsys.readouterr().out

    def test_duplicate_slug(
        self,
        site_project: SiteProject,
        modpage_cli: Callable[..., int],
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        write_module(
            site_project, "m2", {"base.html": MODULE_BASE_HTML}, slug="module-one"
        )

        code = modpage_cli("--project-root", str(site_project.root), "check")

        assert code == ExitCode.VALIDATION_ERROR
        assert "Duplicate slug 'module-one': m1, m2" in capsys.readouterr().out

    def test_missing_layouts(
        self, tmp_path: Path, modpage_cli: Callable[..., int]
    ) -> None:
        code = modpage_cli("--project-root", str(tmp_path), "check")

        assert code == ExitCode.LOAD_ERROR

    def test_context_is_reset(
        self, site_project: SiteProject, modpage_cli: Callable[..., int]
    ) -> None:
        _ = modpage_cli("--project-root", str(site_project.root), "check")

        assert CLIContext.get_current().project_root is None


class TestRender:
    def test_prints_fragment(
        self,
        site_project: SiteProject,
        modpage_cli: Callable[..., int],
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        code = modpage_cli(
            "--project-root", str(site_project.root), "render", "m1", "--fragment"
        )

        out = capsys.readouterr().out
        assert code == ExitCode.SUCCESS
        assert out.startswith(
            '<span id="module-header-info" hx-swap-oob="innerHTML">'
            "Module: Module One</span>"
        )
        assert '<div class="widget">Module One widget</div>' in out

    def test_prints_full_document_by_slug(
        self,
        site_project: SiteProject,
        modpage_cli: Callable[..., int],
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        code = modpage_cli("--project-root", str(site_project.root), "render", "module-one")

        out = capsys.readouterr().out
        assert code == ExitCode.SUCCESS
        assert out.startswith("<!DOCTYPE html>")

    def test_unknown_module(
        self, site_project: SiteProject, modpage_cli: Callable[..., int]
    ) -> None:
        code = modpage_cli("--project-root", str(site_project.root), "render", "nope")

        assert code == ExitCode.NOT_FOUND

    def test_inactive_module(
        self, site_project: SiteProject, modpage_cli: Callable[..., int]
    ) -> None:
        write_module(
            site_project, "off", {"base.html": MODULE_BASE_HTML}, is_active=False
        )

        code = modpage_cli("--project-root", str(site_project.root), "render", "off")

        assert code == ExitCode.NOT_FOUND

    def test_broken_module(
        self, site_project: SiteProject, modpage_cli: Callable[..., int]
    ) -> None:
        write_module(site_project, "broken", {"base.html": "{% block page %}"})

        code = modpage_cli("--project-root", str(site_project.root), "render", "broken")

        assert code == ExitCode.INTERNAL_ERROR


class TestServe:
    def test_runs_uvicorn_with_overrides(
        self,
        site_project: SiteProject,
        modpage_cli: Callable[..., int],
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        calls: list[dict[str, object]] = []

        def fake_run(app: object, **options: object) -> None:
            calls.append({"app": app, **options})

        monkeypatch.setattr(uvicorn, "run", fake_run)

        code = modpage_cli(
            "--project-root",
            str(site_project.root),
            "serve",
            "--host",
            "0.0.0.0",
            "--port",
            "9000",
            "--admin",
        )

        assert code == ExitCode.SUCCESS
        assert len(calls) == 1
        options = calls[0]
        assert options["host"] == "0.0.0.0"
        assert options["port"] == 9000
        assert "ssl_certfile" not in options
        app = options["app"]
        assert app.state.config.server.admin_enabled  # pyright: ignore[reportAttributeAccessIssue]

    def test_invalid_port(
        self,
        site_project: SiteProject,
        modpage_cli: Callable[..., int],
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        monkeypatch.setattr(uvicorn, "run", lambda *_, **__: None)

        code = modpage_cli(
            "--project-root", str(site_project.root), "serve", "--port", "70000"
        )

        assert code == ExitCode.VALIDATION_ERROR
