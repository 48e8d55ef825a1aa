from collections.abc import Callable
from pathlib import Path

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from rich.console import Console

from modpage.cli import create_app as create_cli
from modpage.server import create_app
from tests.conftest import SiteProject


def pytest_collection_modifyitems(items: list[pytest.Item]) -> None:
    for item in items:
        if Path(item.path).is_relative_to(Path(__file__).parent):
            item.add_marker(pytest.mark.integration)


@pytest.fixture
def make_client(site_project: SiteProject) -> Callable[..., TestClient]:
    """Build a TestClient for the site with the given server settings."""

    def _make(**server: object) -> TestClient:
        app: FastAPI = create_app(site_project.config(**server))
        return TestClient(app)

    return _make


@pytest.fixture
def client(make_client: Callable[..., TestClient]) -> TestClient:
    return make_client(module_list_enabled=True, admin_enabled=True)


@pytest.fixture
def modpage_cli(console: Console) -> Callable[..., int]:
    """Run the CLI with global options and return the exit code."""
    app = create_cli(console=console, error_console=console)

    def _run(*args: str) -> int:
        try:
            app.meta(args)
        except SystemExit as e:
            if e.code is None:
                return 0
            return e.code if isinstance(e.code, int) else 1
        else:
            return 0

    return _run
