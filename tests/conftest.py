"""Shared test fixtures and configuration for pagetrack tests.

Fixtures build real components around an in-memory option store; nothing
touches the network and file-backed stores live under ``tmp_path``.
"""

import os
from collections.abc import Callable, Generator
from pathlib import Path

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from pagetrack.analytics.models import UserContext
from pagetrack.analytics.plugin import AnalyticsPlugin
from pagetrack.analytics.store import AnalyticsConfigStore, MemoryOptionStore
from pagetrack.api.app import create_app
from pagetrack.config.settings import Settings, get_settings
from pagetrack.core.logging import setup_logging


ADMIN_TOKEN = "test-admin-token"

_SETTINGS_ENV_PREFIXES = ("server", "logging", "security", "analytics", "config_file")


def pytest_configure(config: pytest.Config) -> None:
    """Configure pytest with custom settings."""
    setup_logging(level="DEBUG", log_format="plain", configure_uvicorn=False)


@pytest.fixture(autouse=True)
def isolated_environment(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> Generator[Path, None, None]:
    """Run each test in an empty working directory with no settings in the environment.

    The environment is restored afterwards, including variables a command
    under test exported itself.
    """
    original_env = dict(os.environ)
    for name in list(os.environ):
        if name.lower().startswith(_SETTINGS_ENV_PREFIXES):
            monkeypatch.delenv(name)
    monkeypatch.chdir(tmp_path)
    get_settings.cache_clear()
    try:
        yield tmp_path
    finally:
        os.environ.clear()
        os.environ.update(original_env)
        get_settings.cache_clear()


@pytest.fixture
def option_store() -> MemoryOptionStore:
    """Empty in-memory option store."""
    return MemoryOptionStore()


@pytest.fixture
def config_store(option_store: MemoryOptionStore) -> AnalyticsConfigStore:
    """Analytics record store over the in-memory option store."""
    return AnalyticsConfigStore(option_store)


@pytest.fixture
def analytics_plugin(config_store: AnalyticsConfigStore) -> AnalyticsPlugin:
    """Plugin with default settings sharing ``config_store``."""
    return AnalyticsPlugin(config_store)


@pytest.fixture
def anonymous_user() -> UserContext:
    return UserContext.anonymous()


@pytest.fixture
def admin_user() -> UserContext:
    return UserContext(
        is_authenticated=True,
        username="admin",
        scopes=frozenset({"authenticated", "admin"}),
    )


@pytest.fixture
def test_settings() -> Settings:
    """Settings with the admin token enabled."""
    return Settings(security={"admin_token": ADMIN_TOKEN})


@pytest.fixture
def app(test_settings: Settings, analytics_plugin: AnalyticsPlugin) -> FastAPI:
    return create_app(test_settings, analytics_plugin=analytics_plugin)


@pytest.fixture
def client(app: FastAPI) -> Generator[TestClient, None, None]:
    """Test client running the app lifespan."""
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def admin_headers() -> dict[str, str]:
    return {"Authorization": f"Bearer {ADMIN_TOKEN}"}


@pytest.fixture
def admin_auth() -> tuple[str, str]:
    """Basic credentials a browser would send for the admin."""
    return ("admin", ADMIN_TOKEN)


@pytest.fixture
def write_config(tmp_path: Path) -> Callable[[str], Path]:
    """Write a TOML config file and return its path."""

    def _write(content: str, name: str = "config.toml") -> Path:
        path = tmp_path / name
        path.write_text(content, encoding="utf-8")
        return path

    return _write

