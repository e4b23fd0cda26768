"""Tests for the pagetrack command line."""

import json
import os

import pytest
from typer.testing import CliRunner

from pagetrack import __version__
from pagetrack.cli.main import app


runner = CliRunner()


@pytest.fixture
def store_config(write_config, tmp_path):
    """Config file pointing the analytics store at a JSON file under tmp_path."""
    store_path = tmp_path / "options.json"
    cfg = write_config(f'[analytics]\nstore_path = "{store_path.as_posix()}"\n')
    return cfg, store_path


def stored_record(store_path):
    return json.loads(store_path.read_text(encoding="utf-8"))["pagetrack_analytics"]


@pytest.mark.unit
def test_version():
    result = runner.invoke(app, ["--version"])
    assert result.exit_code == 0
    assert __version__ in result.output


@pytest.mark.unit
class TestAnalyticsCommands:
    def test_set_then_show(self, store_config):
        cfg, store_path = store_config

        result = runner.invoke(
            app,
            ["--config", str(cfg), "analytics", "set", "--id", " UA-7-7 ", "--active"],
        )

        assert result.exit_code == 0, result.output
        assert stored_record(store_path) == {"active": True, "tracking_id": "UA-7-7"}

        result = runner.invoke(app, ["--config", str(cfg), "analytics", "show"])
        assert result.exit_code == 0, result.output
        assert "UA-7-7" in result.output

    def test_set_keeps_unspecified_values(self, store_config):
        cfg, store_path = store_config
        runner.invoke(
            app, ["--config", str(cfg), "analytics", "set", "--id", "UA-7-7", "--active"]
        )

        result = runner.invoke(
            app, ["--config", str(cfg), "analytics", "set", "--inactive"]
        )

        assert result.exit_code == 0, result.output
        assert stored_record(store_path) == {"active": False, "tracking_id": "UA-7-7"}

    def test_reset_deletes_record(self, store_config):
        cfg, store_path = store_config
        runner.invoke(app, ["--config", str(cfg), "analytics", "set", "--id", "UA-7-7"])

        result = runner.invoke(app, ["--config", str(cfg), "analytics", "reset", "--yes"])

        assert result.exit_code == 0, result.output
        assert "pagetrack_analytics" not in json.loads(
            store_path.read_text(encoding="utf-8")
        )

    def test_unreadable_store_fails(self, store_config):
        cfg, store_path = store_config
        store_path.write_text("{broken", encoding="utf-8")

        result = runner.invoke(app, ["--config", str(cfg), "analytics", "show"])

        assert result.exit_code == 1
        assert "Cannot read settings" in result.output

    def test_invalid_config_fails(self, write_config):
        cfg = write_config('[logging]\nlevel = "LOUD"\n')

        result = runner.invoke(app, ["--config", str(cfg), "analytics", "show"])

        assert result.exit_code == 1
        assert "Configuration error" in result.output


@pytest.mark.unit
def test_config_masks_admin_token(monkeypatch):
    monkeypatch.setenv("SECURITY__ADMIN_TOKEN", "very-secret")

    result = runner.invoke(app, ["config", "--json"])

    assert result.exit_code == 0, result.output
    data = json.loads(result.stdout)
    assert data["security"]["admin_token"] == "**********"
    assert "very-secret" not in result.output


@pytest.mark.unit
def test_serve_passes_overrides_to_app_factory(monkeypatch, store_config):
    cfg, store_path = store_config
    calls = []
    monkeypatch.setattr(
        "pagetrack.cli.commands.serve.uvicorn.run",
        lambda **kwargs: calls.append(kwargs),
    )
    monkeypatch.setattr(
        "pagetrack.cli.commands.serve.setup_logging", lambda **kwargs: None
    )

    result = runner.invoke(
        app,
        ["--config", str(cfg), "serve", "--port", "9100", "--admin-token", "tok"],
    )

    assert result.exit_code == 0, result.output
    [kwargs] = calls
    assert kwargs["app"] == "pagetrack.api.app:create_app_from_settings"
    assert kwargs["factory"] is True
    assert kwargs["port"] == 9100
    assert kwargs["proxy_headers"] is False
    assert kwargs["forwarded_allow_ips"] == "127.0.0.1"
    assert os.environ["CONFIG_FILE"] == str(cfg)
    assert os.environ["SECURITY__ADMIN_TOKEN"] == "tok"


@pytest.mark.unit
def test_config_option_reaches_subcommands(write_config):
    cfg = write_config(
        '[analytics]\nrecord_key = "from_cli_config"\n\n[server]\nproxy_headers = true\n'
    )

    result = runner.invoke(app, ["--config", str(cfg), "config", "--json"])

    assert result.exit_code == 0, result.output
    data = json.loads(result.stdout)
    assert data["analytics"]["record_key"] == "from_cli_config"
    assert data["server"]["proxy_headers"] is True


@pytest.mark.unit
def test_serve_refuses_workers_with_memory_store(monkeypatch, write_config):
    cfg = write_config('[server]\nworkers = 2\n\n[analytics]\nstore_path = ""\n')
    calls = []
    monkeypatch.setattr(
        "pagetrack.cli.commands.serve.uvicorn.run",
        lambda **kwargs: calls.append(kwargs),
    )

    result = runner.invoke(app, ["--config", str(cfg), "serve"])

    assert result.exit_code == 1
    assert "Configuration error" in result.output
    assert calls == []
