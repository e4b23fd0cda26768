"""Serve command for the pagetrack host app."""

import os
from pathlib import Path
from typing import Annotated

import typer
import uvicorn

from pagetrack.config.settings import ConfigurationError, Settings, get_settings
from pagetrack.core.logging import get_logger, setup_logging

from ..helpers import get_config_path, get_rich_toolkit


def _export_overrides(config: Path | None, overrides: dict[str, str | None]) -> None:
    """Hand CLI values to the app factory, which reads them from the environment.

    The factory runs inside uvicorn (possibly in worker processes), so the
    environment is the channel that reaches it.
    """
    if config is not None:
        os.environ["CONFIG_FILE"] = str(config)
    for name, value in overrides.items():
        if value is not None:
            os.environ[name] = value
    get_settings.cache_clear()


def _run_server(settings: Settings) -> None:
    toolkit = get_rich_toolkit()
    logger = get_logger(__name__)

    toolkit.print_title("pagetrack", tag="server")
    toolkit.print(f"Serving on {settings.server_url}", tag="server")
    if settings.analytics.enabled:
        toolkit.print(f"Settings page: {settings.settings_page_url}", tag="analytics")
        if settings.analytics.store_path is None:
            toolkit.print(
                "No store path configured, settings are kept in memory only",
                tag="warning",
            )
    toolkit.print_line()

    logger.debug(
        "server_starting",
        host=settings.server.host,
        port=settings.server.port,
        url=settings.server_url,
    )

    uvicorn.run(
        app="pagetrack.api.app:create_app_from_settings",
        factory=True,
        host=settings.server.host,
        port=settings.server.port,
        reload=settings.server.reload,
        workers=settings.server.workers,
        log_config=None,
        access_log=False,
        server_header=False,
        proxy_headers=settings.server.proxy_headers,
        forwarded_allow_ips=settings.server.forwarded_allow_ips,
    )


def serve(
    ctx: typer.Context,
    port: Annotated[
        int | None,
        typer.Option(
            "--port",
            "-p",
            min=1,
            max=65535,
            help="Port to run the server on",
            rich_help_panel="Server Settings",
        ),
    ] = None,
    host: Annotated[
        str | None,
        typer.Option(
            "--host",
            "-h",
            help="Host to bind the server to",
            rich_help_panel="Server Settings",
        ),
    ] = None,
    reload: Annotated[
        bool | None,
        typer.Option(
            "--reload/--no-reload",
            help="Enable auto-reload for development",
            rich_help_panel="Server Settings",
        ),
    ] = None,
    log_level: Annotated[
        str | None,
        typer.Option(
            "--log-level",
            help="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
            rich_help_panel="Server Settings",
        ),
    ] = None,
    log_file: Annotated[
        str | None,
        typer.Option(
            "--log-file",
            help="Path to JSON log file",
            rich_help_panel="Server Settings",
        ),
    ] = None,
    store_path: Annotated[
        Path | None,
        typer.Option(
            "--store-path",
            help="JSON file holding the analytics settings",
            dir_okay=False,
            rich_help_panel="Analytics Settings",
        ),
    ] = None,
    admin_token: Annotated[
        str | None,
        typer.Option(
            "--admin-token",
            help="Admin token for the settings page (Bearer token or Basic password)",
            rich_help_panel="Security Settings",
        ),
    ] = None,
) -> None:
    """Start the pagetrack host app."""
    config = get_config_path(ctx)
    try:
        _export_overrides(
            config,
            {
                "SERVER__PORT": str(port) if port is not None else None,
                "SERVER__HOST": host,
                "SERVER__RELOAD": str(reload).lower() if reload is not None else None,
                "LOGGING__LEVEL": log_level,
                "LOGGING__FILE": log_file,
                "ANALYTICS__STORE_PATH": str(store_path) if store_path else None,
                "SECURITY__ADMIN_TOKEN": admin_token,
            },
        )
        settings = get_settings()
        setup_logging(
            level=settings.logging.level,
            log_format=settings.logging.format,
            log_file=settings.logging.file,
        )
        _run_server(settings)
    except ConfigurationError as e:
        toolkit = get_rich_toolkit()
        toolkit.print(f"Configuration error: {e}", tag="error")
        raise typer.Exit(1) from e
    except OSError as e:
        toolkit = get_rich_toolkit()
        toolkit.print(
            f"Server startup failed (port/permission issue): {e}", tag="error"
        )
        raise typer.Exit(1) from e
