"""CLI commands for the analytics settings record."""

import asyncio

import typer
from rich.console import Console
from rich.table import Table

from pagetrack.analytics.models import AnalyticsConfig
from pagetrack.analytics.plugin import AnalyticsPlugin
from pagetrack.analytics.settings_manager import ACTIVE_FIELD, TRACKING_ID_FIELD
from pagetrack.config.settings import ConfigurationError, Settings
from pagetrack.core.errors import PageTrackError

from ..helpers import get_config_path, get_rich_toolkit


app = typer.Typer(name="analytics", help="Inspect and change the tracking settings.")


def _load_plugin(ctx: typer.Context) -> AnalyticsPlugin:
    toolkit = get_rich_toolkit()
    try:
        settings = Settings.from_config(config_path=get_config_path(ctx))
    except ConfigurationError as e:
        toolkit.print(f"Configuration error: {e}", tag="error")
        raise typer.Exit(1) from e

    if settings.analytics.store_path is None:
        toolkit.print(
            "No store path configured (analytics.store_path); "
            "changes will not outlive this command",
            tag="warning",
        )
    return AnalyticsPlugin.from_settings(settings.analytics)


def _print_config(plugin: AnalyticsPlugin, config: AnalyticsConfig) -> None:
    table = Table(title="Google Analytics", show_header=False)
    table.add_column("Setting", style="cyan")
    table.add_column("Value")
    table.add_row("Store", plugin.store.options.get_location())
    table.add_row("Record", plugin.store.key)
    table.add_row("Active", "yes" if config.active else "no")
    table.add_row("Tracking ID", config.tracking_id or "[dim](not set)[/dim]")
    table.add_row("Emitting", "yes" if config.is_enabled else "no")
    Console().print(table)


@app.command()
def show(ctx: typer.Context) -> None:
    """Show the stored tracking settings."""
    plugin = _load_plugin(ctx)
    try:
        config = asyncio.run(plugin.get_config())
    except PageTrackError as e:
        get_rich_toolkit().print(f"Cannot read settings: {e}", tag="error")
        raise typer.Exit(1) from e
    _print_config(plugin, config)


@app.command(name="set")
def set_config(
    ctx: typer.Context,
    tracking_id: str | None = typer.Option(
        None, "--id", help="Tracking ID, e.g. UA-12345-1"
    ),
    active: bool | None = typer.Option(
        None, "--active/--inactive", help="Turn the tracking code on or off"
    ),
) -> None:
    """Change the tracking settings, as the admin form does.

    Options that are not given keep their stored value.
    """
    plugin = _load_plugin(ctx)

    async def update() -> AnalyticsConfig:
        current = await plugin.get_config()
        raw = {
            TRACKING_ID_FIELD: current.tracking_id if tracking_id is None else tracking_id
        }
        is_active = current.active if active is None else active
        if is_active:
            raw[ACTIVE_FIELD] = "1"
        return await plugin.settings_manager.validate_and_save(raw)

    try:
        config = asyncio.run(update())
    except PageTrackError as e:
        get_rich_toolkit().print(f"Cannot save settings: {e}", tag="error")
        raise typer.Exit(1) from e

    get_rich_toolkit().print("Settings saved.", tag="success")
    _print_config(plugin, config)


@app.command()
def reset(
    ctx: typer.Context,
    yes: bool = typer.Option(False, "--yes", "-y", help="Do not ask for confirmation"),
) -> None:
    """Delete the stored record, as when the add-on is uninstalled."""
    plugin = _load_plugin(ctx)
    if not yes:
        typer.confirm("Delete the stored analytics settings?", abort=True)
    try:
        deleted = asyncio.run(plugin.store.delete())
    except PageTrackError as e:
        get_rich_toolkit().print(f"Cannot delete settings: {e}", tag="error")
        raise typer.Exit(1) from e

    toolkit = get_rich_toolkit()
    if deleted:
        toolkit.print("Settings deleted.", tag="success")
    else:
        toolkit.print("Nothing stored.", tag="info")
