"""Show the effective configuration."""

import json

import typer
from rich.console import Console
from rich.syntax import Syntax

from pagetrack.config.settings import ConfigurationError, Settings

from ..helpers import get_config_path, get_rich_toolkit


def config_command(
    ctx: typer.Context,
    as_json: bool = typer.Option(
        False, "--json", help="Print the configuration as JSON"
    ),
) -> None:
    """Show the configuration after TOML, environment and defaults are merged."""
    toolkit = get_rich_toolkit()
    try:
        settings = Settings.from_config(config_path=get_config_path(ctx))
    except ConfigurationError as e:
        toolkit.print(f"Configuration error: {e}", tag="error")
        raise typer.Exit(1) from e

    # SecretStr dumps as a masked value in json mode
    data = settings.model_dump(mode="json")
    rendered = json.dumps(data, indent=2, sort_keys=True)
    if as_json:
        typer.echo(rendered)
        return

    toolkit.print_title("Configuration", tag="config")
    Console().print(Syntax(rendered, "json", background_color="default"))
