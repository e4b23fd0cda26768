"""Main entry point for the pagetrack command line."""

from pathlib import Path

import typer

from pagetrack._version import __version__

from .commands.analytics import app as analytics_app
from .commands.config import config_command
from .commands.serve import serve
from .helpers import get_rich_toolkit


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        toolkit = get_rich_toolkit()
        toolkit.print(f"pagetrack {__version__}", tag="version")
        raise typer.Exit()


app = typer.Typer(
    rich_markup_mode="rich",
    add_completion=True,
    no_args_is_help=True,
    pretty_exceptions_enable=False,
)


@app.callback()
def app_main(
    ctx: typer.Context,
    version: bool = typer.Option(
        False,
        "--version",
        "-V",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    config: Path | None = typer.Option(
        None,
        "--config",
        "-c",
        help="Path to configuration file (TOML)",
        exists=True,
        file_okay=True,
        dir_okay=False,
        readable=True,
    ),
) -> None:
    """pagetrack - Google Analytics tracking code for FastAPI sites."""
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config


app.add_typer(analytics_app)
app.command(name="serve")(serve)
app.command(name="config")(config_command)


def main() -> None:
    """Entry point for the console script."""
    app()


if __name__ == "__main__":
    main()
