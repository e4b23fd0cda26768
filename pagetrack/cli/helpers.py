"""CLI helper utilities for pagetrack."""

from pathlib import Path

import typer
from rich_toolkit import RichToolkit, RichToolkitTheme
from rich_toolkit.styles import TaggedStyle


def get_rich_toolkit() -> RichToolkit:
    theme = RichToolkitTheme(
        style=TaggedStyle(tag_width=11),
        theme={
            "tag.title": "white on #009485",
            "tag": "white on #007166",
            "placeholder": "grey85",
            "text": "white",
            "selected": "#007166",
            "result": "grey85",
            "progress": "on #007166",
            "error": "bold red",
            "success": "bold green",
            "warning": "bold yellow",
            "info": "blue",
            "version": "cyan",
            "config": "cyan",
            "analytics": "magenta",
            "server": "green",
        },
    )

    return RichToolkit(theme=theme)


def get_config_path(ctx: typer.Context) -> Path | None:
    """Get the --config path given to the root command, if any."""
    root = ctx.find_root()
    if root.obj and root.obj.get("config_path") is not None:
        return Path(root.obj["config_path"])
    return None
