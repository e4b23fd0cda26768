"""Admin index of the standalone host app: one entry per installed plugin."""

from fastapi import APIRouter, Request
from fastapi.responses import HTMLResponse

from pagetrack.analytics.auth import user_from_scope
from pagetrack.plugins.protocol import HostPlugin
from pagetrack.utils.escaping import escape_attr, escape_html


router = APIRouter()

ADMIN_INDEX_PAGE = """<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="utf-8">
<title>pagetrack admin</title>
</head>
<body>
<h1>Plugins</h1>
<ul class="plugins">
%s</ul>
</body>
</html>
"""


def _plugin_entry(plugin: HostPlugin) -> str:
    manifest = plugin.get_manifest()
    links = " | ".join(
        f'<a href="{escape_attr(link.href)}">{escape_html(link.label)}</a>'
        for link in manifest.links
    )
    return (
        f'<li id="plugin-{escape_attr(plugin.name)}">'
        f"<strong>{escape_html(plugin.menu_label)}</strong> "
        f"{escape_html(manifest.version)}"
        f"<p>{escape_html(manifest.description)}</p>"
        f"{links}</li>\n"
    )


@router.get("/", response_class=HTMLResponse)
async def admin_index(request: Request) -> HTMLResponse:
    """List installed plugins with their menu label and links."""
    settings = request.app.state.settings
    user_from_scope(request.scope).require_scope(settings.analytics.admin_scope)

    plugins: list[HostPlugin] = getattr(request.app.state, "plugins", [])
    entries = "".join(_plugin_entry(plugin) for plugin in plugins)
    return HTMLResponse(
        ADMIN_INDEX_PAGE % entries,
        headers={"Cache-Control": "no-cache, no-store, must-revalidate"},
    )
