"""Admin routes of the analytics add-on."""

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Request, Response
from fastapi.responses import HTMLResponse, RedirectResponse

from pagetrack.core.logging import get_logger
from pagetrack.plugins.protocol import AdminRequest, AdminResponse, HostPlugin

from .auth import user_from_scope


logger = get_logger(__name__)

router = APIRouter()


def get_analytics_plugin(request: Request) -> HostPlugin:
    """Get the AnalyticsPlugin installed on the app."""
    plugin = getattr(request.app.state, "analytics_plugin", None)
    if plugin is None:
        logger.error("analytics_plugin_missing_on_app_state", category="lifecycle")
        raise HTTPException(status_code=503, detail="Analytics plugin not installed")
    return plugin  # type: ignore[no-any-return]


AnalyticsPluginDep = Annotated[HostPlugin, Depends(get_analytics_plugin)]


def _to_response(result: AdminResponse) -> Response:
    if result.location is not None:
        return RedirectResponse(result.location, status_code=result.status_code)
    return HTMLResponse(
        result.body,
        status_code=result.status_code,
        headers={"Cache-Control": "no-cache, no-store, must-revalidate"},
    )


@router.get("/analytics", response_class=HTMLResponse)
async def analytics_settings_page(
    request: Request, plugin: AnalyticsPluginDep
) -> Response:
    """Render the analytics settings form."""
    result = await plugin.on_admin_request(
        AdminRequest(
            method="GET",
            user=user_from_scope(request.scope),
            query=dict(request.query_params),
        )
    )
    return _to_response(result)


@router.post("/analytics")
async def analytics_settings_submit(
    request: Request, plugin: AnalyticsPluginDep
) -> Response:
    """Validate and save the submitted settings, then redirect back."""
    user = user_from_scope(request.scope)
    # Reject before the body is parsed
    plugin.authorize_admin(user)
    form = await request.form()
    fields = {key: value for key, value in form.items() if isinstance(value, str)}
    result = await plugin.on_admin_request(
        AdminRequest(
            method="POST",
            user=user,
            form=fields,
            query=dict(request.query_params),
        )
    )
    return _to_response(result)
