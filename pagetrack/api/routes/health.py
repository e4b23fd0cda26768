"""Health check endpoints for the pagetrack host app.

- /health/live: liveness probe (minimal, fast)
- /health: detailed status including installed plugins

Follows the IETF Health Check Response Format draft.
"""

from typing import Any

from fastapi import APIRouter, Request, Response

from pagetrack.core import __version__
from pagetrack.core.logging import get_logger


router = APIRouter()
logger = get_logger(__name__)


@router.get("/health/live")
async def liveness_probe(response: Response) -> dict[str, Any]:
    """Liveness probe: the application process is running."""
    response.headers["Cache-Control"] = "no-cache, no-store, must-revalidate"

    logger.debug("liveness_probe_request")

    return {
        "status": "pass",
        "version": __version__,
        "output": "Application process is running",
    }


@router.get("/health")
async def detailed_health_check(request: Request, response: Response) -> dict[str, Any]:
    """Detailed health of the app and each installed plugin."""
    response.headers["Cache-Control"] = "no-cache, no-store, must-revalidate"

    checks: dict[str, list[dict[str, Any]]] = {}
    status = "pass"
    for plugin in getattr(request.app.state, "plugins", []):
        result = await plugin.health_check()
        checks[f"{plugin.name}:config"] = [result.model_dump(exclude_none=True)]
        if result.status == "fail":
            status = "fail"
        elif result.status == "warn" and status == "pass":
            status = "warn"

    if status == "fail":
        response.status_code = 503

    return {
        "status": status,
        "version": __version__,
        "checks": checks,
    }
