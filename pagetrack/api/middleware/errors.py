"""Error handling for the pagetrack host app."""

from typing import Any

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from pagetrack.core.errors import (
    AuthenticationError,
    AuthorizationError,
    ConfigInvalidError,
    ConfigStoreError,
    PageTrackError,
)
from pagetrack.core.logging import get_logger


logger = get_logger(__name__)


def setup_error_handlers(app: FastAPI) -> None:
    """Setup error handlers for the FastAPI application.

    Args:
        app: FastAPI application instance
    """
    logger.debug("error_handlers_setup_start")

    # None means "use the value carried by the exception"
    ERROR_MAPPINGS: dict[type[PageTrackError], tuple[int | None, str | None]] = {
        PageTrackError: (None, None),
        AuthenticationError: (401, "authentication_error"),
        AuthorizationError: (403, "permission_error"),
        ConfigStoreError: (500, "config_store_error"),
        ConfigInvalidError: (500, "config_invalid_error"),
    }

    async def unified_error_handler(
        request: Request,
        exc: PageTrackError,
        status_code: int | None = None,
        error_type: str | None = None,
    ) -> JSONResponse:
        """Unified error handler for all pagetrack exception types."""
        if status_code is None:
            status_code = exc.status_code
        if error_type is None:
            error_type = exc.error_type

        log_kwargs = {
            "error_type": error_type,
            "error_message": str(exc),
            "status_code": status_code,
            "request_method": request.method,
            "request_url": str(request.url.path),
        }
        if status_code >= 500:
            logger.error("request_failed", **log_kwargs)
        else:
            logger.warning("request_rejected", **log_kwargs)

        headers = None
        challenge = getattr(request.app.state, "auth_challenge", None)
        if status_code == 401 and challenge:
            headers = {"WWW-Authenticate": challenge}

        return JSONResponse(
            status_code=status_code,
            content={"error": {"type": error_type, "message": exc.message}},
            headers=headers,
        )

    def _make_handler(status_code: int | None, error_type: str | None) -> Any:
        async def handler(request: Request, exc: PageTrackError) -> JSONResponse:
            return await unified_error_handler(request, exc, status_code, error_type)

        return handler

    for exc_class, (status_code, error_type) in ERROR_MAPPINGS.items():
        app.add_exception_handler(exc_class, _make_handler(status_code, error_type))

    logger.debug("error_handlers_setup_completed", handler_count=len(ERROR_MAPPINGS))
