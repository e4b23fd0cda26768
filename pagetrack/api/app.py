"""FastAPI application factory for the pagetrack host app."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from starlette.middleware.authentication import AuthenticationMiddleware

from pagetrack import __version__
from pagetrack.analytics.plugin import AnalyticsPlugin
from pagetrack.api.auth import AdminTokenBackend, basic_challenge
from pagetrack.api.middleware.errors import setup_error_handlers
from pagetrack.api.routes.admin import router as admin_router
from pagetrack.api.routes.health import router as health_router
from pagetrack.api.routes.pages import router as pages_router
from pagetrack.config.settings import Settings, get_settings
from pagetrack.core.logging import get_logger, setup_logging
from pagetrack.plugins.protocol import HostPlugin


logger = get_logger(__name__)


def install_plugin(app: FastAPI, plugin: HostPlugin) -> None:
    """Wire a plugin's routes and middleware into ``app``.

    Must run before the app starts serving, since middleware cannot be added
    afterwards. The plugin is reachable as ``app.state.<name>_plugin``.
    """
    manifest = plugin.get_manifest()

    for route_spec in manifest.routes:
        app.include_router(
            route_spec.router,
            prefix=route_spec.prefix,
            tags=list(route_spec.tags),
            include_in_schema=route_spec.include_in_schema,
        )

    # The last middleware added is the outermost one, so add the highest
    # priority values first to keep lower values outside
    for middleware_spec in reversed(manifest.get_sorted_middleware()):
        app.add_middleware(middleware_spec.middleware_class, **middleware_spec.kwargs)

    if not hasattr(app.state, "plugins"):
        app.state.plugins = []
    app.state.plugins.append(plugin)
    setattr(app.state, f"{plugin.name}_plugin", plugin)

    logger.info(
        "plugin_installed",
        plugin_name=manifest.name,
        version=manifest.version,
        routes=[spec.prefix for spec in manifest.routes],
        middleware=[spec.middleware_class.__name__ for spec in manifest.middleware],
        category="lifecycle",
    )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Log the installed plugins and their state on startup and shutdown."""
    for plugin in getattr(app.state, "plugins", []):
        health = await plugin.health_check()
        logger.info(
            "plugin_ready",
            plugin_name=plugin.name,
            status=health.status,
            output=health.output,
            category="lifecycle",
        )
    logger.info("app_startup_completed", version=__version__, category="lifecycle")
    yield
    logger.info("app_shutdown_completed", category="lifecycle")


def create_app(
    settings: Settings | None = None,
    analytics_plugin: AnalyticsPlugin | None = None,
) -> FastAPI:
    """Create the host app with the analytics add-on installed.

    Args:
        settings: Settings to use; defaults to the process-wide settings
        analytics_plugin: Pre-built plugin, e.g. one sharing a test store
    """
    if settings is None:
        settings = get_settings()

    app = FastAPI(
        title="pagetrack",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.settings = settings

    setup_error_handlers(app)
    app.include_router(health_router, tags=["health"])
    app.include_router(pages_router, tags=["pages"])
    if settings.analytics.admin_prefix:
        app.include_router(
            admin_router,
            prefix=settings.analytics.admin_prefix,
            tags=["admin"],
            include_in_schema=False,
        )

    if settings.analytics.enabled:
        plugin = analytics_plugin or AnalyticsPlugin.from_settings(
            settings.analytics, form_secret=settings.security.form_secret_value()
        )
        install_plugin(app, plugin)
    else:
        logger.info("analytics_plugin_disabled", category="lifecycle")

    if settings.security.admin_token is not None:
        # Sent with 401s so browsers prompt for Basic credentials
        app.state.auth_challenge = basic_challenge()
        app.add_middleware(
            AuthenticationMiddleware,
            backend=AdminTokenBackend(
                settings.security.admin_token.get_secret_value(),
                scope=settings.analytics.admin_scope,
                username=settings.security.admin_username,
            ),
        )

    return app


def create_app_from_settings() -> FastAPI:
    """Factory used by uvicorn: configures logging, then builds the app."""
    settings = get_settings()
    setup_logging(
        level=settings.logging.level,
        log_format=settings.logging.format,
        log_file=settings.logging.file,
    )
    return create_app(settings)
