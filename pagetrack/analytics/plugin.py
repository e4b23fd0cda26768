"""The analytics add-on as a host plugin.

One :class:`AnalyticsPlugin` instance is built by the host's startup sequence
and shared by the two entry points: the render-time middleware calls
:meth:`AnalyticsPlugin.on_render` and the admin routes call
:meth:`AnalyticsPlugin.on_admin_request`.
"""

from pagetrack._version import __version__
from pagetrack.config.analytics import AnalyticsSettings
from pagetrack.core.errors import AuthorizationError, PageTrackError
from pagetrack.core.logging import get_logger
from pagetrack.plugins.declaration import (
    LinkSpec,
    MiddlewareLayer,
    MiddlewareSpec,
    PluginManifest,
    RouteSpec,
)
from pagetrack.plugins.protocol import AdminRequest, AdminResponse, HealthCheckResult

from . import i18n
from .middleware import SnippetInjectionMiddleware
from .models import AnalyticsConfig, UserContext, coerce_bool
from .nonce import FormNonce
from .routes import router
from .settings_manager import NONCE_FIELD, SettingsManager
from .snippet import SnippetEmitter
from .store import AnalyticsConfigStore, create_option_store


logger = get_logger(__name__)

SETTINGS_UPDATED_PARAM = "settings-updated"
NONCE_ACTION = "pagetrack-analytics-settings"


class AnalyticsPlugin:
    """Owns the settings manager and the snippet emitter of one site."""

    def __init__(
        self,
        store: AnalyticsConfigStore,
        settings: AnalyticsSettings | None = None,
        translator: i18n.Translator | None = None,
        nonce: FormNonce | None = None,
    ):
        self.settings = settings or AnalyticsSettings()
        self.nonce = nonce or FormNonce()
        self.store = store
        self.translator = translator or i18n.Translator(
            self.settings.locale, self.settings.locale_dir
        )
        self.settings_page_path = f"{self.settings.admin_prefix}/analytics"
        self.settings_manager = SettingsManager(
            store, self.translator, form_action=self.settings_page_path
        )
        self.emitter = SnippetEmitter(store)

    @classmethod
    def from_settings(
        cls, settings: AnalyticsSettings, form_secret: str | None = None
    ) -> "AnalyticsPlugin":
        """Build the plugin with the option store described by ``settings``.

        ``form_secret`` signs the settings form tokens; without it a random
        per-process secret is used.
        """
        options = create_option_store(settings.store_path)
        store = AnalyticsConfigStore(options, key=settings.record_key)
        logger.debug(
            "analytics_plugin_created",
            store=options.get_location(),
            record_key=settings.record_key,
            settings_page=f"{settings.admin_prefix}/analytics",
        )
        return cls(store, settings, nonce=FormNonce(form_secret))

    @property
    def name(self) -> str:
        return "analytics"

    @property
    def version(self) -> str:
        return __version__

    @property
    def menu_label(self) -> str:
        return self.translator(i18n.MENU_LABEL)

    def get_manifest(self) -> PluginManifest:
        skip_prefixes = () if self.settings.instrument_admin else (
            self.settings.admin_prefix,
        )
        return PluginManifest(
            name=self.name,
            version=self.version,
            description="Outputs the Google Analytics tracking code to anonymous visitors",
            middleware=[
                MiddlewareSpec(
                    middleware_class=SnippetInjectionMiddleware,
                    priority=MiddlewareLayer.TRANSFORMATION,
                    kwargs={"plugin": self, "skip_prefixes": skip_prefixes},
                )
            ],
            routes=[
                RouteSpec(
                    router=router,
                    prefix=self.settings.admin_prefix,
                    tags=["admin"],
                    include_in_schema=False,
                )
            ],
            links=[
                LinkSpec(
                    label=self.translator(i18n.SETTINGS_LINK),
                    href=self.settings_page_path,
                )
            ],
        )

    async def on_render(self, user: UserContext) -> str | None:
        """Tracking script for the page being rendered, or None."""
        return await self.emitter.maybe_emit_tracking_script(user)

    def authorize_admin(self, user: UserContext) -> None:
        """Raise unless ``user`` may open the settings page."""
        try:
            user.require_scope(self.settings.admin_scope)
        except PageTrackError:
            logger.warning(
                "analytics_settings_access_denied",
                username=user.username,
                authenticated=user.is_authenticated,
                required_scope=self.settings.admin_scope,
            )
            raise

    def create_form_nonce(self, user: UserContext) -> str:
        return self.nonce.create(NONCE_ACTION, user.username)

    async def on_admin_request(self, request: AdminRequest) -> AdminResponse:
        """Serve the settings page: GET shows the form, POST saves it."""
        self.authorize_admin(request.user)
        method = request.method.upper()

        if method == "GET":
            saved = coerce_bool(request.query.get(SETTINGS_UPDATED_PARAM))
            body = await self.settings_manager.render_form(
                saved=saved, nonce=self.create_form_nonce(request.user)
            )
            return AdminResponse(status_code=200, body=body)

        if method == "POST":
            if not self.nonce.verify(
                request.form.get(NONCE_FIELD), NONCE_ACTION, request.user.username
            ):
                logger.warning(
                    "analytics_settings_nonce_rejected", username=request.user.username
                )
                raise AuthorizationError("The link you followed has expired.")
            await self.settings_manager.validate_and_save(request.form)
            return AdminResponse(
                status_code=303,
                location=f"{self.settings_page_path}?{SETTINGS_UPDATED_PARAM}=true",
            )

        return AdminResponse(status_code=405, body="Method Not Allowed")

    async def get_config(self) -> AnalyticsConfig:
        return await self.store.get()

    async def health_check(self) -> HealthCheckResult:
        """Report whether the configuration record can be read."""
        try:
            config = await self.store.get()
        except PageTrackError as e:
            return HealthCheckResult(
                status="fail",
                componentId=f"plugin-{self.name}",
                output=str(e),
                version=self.version,
            )
        return HealthCheckResult(
            status="pass",
            componentId=f"plugin-{self.name}",
            output="tracking enabled" if config.is_enabled else "tracking disabled",
            version=self.version,
        )
