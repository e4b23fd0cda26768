"""Tests for the analytics plugin hooks and manifest."""

import pytest

from pagetrack.analytics.middleware import SnippetInjectionMiddleware
from pagetrack.analytics.models import AnalyticsConfig, UserContext
from pagetrack.analytics.plugin import AnalyticsPlugin
from pagetrack.analytics.store import AnalyticsConfigStore, JsonFileOptionStore
from pagetrack.config.analytics import AnalyticsSettings
from pagetrack.analytics.nonce import FormNonce
from pagetrack.analytics.settings_manager import NONCE_FIELD
from pagetrack.core.errors import AuthenticationError, AuthorizationError
from pagetrack.plugins import AdminRequest, HostPlugin, MiddlewareLayer


@pytest.mark.unit
class TestOnAdminRequest:
    """Admin page entry point."""

    async def test_anonymous_user_must_log_in(self, analytics_plugin, anonymous_user):
        with pytest.raises(AuthenticationError):
            await analytics_plugin.on_admin_request(
                AdminRequest(method="GET", user=anonymous_user)
            )

    async def test_user_without_admin_scope_is_rejected(self, analytics_plugin):
        editor = UserContext(
            is_authenticated=True, username="editor", scopes=frozenset({"editor"})
        )
        with pytest.raises(AuthorizationError):
            await analytics_plugin.on_admin_request(
                AdminRequest(method="POST", user=editor, form={"active": "1"})
            )

    async def test_rejected_post_does_not_write(
        self, analytics_plugin, anonymous_user, option_store
    ):
        with pytest.raises(AuthenticationError):
            await analytics_plugin.on_admin_request(
                AdminRequest(
                    method="POST",
                    user=anonymous_user,
                    form={"active": "1", "tracking_id": "UA-6-6"},
                )
            )
        assert await option_store.get_option("pagetrack_analytics") is None

    async def test_get_renders_form(self, analytics_plugin, admin_user):
        response = await analytics_plugin.on_admin_request(
            AdminRequest(method="GET", user=admin_user)
        )

        assert response.status_code == 200
        assert response.location is None
        assert "<form" in response.body
        assert "Settings saved." not in response.body

    async def test_get_after_save_shows_notice(self, analytics_plugin, admin_user):
        response = await analytics_plugin.on_admin_request(
            AdminRequest(
                method="GET", user=admin_user, query={"settings-updated": "true"}
            )
        )
        assert "Settings saved." in response.body

    async def test_post_saves_and_redirects(
        self, analytics_plugin, admin_user, config_store
    ):
        response = await analytics_plugin.on_admin_request(
            AdminRequest(
                method="post",
                user=admin_user,
                form={
                    "active": "1",
                    "tracking_id": " UA-9-9 ",
                    NONCE_FIELD: analytics_plugin.create_form_nonce(admin_user),
                },
            )
        )

        assert response.status_code == 303
        assert response.location == "/admin/tools/analytics?settings-updated=true"
        assert await config_store.get() == AnalyticsConfig(
            active=True, tracking_id="UA-9-9"
        )

    async def test_form_carries_nonce_for_user(self, analytics_plugin, admin_user):
        response = await analytics_plugin.on_admin_request(
            AdminRequest(method="GET", user=admin_user)
        )

        nonce = analytics_plugin.create_form_nonce(admin_user)
        assert f'name="{NONCE_FIELD}" value="{nonce}"' in response.body

    @pytest.mark.parametrize("nonce", [None, "", "0" * 32])
    async def test_post_without_valid_nonce_is_refused(
        self, analytics_plugin, admin_user, option_store, nonce
    ):
        form = {"active": "1", "tracking_id": "UA-6-6"}
        if nonce is not None:
            form[NONCE_FIELD] = nonce

        with pytest.raises(AuthorizationError, match="expired"):
            await analytics_plugin.on_admin_request(
                AdminRequest(method="POST", user=admin_user, form=form)
            )
        assert await option_store.get_option("pagetrack_analytics") is None

    async def test_nonce_of_another_user_is_refused(self, config_store, admin_user):
        plugin = AnalyticsPlugin(config_store, nonce=FormNonce("shared"))
        other = UserContext(
            is_authenticated=True, username="other", scopes=frozenset({"admin"})
        )

        with pytest.raises(AuthorizationError):
            await plugin.on_admin_request(
                AdminRequest(
                    method="POST",
                    user=admin_user,
                    form={"active": "1", NONCE_FIELD: plugin.create_form_nonce(other)},
                )
            )

    async def test_plugins_sharing_secret_accept_each_others_nonce(
        self, config_store, admin_user
    ):
        first = AnalyticsPlugin(config_store, nonce=FormNonce("shared"))
        second = AnalyticsPlugin(config_store, nonce=FormNonce("shared"))

        response = await second.on_admin_request(
            AdminRequest(
                method="POST",
                user=admin_user,
                form={"active": "1", NONCE_FIELD: first.create_form_nonce(admin_user)},
            )
        )

        assert response.status_code == 303

    async def test_other_methods_are_not_allowed(self, analytics_plugin, admin_user):
        response = await analytics_plugin.on_admin_request(
            AdminRequest(method="DELETE", user=admin_user)
        )
        assert response.status_code == 405

    async def test_custom_admin_scope(self, config_store):
        plugin = AnalyticsPlugin(config_store, AnalyticsSettings(admin_scope="manage"))
        manager = UserContext(is_authenticated=True, scopes=frozenset({"manage"}))

        response = await plugin.on_admin_request(
            AdminRequest(method="GET", user=manager)
        )

        assert response.status_code == 200


@pytest.mark.unit
class TestOnRender:
    async def test_emits_for_anonymous_visitor(
        self, analytics_plugin, config_store, anonymous_user, admin_user
    ):
        await config_store.set(AnalyticsConfig(active=True, tracking_id="UA-1-1"))

        assert "UA-1-1" in await analytics_plugin.on_render(anonymous_user)
        assert await analytics_plugin.on_render(admin_user) is None


@pytest.mark.unit
class TestManifest:
    def test_satisfies_host_protocol(self, analytics_plugin):
        assert isinstance(analytics_plugin, HostPlugin)
        assert analytics_plugin.name == "analytics"
        assert analytics_plugin.menu_label == "Analytics"

    def test_declares_routes_middleware_and_link(self, analytics_plugin):
        manifest = analytics_plugin.get_manifest()

        assert manifest.name == "analytics"
        assert [route.prefix for route in manifest.routes] == ["/admin/tools"]

        [middleware] = manifest.middleware
        assert middleware.middleware_class is SnippetInjectionMiddleware
        assert middleware.priority == MiddlewareLayer.TRANSFORMATION
        assert middleware.kwargs["plugin"] is analytics_plugin
        assert middleware.kwargs["skip_prefixes"] == ("/admin/tools",)

        [link] = manifest.links
        assert link.label == "Settings"
        assert link.href == "/admin/tools/analytics"

    def test_instrument_admin_disables_skip(self, config_store):
        plugin = AnalyticsPlugin(
            config_store, AnalyticsSettings(instrument_admin=True, admin_prefix="wp/")
        )

        manifest = plugin.get_manifest()

        assert manifest.middleware[0].kwargs["skip_prefixes"] == ()
        assert manifest.routes[0].prefix == "/wp"
        assert manifest.links[0].href == "/wp/analytics"


@pytest.mark.unit
class TestHealthCheck:
    async def test_pass_reports_tracking_state(self, analytics_plugin, config_store):
        result = await analytics_plugin.health_check()
        assert result.status == "pass"
        assert result.output == "tracking disabled"

        await config_store.set(AnalyticsConfig(active=True, tracking_id="UA-1-1"))
        result = await analytics_plugin.health_check()
        assert result.output == "tracking enabled"
        assert result.componentId == "plugin-analytics"

    async def test_fail_when_store_is_unreadable(self, tmp_path):
        path = tmp_path / "options.json"
        path.write_text("{broken", encoding="utf-8")
        plugin = AnalyticsPlugin(AnalyticsConfigStore(JsonFileOptionStore(path)))

        result = await plugin.health_check()

        assert result.status == "fail"
        assert "Invalid JSON" in result.output


@pytest.mark.unit
async def test_from_settings_uses_file_store(tmp_path):
    settings = AnalyticsSettings(store_path=tmp_path / "options.json", record_key="ga")
    plugin = AnalyticsPlugin.from_settings(settings)

    await plugin.settings_manager.validate_and_save(
        {"active": "1", "tracking_id": "UA-4-4"}
    )

    assert plugin.store.key == "ga"
    assert isinstance(plugin.store.options, JsonFileOptionStore)
    assert "UA-4-4" in (tmp_path / "options.json").read_text(encoding="utf-8")
