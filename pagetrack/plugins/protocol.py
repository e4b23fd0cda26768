"""Contract between the host app and its plugins."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Literal, Protocol, runtime_checkable

from pydantic import BaseModel

from .declaration import PluginManifest


if TYPE_CHECKING:
    from pagetrack.analytics.models import UserContext


class HealthCheckResult(BaseModel):
    """Standardized health check result following IETF format."""

    status: Literal["pass", "warn", "fail"]
    componentId: str  # noqa: N815
    componentType: str = "plugin"  # noqa: N815
    output: str | None = None
    version: str | None = None


@dataclass
class AdminRequest:
    """An admin page request as seen by a plugin, independent of the web layer."""

    method: str
    user: UserContext
    form: Mapping[str, str] = field(default_factory=dict)
    query: Mapping[str, str] = field(default_factory=dict)


@dataclass
class AdminResponse:
    """What the host should answer to an :class:`AdminRequest`."""

    status_code: int = 200
    body: str = ""
    location: str | None = None


@runtime_checkable
class HostPlugin(Protocol):
    """Hooks the host invokes on a plugin."""

    @property
    def name(self) -> str:
        """Plugin name."""
        ...

    @property
    def version(self) -> str:
        """Plugin version."""
        ...

    @property
    def menu_label(self) -> str:
        """Label of the plugin in the host's admin menu."""
        ...

    def get_manifest(self) -> PluginManifest:
        """Static declaration of routes, middleware and links."""
        ...

    async def on_render(self, user: UserContext) -> str | None:
        """Markup to add to the page being rendered for ``user``, if any."""
        ...

    def authorize_admin(self, user: UserContext) -> None:
        """Raise unless ``user`` may use the plugin's admin page."""
        ...

    async def on_admin_request(self, request: AdminRequest) -> AdminResponse:
        """Serve the plugin's admin page."""
        ...

    async def health_check(self) -> HealthCheckResult:
        """Perform health check following IETF format."""
        ...
