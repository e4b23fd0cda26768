"""Plugin contract used by the host app."""

from .declaration import (
    LinkSpec,
    MiddlewareLayer,
    MiddlewareSpec,
    PluginManifest,
    RouteSpec,
)
from .protocol import AdminRequest, AdminResponse, HealthCheckResult, HostPlugin


__all__ = [
    "AdminRequest",
    "AdminResponse",
    "HealthCheckResult",
    "HostPlugin",
    "LinkSpec",
    "MiddlewareLayer",
    "MiddlewareSpec",
    "PluginManifest",
    "RouteSpec",
]
