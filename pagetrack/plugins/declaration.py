"""Plugin declaration system for static plugin specification.

A plugin describes what it adds to the host app (routes, middleware, links)
in a :class:`PluginManifest`. The host reads the manifest once, at app
creation, and wires everything in.
"""

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any

from fastapi import APIRouter


class MiddlewareLayer(IntEnum):
    """Middleware layers for ordering."""

    SECURITY = 100  # Authentication
    OBSERVABILITY = 200  # Logging
    TRANSFORMATION = 300  # Response rewriting
    APPLICATION = 500  # Business logic


@dataclass
class MiddlewareSpec:
    """Specification for plugin middleware (any ASGI middleware class)."""

    middleware_class: type[Any]
    priority: int = MiddlewareLayer.APPLICATION
    kwargs: dict[str, Any] = field(default_factory=dict)

    def __lt__(self, other: "MiddlewareSpec") -> bool:
        """Sort by priority (lower values first)."""
        return self.priority < other.priority


@dataclass
class RouteSpec:
    """Specification for plugin routes."""

    router: APIRouter
    prefix: str
    tags: list[str] = field(default_factory=list)
    include_in_schema: bool = True


@dataclass
class LinkSpec:
    """A link the host shows next to the plugin in its plugin listing."""

    label: str
    href: str


@dataclass
class PluginManifest:
    """Complete static declaration of a plugin's capabilities."""

    name: str
    version: str
    description: str = ""

    middleware: list[MiddlewareSpec] = field(default_factory=list)
    routes: list[RouteSpec] = field(default_factory=list)
    links: list[LinkSpec] = field(default_factory=list)

    def get_sorted_middleware(self) -> list[MiddlewareSpec]:
        """Get middleware sorted by priority."""
        return sorted(self.middleware)
