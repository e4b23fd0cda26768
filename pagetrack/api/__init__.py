"""Host app built on FastAPI."""

from .app import create_app, install_plugin


__all__ = ["create_app", "install_plugin"]
