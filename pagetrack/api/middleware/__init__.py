"""Middleware and exception handlers of the host app."""

from .errors import setup_error_handlers


__all__ = ["setup_error_handlers"]
