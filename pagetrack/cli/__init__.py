"""Command line interface for pagetrack."""

from .main import app, main


__all__ = ["app", "main"]
