"""pagetrack - analytics tracking snippet add-on for FastAPI sites."""

from ._version import __version__


__all__ = ["__version__"]
