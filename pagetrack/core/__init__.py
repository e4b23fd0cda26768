"""Core building blocks shared by every pagetrack module."""

from pagetrack._version import __version__

from .errors import (
    AuthenticationError,
    AuthorizationError,
    ConfigInvalidError,
    ConfigStoreError,
    PageTrackError,
)
from .logging import get_logger, setup_logging


__all__ = [
    "__version__",
    "AuthenticationError",
    "AuthorizationError",
    "ConfigInvalidError",
    "ConfigStoreError",
    "PageTrackError",
    "get_logger",
    "setup_logging",
]
