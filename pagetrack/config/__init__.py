"""Configuration module for pagetrack host applications."""

from .analytics import AnalyticsSettings
from .logging import LoggingSettings
from .security import SecuritySettings
from .server import ServerSettings
from .settings import ConfigurationError, Settings, get_settings


__all__ = [
    "AnalyticsSettings",
    "ConfigurationError",
    "LoggingSettings",
    "SecuritySettings",
    "ServerSettings",
    "Settings",
    "get_settings",
]
