"""Analytics tracking snippet add-on.

- :class:`SettingsManager` reads, validates and writes the AnalyticsConfig
  record and renders the admin form.
- :class:`SnippetEmitter` decides, on every render, whether the tracking script
  is emitted.
- :class:`AnalyticsPlugin` ties both to the host app.
"""

from .models import AnalyticsConfig, UserContext
from .plugin import AnalyticsPlugin
from .settings_manager import SettingsManager
from .snippet import SnippetEmitter, render_tracking_script
from .store import (
    AnalyticsConfigStore,
    JsonFileOptionStore,
    MemoryOptionStore,
    OptionStore,
)


__all__ = [
    "AnalyticsConfig",
    "AnalyticsConfigStore",
    "AnalyticsPlugin",
    "JsonFileOptionStore",
    "MemoryOptionStore",
    "OptionStore",
    "SettingsManager",
    "SnippetEmitter",
    "UserContext",
    "render_tracking_script",
]
