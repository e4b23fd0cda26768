"""Analytics add-on configuration settings."""

from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, field_validator


class AnalyticsSettings(BaseModel):
    """Where the analytics record lives and how the add-on is exposed."""

    enabled: bool = Field(
        default=True,
        description="Install the analytics add-on into the host app",
    )

    store_path: Path | None = Field(
        default=Path("pagetrack-options.json"),
        description="JSON file holding the configuration store, relative to the working directory. An empty value keeps the record in memory",
    )

    record_key: str = Field(
        default="pagetrack_analytics",
        description="Name of the record inside the configuration store",
        min_length=1,
    )

    admin_prefix: str = Field(
        default="/admin/tools",
        description="Route prefix of the admin tools pages",
    )

    admin_scope: str = Field(
        default="admin",
        description="Authentication scope required to open the settings page",
    )

    instrument_admin: bool = Field(
        default=False,
        description="Inject the snippet into pages under the admin prefix as well",
    )

    locale: str = Field(
        default="en",
        description="Locale used for the settings page labels",
    )

    locale_dir: Path | None = Field(
        default=None,
        description="Directory holding <locale>/LC_MESSAGES/pagetrack.mo catalogs",
    )

    @field_validator("store_path", mode="before")
    @classmethod
    def empty_store_path_means_memory(cls, v: Any) -> Any:
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @field_validator("admin_prefix")
    @classmethod
    def normalize_admin_prefix(cls, v: str) -> str:
        """Ensure a leading slash and no trailing slash."""
        v = "/" + v.strip().strip("/")
        return "" if v == "/" else v
