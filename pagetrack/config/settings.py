import os
import tomllib
from functools import lru_cache
from pathlib import Path
from typing import Any

from pydantic import Field, ValidationError, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from pagetrack.core.logging import get_logger

from .analytics import AnalyticsSettings
from .logging import LoggingSettings
from .security import SecuritySettings
from .server import ServerSettings


__all__ = ["Settings", "ConfigurationError", "get_settings"]

DEFAULT_CONFIG_FILENAMES = (".pagetrack.toml", "pagetrack.toml")


class ConfigurationError(Exception):
    """Raised when configuration loading or validation fails."""

    pass


def _deep_merge(base: dict[str, Any], overrides: dict[str, Any]) -> dict[str, Any]:
    merged = dict(base)
    for key, value in overrides.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def find_toml_config_file() -> Path | None:
    """Return the first default config file found in the working directory."""
    for name in DEFAULT_CONFIG_FILENAMES:
        candidate = Path.cwd() / name
        if candidate.is_file():
            return candidate
    return None


class Settings(BaseSettings):
    """
    Configuration settings for a pagetrack host application.

    Settings are loaded from environment variables, .env files, and TOML configuration files.
    Environment variables take precedence over TOML values. Nested values use a
    double underscore, e.g. ``ANALYTICS__STORE_PATH=/var/lib/site/options.json``.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        env_nested_delimiter="__",
    )

    server: ServerSettings = Field(
        default_factory=ServerSettings,
        description="Server configuration settings",
    )

    logging: LoggingSettings = Field(
        default_factory=LoggingSettings,
        description="Logging configuration",
    )

    security: SecuritySettings = Field(
        default_factory=SecuritySettings,
        description="Security configuration settings",
    )

    analytics: AnalyticsSettings = Field(
        default_factory=AnalyticsSettings,
        description="Analytics add-on configuration",
    )

    @model_validator(mode="after")
    def check_store_is_shared_by_workers(self) -> "Settings":
        """Several worker processes cannot share an in-memory record."""
        if (
            self.server.workers > 1
            and self.analytics.enabled
            and self.analytics.store_path is None
        ):
            raise ValueError(
                "server.workers > 1 requires analytics.store_path: each worker "
                "would keep its own in-memory analytics settings"
            )
        return self

    @property
    def server_url(self) -> str:
        """Get the complete server URL."""
        return f"http://{self.server.host}:{self.server.port}"

    @property
    def settings_page_url(self) -> str:
        """Absolute URL of the analytics settings page."""
        return f"{self.server_url}{self.analytics.admin_prefix}/analytics"

    @classmethod
    def load_toml_config(cls, toml_path: Path) -> dict[str, Any]:
        """Load configuration from a TOML file."""
        try:
            with toml_path.open("rb") as f:
                return tomllib.load(f)
        except OSError as e:
            raise ConfigurationError(
                f"Cannot read TOML config file {toml_path}: {e}"
            ) from e
        except tomllib.TOMLDecodeError as e:
            raise ConfigurationError(f"Invalid TOML syntax in {toml_path}: {e}") from e

    @classmethod
    def from_config(
        cls, config_path: Path | str | None = None, **overrides: Any
    ) -> "Settings":
        """Create Settings from a TOML file, the environment and explicit overrides.

        Precedence, highest first: ``overrides``, environment / .env, TOML file,
        field defaults.
        """
        if config_path is None:
            config_path_env = os.environ.get("CONFIG_FILE")
            if config_path_env:
                config_path = Path(config_path_env)

        if isinstance(config_path, str):
            config_path = Path(config_path)

        if config_path is None:
            config_path = find_toml_config_file()

        config_data: dict[str, Any] = {}
        if config_path is not None:
            if not config_path.exists():
                raise ConfigurationError(f"Config file not found: {config_path}")
            suffix = config_path.suffix.lower()
            if suffix != ".toml":
                raise ConfigurationError(
                    f"Unsupported config file format: {suffix}. "
                    "Only TOML (.toml) files are supported."
                )
            config_data = cls.load_toml_config(config_path)
            get_logger(__name__).info(
                "config_file_loaded", path=str(config_path), category="config"
            )

        try:
            from_env = cls().model_dump(exclude_unset=True)
            merged = _deep_merge(_deep_merge(config_data, from_env), overrides)
            return cls(**merged)
        except ValidationError as e:
            raise ConfigurationError(f"Invalid configuration: {e}") from e


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get the process-wide settings instance.

    Tests and app factories that need different values should build their own
    ``Settings`` and pass it explicitly instead of relying on this cache.
    """
    return Settings.from_config()
