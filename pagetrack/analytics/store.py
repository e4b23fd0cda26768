"""Configuration store for the analytics add-on.

The host keeps named records in a key-value option store. The add-on owns one
record in it, read and written through :class:`AnalyticsConfigStore`.
"""

import asyncio
import contextlib
import copy
import json
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from pagetrack.core.errors import ConfigInvalidError, ConfigStoreError
from pagetrack.core.logging import get_logger

from .models import AnalyticsConfig


logger = get_logger(__name__)


class OptionStore(ABC):
    """Abstract interface for the host's key-value option store."""

    @abstractmethod
    async def get_option(self, key: str) -> Any | None:
        """Return the value stored under ``key`` or None when absent."""
        pass

    @abstractmethod
    async def set_option(self, key: str, value: Any) -> None:
        """Store ``value`` under ``key``, replacing any previous value."""
        pass

    @abstractmethod
    async def delete_option(self, key: str) -> bool:
        """Remove ``key``. Returns False when it was not stored."""
        pass

    @abstractmethod
    def get_location(self) -> str:
        """Human-readable description of where options are kept."""
        pass


class MemoryOptionStore(OptionStore):
    """Option store living in process memory, for tests and ephemeral sites."""

    def __init__(self, initial: dict[str, Any] | None = None):
        self._options: dict[str, Any] = copy.deepcopy(initial or {})

    async def get_option(self, key: str) -> Any | None:
        return copy.deepcopy(self._options.get(key))

    async def set_option(self, key: str, value: Any) -> None:
        self._options[key] = copy.deepcopy(value)

    async def delete_option(self, key: str) -> bool:
        return self._options.pop(key, None) is not None

    def get_location(self) -> str:
        return "memory"


class JsonFileOptionStore(OptionStore):
    """Option store backed by a single JSON object on disk.

    Every write rewrites the whole file atomically: the new content goes to a
    temporary sibling which then replaces the target.
    """

    def __init__(self, file_path: Path):
        """Initialize JSON option storage.

        Args:
            file_path: Path to the JSON file holding all options
        """
        self.file_path = Path(file_path)

    async def _read_json(self) -> dict[str, Any]:
        """Read the options object, or an empty dict when the file is missing.

        Raises:
            ConfigInvalidError: If the file is not a JSON object
            ConfigStoreError: If the file cannot be read
        """

        def read_file() -> Any:
            with self.file_path.open("r", encoding="utf-8") as f:
                return json.load(f)

        try:
            data = await asyncio.to_thread(read_file)
        except FileNotFoundError:
            return {}
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            logger.error(
                "json_decode_error",
                path=str(self.file_path),
                error=str(e),
                exc_info=e,
            )
            raise ConfigInvalidError(f"Invalid JSON in {self.file_path}: {e}") from e
        except PermissionError as e:
            logger.error(
                "permission_denied",
                path=str(self.file_path),
                error=str(e),
                exc_info=e,
            )
            raise ConfigStoreError(f"Permission denied: {self.file_path}") from e
        except OSError as e:
            logger.error(
                "file_read_error",
                path=str(self.file_path),
                error=str(e),
                exc_info=e,
            )
            raise ConfigStoreError(f"Error reading {self.file_path}: {e}") from e

        if not isinstance(data, dict):
            raise ConfigInvalidError(
                f"Expected a JSON object in {self.file_path}, got {type(data).__name__}"
            )
        return data

    async def _write_json(self, data: dict[str, Any]) -> None:
        """Write the options object atomically.

        Raises:
            ConfigStoreError: If the file cannot be written
        """
        temp_path = self.file_path.with_suffix(self.file_path.suffix + ".tmp")

        def write_file() -> None:
            self.file_path.parent.mkdir(parents=True, exist_ok=True)
            with temp_path.open("w", encoding="utf-8") as f:
                json.dump(data, f, indent=2, sort_keys=True)
            temp_path.chmod(0o600)
            temp_path.replace(self.file_path)

        try:
            await asyncio.to_thread(write_file)
            logger.debug("json_write_success", path=str(self.file_path))
        except (TypeError, ValueError) as e:
            logger.error(
                "json_encode_error",
                path=str(self.file_path),
                error=str(e),
                exc_info=e,
            )
            raise ConfigStoreError(f"Failed to encode JSON: {e}") from e
        except PermissionError as e:
            logger.error(
                "permission_denied",
                path=str(self.file_path),
                error=str(e),
                exc_info=e,
            )
            raise ConfigStoreError(f"Permission denied: {self.file_path}") from e
        except OSError as e:
            logger.error(
                "file_write_error",
                path=str(self.file_path),
                error=str(e),
                exc_info=e,
            )
            raise ConfigStoreError(f"Error writing {self.file_path}: {e}") from e
        finally:
            if temp_path.exists():
                with contextlib.suppress(OSError):
                    temp_path.unlink()

    async def get_option(self, key: str) -> Any | None:
        data = await self._read_json()
        return data.get(key)

    async def set_option(self, key: str, value: Any) -> None:
        data = await self._read_json()
        data[key] = value
        await self._write_json(data)

    async def delete_option(self, key: str) -> bool:
        data = await self._read_json()
        if key not in data:
            return False
        del data[key]
        await self._write_json(data)
        return True

    def get_location(self) -> str:
        return str(self.file_path)


class AnalyticsConfigStore:
    """Reads and writes the AnalyticsConfig record of an option store."""

    def __init__(self, options: OptionStore, key: str = "pagetrack_analytics"):
        self.options = options
        self.key = key

    async def get(self) -> AnalyticsConfig:
        """Return the stored record, or the inactive default when absent.

        A record that is present but unusable (not an object, or failing
        validation) is logged and read as the default as well.
        """
        raw = await self.options.get_option(self.key)
        if raw is None:
            return AnalyticsConfig()
        if not isinstance(raw, dict):
            logger.warning(
                "analytics_config_unexpected_shape",
                key=self.key,
                location=self.options.get_location(),
                value_type=type(raw).__name__,
            )
            return AnalyticsConfig()
        try:
            return AnalyticsConfig.model_validate(raw)
        except ValidationError as e:
            logger.warning(
                "analytics_config_invalid",
                key=self.key,
                location=self.options.get_location(),
                error=str(e),
            )
            return AnalyticsConfig()

    async def set(self, config: AnalyticsConfig) -> AnalyticsConfig:
        """Persist ``config`` and return the record as read back from the store."""
        await self.options.set_option(self.key, config.model_dump(mode="json"))
        logger.info(
            "analytics_config_saved",
            key=self.key,
            location=self.options.get_location(),
            active=config.active,
            tracking_id=config.tracking_id,
        )
        return await self.get()

    async def delete(self) -> bool:
        """Remove the record. Only meant for uninstalling the add-on."""
        deleted = await self.options.delete_option(self.key)
        if deleted:
            logger.info("analytics_config_deleted", key=self.key)
        return deleted


def create_option_store(store_path: Path | None) -> OptionStore:
    """Build the option store for ``store_path`` (in memory when None)."""
    if store_path is None:
        return MemoryOptionStore()
    return JsonFileOptionStore(store_path)
