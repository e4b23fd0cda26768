"""Data models of the analytics add-on."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from pagetrack.core.errors import AuthenticationError, AuthorizationError


TRUTHY_VALUES = frozenset({"1", "true", "on", "yes"})


def coerce_bool(value: Any) -> bool:
    """Normalize a loosely typed flag into a real boolean.

    Stored records and form submissions may carry ``"1"``, ``"on"``, ``1`` or
    ``True``; all of those are true. Anything unrecognized is false.
    """
    if isinstance(value, bool):
        return value
    if isinstance(value, int | float):
        return value == 1
    if isinstance(value, str):
        return value.strip().lower() in TRUTHY_VALUES
    return False


class AnalyticsConfig(BaseModel):
    """The persisted enable flag and tracking identifier."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    active: bool = Field(default=False, description="Emit the tracking snippet")
    tracking_id: str = Field(
        default="", description="Provider identifier, e.g. UA-#######-#"
    )

    @field_validator("active", mode="before")
    @classmethod
    def normalize_active(cls, v: Any) -> bool:
        return coerce_bool(v)

    @field_validator("tracking_id", mode="before")
    @classmethod
    def normalize_tracking_id(cls, v: Any) -> Any:
        if v is None:
            return ""
        if isinstance(v, int | float) and not isinstance(v, bool):
            return str(v)
        return v

    @property
    def is_enabled(self) -> bool:
        """True when a snippet may be emitted for anonymous visitors."""
        return self.active and bool(self.tracking_id)


class UserContext(BaseModel):
    """Who is looking at the page being rendered."""

    model_config = ConfigDict(frozen=True)

    is_authenticated: bool = False
    username: str | None = None
    scopes: frozenset[str] = frozenset()

    @classmethod
    def anonymous(cls) -> "UserContext":
        return cls()

    def has_scope(self, scope: str) -> bool:
        return scope in self.scopes

    def require_scope(self, scope: str) -> None:
        """Raise unless the user is logged in and holds ``scope``.

        Raises:
            AuthenticationError: If the user is anonymous
            AuthorizationError: If the user lacks ``scope``
        """
        if not self.is_authenticated:
            raise AuthenticationError("You need to log in to access this page.")
        if not self.has_scope(scope):
            raise AuthorizationError(
                "You do not have sufficient permissions to access this page."
            )
