"""Security configuration settings."""

from typing import Any

from pydantic import BaseModel, Field, SecretStr, field_validator


class SecuritySettings(BaseModel):
    """Security-specific configuration settings."""

    admin_token: SecretStr | None = Field(
        default=None,
        description="Token granting the admin scope in the standalone app, as a Bearer token or a Basic password (optional)",
    )

    admin_username: str = Field(
        default="admin",
        description="Username expected together with the admin token in Basic credentials",
        min_length=1,
    )

    form_secret: SecretStr | None = Field(
        default=None,
        description="Key signing admin form tokens. Defaults to the admin token, else a per-process random key",
    )

    @field_validator("admin_token", "form_secret", mode="before")
    @classmethod
    def validate_secret(cls, v: Any) -> Any:
        """Convert string values to SecretStr; empty strings mean unset."""
        if v is None or v == "":
            return None
        if isinstance(v, str):
            return SecretStr(v)
        return v

    def form_secret_value(self) -> str | None:
        """Key for admin form tokens, shared by every worker when configured."""
        if self.form_secret is not None:
            return self.form_secret.get_secret_value()
        if self.admin_token is not None:
            return "form:" + self.admin_token.get_secret_value()
        return None
