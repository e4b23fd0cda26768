"""Exception hierarchy for pagetrack."""

from typing import Any


class PageTrackError(Exception):
    """Base exception for pagetrack errors."""

    def __init__(
        self,
        message: str,
        error_type: str = "internal_server_error",
        status_code: int = 500,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.error_type = error_type
        self.status_code = status_code
        self.details = details or {}


class ConfigStoreError(PageTrackError):
    """Raised when the configuration store cannot be read or written."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(
            message=message,
            error_type="config_store_error",
            status_code=500,
            details=details,
        )


class ConfigInvalidError(ConfigStoreError):
    """Raised when the stored record exists but cannot be parsed."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message=message, details=details)
        self.error_type = "config_invalid_error"


class AuthorizationError(PageTrackError):
    """Permission error (403)."""

    def __init__(self, message: str = "Permission denied") -> None:
        super().__init__(
            message=message, error_type="permission_error", status_code=403
        )


class AuthenticationError(PageTrackError):
    """Authentication error (401)."""

    def __init__(self, message: str = "Authentication required") -> None:
        super().__init__(
            message=message, error_type="authentication_error", status_code=401
        )
