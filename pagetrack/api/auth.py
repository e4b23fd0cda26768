"""Admin authentication for the standalone host app."""

import base64
import binascii
import secrets

from starlette.authentication import (
    AuthCredentials,
    AuthenticationBackend,
    BaseUser,
    SimpleUser,
)
from starlette.requests import HTTPConnection

from pagetrack.core.logging import get_logger


logger = get_logger(__name__)

BASIC_REALM = "pagetrack admin"


def basic_challenge(realm: str = BASIC_REALM) -> str:
    """``WWW-Authenticate`` value asking a browser for Basic credentials."""
    return f'Basic realm="{realm}", charset="UTF-8"'


class AdminTokenBackend(AuthenticationBackend):
    """Grants the admin scope to requests presenting the admin token.

    Two forms are accepted:

    - ``Authorization: Bearer <token>`` for scripts and API clients
    - HTTP Basic with ``username`` and the token as password, which browsers
      send after a ``401`` carrying :func:`basic_challenge`

    Requests without credentials stay anonymous. Wrong credentials are treated
    as anonymous as well, so public pages keep working for such visitors.
    """

    def __init__(self, token: str, scope: str = "admin", username: str = "admin"):
        self.token = token
        self.scope = scope
        self.username = username

    def _granted(self) -> tuple[AuthCredentials, BaseUser]:
        return AuthCredentials(["authenticated", self.scope]), SimpleUser(self.username)

    def _rejected(self, conn: HTTPConnection, scheme: str) -> None:
        logger.warning(
            "invalid_admin_credentials",
            scheme=scheme,
            path=conn.url.path,
            client_ip=conn.client.host if conn.client else "unknown",
        )

    async def authenticate(
        self, conn: HTTPConnection
    ) -> tuple[AuthCredentials, BaseUser] | None:
        authorization = conn.headers.get("authorization")
        if not authorization:
            return None

        scheme, _, credentials = authorization.partition(" ")
        scheme = scheme.lower()
        credentials = credentials.strip()
        if not credentials:
            return None

        if scheme == "bearer":
            if secrets.compare_digest(credentials.encode(), self.token.encode()):
                return self._granted()
            self._rejected(conn, scheme)
            return None

        if scheme == "basic":
            try:
                decoded = base64.b64decode(credentials, validate=True).decode("utf-8")
            except (binascii.Error, UnicodeDecodeError):
                self._rejected(conn, scheme)
                return None
            username, _, password = decoded.partition(":")
            username_ok = secrets.compare_digest(
                username.encode(), self.username.encode()
            )
            password_ok = secrets.compare_digest(password.encode(), self.token.encode())
            if username_ok and password_ok:
                return self._granted()
            self._rejected(conn, scheme)
            return None

        return None
