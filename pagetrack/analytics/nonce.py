"""Anti-forgery tokens for the admin settings form."""

import hashlib
import hmac
import secrets
import time


class FormNonce:
    """Stateless tokens bound to an action and a username.

    A token is an HMAC over a time tick, the action and the username. It is
    accepted during the tick it was issued in and the following one, so it
    lives between ``lifetime / 2`` and ``lifetime`` seconds. Processes that
    share ``secret`` accept each other's tokens.
    """

    def __init__(self, secret: bytes | str | None = None, lifetime: int = 86400):
        if secret is None:
            secret = secrets.token_bytes(32)
        elif isinstance(secret, str):
            secret = secret.encode("utf-8")
        self._secret = secret
        self.lifetime = lifetime

    def _tick(self, now: float | None = None) -> int:
        now = time.time() if now is None else now
        return int(now // max(self.lifetime / 2, 1))

    def _digest(self, tick: int, action: str, username: str | None) -> str:
        message = f"{tick}|{action}|{username or ''}".encode()
        return hmac.new(self._secret, message, hashlib.sha256).hexdigest()[:32]

    def create(self, action: str, username: str | None, now: float | None = None) -> str:
        return self._digest(self._tick(now), action, username)

    def verify(
        self,
        token: str | None,
        action: str,
        username: str | None,
        now: float | None = None,
    ) -> bool:
        if not token:
            return False
        tick = self._tick(now)
        candidate = token.encode("utf-8")
        return any(
            hmac.compare_digest(candidate, self._digest(t, action, username).encode())
            for t in (tick, tick - 1)
        )
