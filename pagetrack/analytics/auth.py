"""Derive the UserContext of a request from the host's authentication layer."""

from collections.abc import MutableMapping
from typing import Any

from .models import UserContext


def user_from_scope(scope: MutableMapping[str, Any]) -> UserContext:
    """Build a UserContext from an ASGI scope.

    Starlette's ``AuthenticationMiddleware`` stores ``user`` and ``auth`` in
    the scope. Without it every request is anonymous.
    """
    user = scope.get("user")
    if user is None or not getattr(user, "is_authenticated", False):
        return UserContext.anonymous()

    auth = scope.get("auth")
    scopes = frozenset(getattr(auth, "scopes", None) or ())
    username = getattr(user, "display_name", None) or getattr(user, "username", None)
    return UserContext(is_authenticated=True, username=username, scopes=scopes)
