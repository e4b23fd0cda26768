"""Tests for the admin token authentication backend."""

import base64

import pytest
from starlette.requests import HTTPConnection

from pagetrack.api.auth import AdminTokenBackend, basic_challenge


def basic(username, password):
    encoded = base64.b64encode(f"{username}:{password}".encode()).decode()
    return {"Authorization": f"Basic {encoded}"}


def connection(headers=None):
    raw = [(k.lower().encode(), v.encode()) for k, v in (headers or {}).items()]
    return HTTPConnection(
        {
            "type": "http",
            "method": "GET",
            "path": "/",
            "headers": raw,
            "query_string": b"",
            "client": ("127.0.0.1", 5000),
            "server": ("testserver", 80),
            "scheme": "http",
        }
    )


@pytest.mark.unit
class TestAdminTokenBackend:
    async def test_valid_token_grants_scope(self):
        backend = AdminTokenBackend("secret", scope="manage", username="owner")

        result = await backend.authenticate(
            connection({"Authorization": "Bearer secret"})
        )

        assert result is not None
        credentials, user = result
        assert credentials.scopes == ["authenticated", "manage"]
        assert user.is_authenticated
        assert user.display_name == "owner"

    async def test_scheme_is_case_insensitive(self):
        backend = AdminTokenBackend("secret")
        result = await backend.authenticate(
            connection({"Authorization": "bearer secret"})
        )
        assert result is not None

    @pytest.mark.parametrize(
        "headers",
        [
            {},
            {"Authorization": "Bearer wrong"},
            {"Authorization": "Basic c2VjcmV0"},
            {"Authorization": "Bearer"},
            {"Authorization": "Basic not base64!"},
            {"Authorization": 'Digest username="admin"'},
            basic("admin", "wrong"),
            basic("intruder", "secret"),
        ],
    )
    async def test_other_requests_stay_anonymous(self, headers):
        backend = AdminTokenBackend("secret")
        assert await backend.authenticate(connection(headers)) is None

    async def test_basic_credentials_grant_scope(self):
        backend = AdminTokenBackend("secret", scope="manage", username="owner")

        result = await backend.authenticate(connection(basic("owner", "secret")))

        assert result is not None
        credentials, user = result
        assert credentials.scopes == ["authenticated", "manage"]
        assert user.display_name == "owner"

    async def test_basic_password_may_contain_colons(self):
        backend = AdminTokenBackend("se:cr:et")
        result = await backend.authenticate(connection(basic("admin", "se:cr:et")))
        assert result is not None


@pytest.mark.unit
def test_basic_challenge_names_realm():
    assert basic_challenge() == 'Basic realm="pagetrack admin", charset="UTF-8"'
