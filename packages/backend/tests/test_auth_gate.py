"""Authentication gate tests.

Learn: The gate must reject badly shaped headers WITHOUT calling the
codec, and must give the same 401 for every token failure. A spy codec
swapped in through dependency_overrides lets us see whether verify()
ran at all.
"""

from datetime import datetime, timedelta, timezone

import pytest

from inkpress.auth.dependencies import get_token_codec, parse_bearer
from inkpress.auth.jwt import TokenCodec


class SpyCodec:
    def __init__(self, inner: TokenCodec):
        self.inner = inner
        self.calls = 0

    def verify(self, token: str) -> str:
        self.calls += 1
        return self.inner.verify(token)


@pytest.fixture
def spy(app, codec):
    spy = SpyCodec(codec)
    app.dependency_overrides[get_token_codec] = lambda: spy
    yield spy
    app.dependency_overrides.clear()


# ═══════════════════════════════════════════════════════════
# parse_bearer
# ═══════════════════════════════════════════════════════════


def test_parse_bearer_accepts_exact_form():
    assert parse_bearer("Bearer abc.def.ghi") == "abc.def.ghi"


@pytest.mark.parametrize(
    "header",
    [
        None,
        "",
        "abc.def.ghi",             # no scheme
        "bearer abc.def.ghi",      # wrong case
        "Token abc.def.ghi",       # wrong scheme
        "Bearer",                  # no token
        "Bearer ",                 # empty token
        "Bearer a b",              # three parts
        "Bearer  abc",             # double space → three parts
    ],
)
def test_parse_bearer_rejects_other_shapes(header):
    assert parse_bearer(header) is None


# ═══════════════════════════════════════════════════════════
# Gate behaviour over HTTP
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "headers",
    [
        {},
        {"Authorization": "abc.def.ghi"},
        {"Authorization": "Basic dXNlcjpwYXNz"},
        {"Authorization": "Bearer a b"},
    ],
)
async def test_bad_header_rejected_before_verification(client, spy, headers):
    r = await client.post(
        "/api/posts", json={"title": "T", "content": "C"}, headers=headers
    )
    assert r.status_code == 401
    assert r.json()["error"]["category"] == "unauthenticated"
    assert r.headers["WWW-Authenticate"] == "Bearer"
    assert spy.calls == 0


@pytest.mark.asyncio
async def test_well_formed_header_reaches_codec(client, spy):
    r = await client.get("/api/auth/me", headers={"Authorization": "Bearer nope"})
    assert r.status_code == 401
    assert spy.calls == 1


@pytest.mark.asyncio
async def test_token_failures_are_indistinguishable(client, codec, make_user):
    alice = await make_user()
    expired = codec.issue(
        alice["user"]["id"], now=datetime.now(timezone.utc) - timedelta(days=1)
    )
    forged = TokenCodec("some-other-secret-0123456789abcdefghij").issue(
        alice["user"]["id"]
    )

    bodies = []
    for token in (expired, forged, "not-a-jwt"):
        r = await client.get(
            "/api/auth/me", headers={"Authorization": f"Bearer {token}"}
        )
        assert r.status_code == 401
        bodies.append(r.json())

    assert bodies[0] == bodies[1] == bodies[2]


@pytest.mark.asyncio
async def test_valid_token_resolves_identity(client, make_user):
    alice = await make_user(username="alice")
    r = await client.get("/api/auth/me", headers=alice["headers"])
    assert r.status_code == 200
    assert r.json()["id"] == alice["user"]["id"]


@pytest.mark.asyncio
async def test_token_for_deleted_account(client, codec):
    """Valid signature, but no such user — still a 401."""
    token = codec.issue("00000000-0000-0000-0000-000000000099")
    r = await client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert r.status_code == 401
