"""Test fixtures — a fresh in-memory database per test.

Learn: Testing pattern for async SQLAlchemy + FastAPI:

1. Each test gets its own in-memory SQLite engine (StaticPool keeps the
   single connection alive, so every session sees the same database).
2. create_app() receives test Settings and that Database directly — no
   dependency overrides needed, the app factory is already injectable.
3. httpx's ASGITransport drives the app in-process.

Env defaults are set before anything imports inkpress.main, whose
module-level `app = create_app()` needs a signing secret.
"""

import os

os.environ.setdefault("INKPRESS_JWT_SECRET", "test-secret-0123456789abcdef0123456789")
os.environ.setdefault("INKPRESS_DATABASE_URL", "sqlite+aiosqlite://")
os.environ.setdefault("INKPRESS_BCRYPT_ROUNDS", "4")

import uuid

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy import event
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.pool import StaticPool

from inkpress.auth.jwt import TokenCodec
from inkpress.config import Settings
from inkpress.db.engine import Database
from inkpress.main import create_app

TEST_SECRET = "test-secret-0123456789abcdef0123456789"


@pytest.fixture()
def settings():
    return Settings(
        jwt_secret=TEST_SECRET,
        database_url="sqlite+aiosqlite://",
        bcrypt_rounds=4,
        create_schema=False,
    )


@pytest.fixture()
def codec(settings):
    return TokenCodec.from_settings(settings)


@pytest_asyncio.fixture()
async def database():
    engine = create_async_engine("sqlite+aiosqlite://", poolclass=StaticPool)
    db = Database("sqlite+aiosqlite://", engine=engine)
    await db.create_all()
    try:
        yield db
    finally:
        await db.dispose()


@pytest_asyncio.fixture()
async def db_session(database):
    """Plain session for service-level tests."""
    async with database.session_factory() as session:
        yield session


@pytest.fixture()
def sql_statements(database):
    """Every SQL statement the engine sends, in order.

    Learn: Hooks before_cursor_execute on the sync engine underneath the
    async one. Tests clear the list after setup, then assert on exactly
    what a single request ran.
    """
    statements: list[str] = []

    def record(conn, cursor, statement, parameters, context, executemany):
        statements.append(" ".join(statement.split()))

    event.listen(database.engine.sync_engine, "before_cursor_execute", record)
    yield statements
    event.remove(database.engine.sync_engine, "before_cursor_execute", record)


@pytest.fixture()
def app(settings, database):
    return create_app(settings, database=database)


@pytest_asyncio.fixture()
async def client(app):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture()
def make_user(client):
    """Sign up a fresh user; returns {"user", "token", "headers"}.

    Learn: Goes through the real signup endpoint, so the token is a
    real one issued by the app's codec.
    """

    async def _make(username=None, email=None, password="secret1"):
        run_id = uuid.uuid4().hex[:8]
        username = username or f"user-{run_id}"
        email = email or f"{username}@example.com"
        r = await client.post(
            "/api/auth/signup",
            json={"username": username, "email": email, "password": password},
        )
        assert r.status_code == 201, r.text
        body = r.json()
        body["headers"] = {"Authorization": f"Bearer {body['token']}"}
        return body

    return _make
