"""Async SQLAlchemy engine and session factory.

Learn: SQLAlchemy 2.0 async mode — create_async_engine for connection pooling,
AsyncSession for per-request database access, dependency injection via FastAPI.

The Database object is built once by create_app() from Settings and kept
on app.state; get_db() pulls it from there. Nothing here reads env vars
or holds a module-level engine, so tests can point an app at an
in-memory SQLite database without monkeypatching.
"""

from typing import AsyncIterator, Optional

from fastapi import Request
from sqlalchemy import event, text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from inkpress.db.models import Base


def _sqlite_foreign_keys(dbapi_conn, _record) -> None:
    # SQLite ships with FK enforcement off.
    cursor = dbapi_conn.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


class Database:
    """Owns the engine and hands out sessions."""

    def __init__(self, url: str, *, echo: bool = False, engine: Optional[AsyncEngine] = None):
        if engine is None:
            kwargs = {}
            # Connection pool: min 5, max 20 connections (Postgres only;
            # SQLite uses its own pool classes).
            if url.startswith("postgresql"):
                kwargs.update(pool_size=5, max_overflow=15, pool_pre_ping=True)
            engine = create_async_engine(url, echo=echo, **kwargs)
        if engine.dialect.name == "sqlite":
            event.listen(engine.sync_engine, "connect", _sqlite_foreign_keys)
        self.engine = engine
        # Session factory: each request gets its own session.
        self.session_factory = async_sessionmaker(
            engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

    async def create_all(self) -> None:
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def ping(self) -> None:
        """Round-trip a trivial query; raises if the database is unreachable."""
        async with self.engine.connect() as conn:
            await conn.execute(text("SELECT 1"))

    async def dispose(self) -> None:
        await self.engine.dispose()


def get_database(request: Request) -> Database:
    return request.app.state.db


async def get_db(request: Request) -> AsyncIterator[AsyncSession]:
    """FastAPI dependency — yields a session per request, auto-closes.

    Anything left uncommitted when the handler raises is rolled back.
    """
    database: Database = request.app.state.db
    async with database.session_factory() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()
