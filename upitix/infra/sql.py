# infra/sql.py
"""
SQL storage bootstrap: one async engine, its session factory and the gate
every store wraps its transactions in.

`open_database` is the only entry point. It refuses to hand out a
`Database` until the server has answered and the schema exists, which is
what lets startup fail fast instead of on the first purchase.
"""
from __future__ import annotations
import asyncio
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import AsyncContextManager, Callable, Optional

from sqlalchemy import MetaData, event, text
from sqlalchemy.ext.asyncio import (
    create_async_engine, async_sessionmaker, AsyncEngine, AsyncSession
)

Gated = Callable[[], AsyncContextManager[None]]

# scheme prefix -> async driver
ASYNC_DRIVERS = {
    "sqlite://": "sqlite+aiosqlite://",
    "postgresql://": "postgresql+asyncpg://",
    "postgres://": "postgresql+asyncpg://",  # heroku-style
}


def normalize_async_url(url: str) -> str:
    for prefix, driver in ASYNC_DRIVERS.items():
        if url.startswith(prefix):
            return driver + url[len(prefix):]
    return url


def _semaphore_gate(limit: int) -> Gated:
    sem = asyncio.Semaphore(max(1, limit))

    @asynccontextmanager
    async def gated():
        async with sem:
            yield

    return gated


@dataclass
class Database:
    engine: AsyncEngine
    SessionAsync: async_sessionmaker
    gated: Gated

    async def close(self) -> None:
        await self.engine.dispose()


async def open_database(
    database_url: str,
    metadata: MetaData,
    *,
    pool_size: Optional[int] = None,
    gate_limit: Optional[int] = None,
) -> Database:
    """
    Connect, verify the server answers and create missing tables.

    Postgres gets a pool of `pool_size` connections and the gate defaults to
    the same number, so concurrent purchases queue on the gate instead of
    timing out in the pool. SQLite runs in WAL mode with a busy timeout so
    concurrent counter increments wait for the write lock.
    """
    db_url = normalize_async_url(database_url)
    kw = dict(pool_pre_ping=True)
    if db_url.startswith("postgresql+asyncpg://") and pool_size:
        kw.update(pool_size=pool_size, max_overflow=0)

    engine = create_async_engine(db_url, **kw)

    if db_url.startswith("sqlite+aiosqlite://"):
        @event.listens_for(engine.sync_engine, "connect")
        def _sqlite_pragmas(dbapi_connection, _):
            cur = dbapi_connection.cursor()
            cur.execute("PRAGMA journal_mode=WAL;")
            cur.execute("PRAGMA busy_timeout=5000;")
            cur.close()

    try:
        async with engine.begin() as conn:
            await conn.execute(text("SELECT 1"))
            await conn.run_sync(metadata.create_all)
    except Exception:
        await engine.dispose()
        raise

    SessionAsync = async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )
    limit = gate_limit or pool_size or 10
    return Database(engine, SessionAsync, _semaphore_gate(limit))
