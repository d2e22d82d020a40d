"""
Test configuration.

Environment is set before any `upitix` import because config is read at
import time. Tier capacities are kept tiny so sold-out paths are cheap to
reach.
"""
import os
import tempfile
from pathlib import Path

_TMP = Path(tempfile.mkdtemp(prefix="upitix-test-"))
SERVER_DB = _TMP / "server.db"

os.environ["DATABASE_URL"] = f"sqlite:///{SERVER_DB}"
os.environ["COUNTER_BACKEND"] = "pg"
os.environ["TIER_A_CAPACITY"] = "4"
os.environ["TIER_A_LOW_THRESHOLD"] = "2"
os.environ["TIER_A_LOW_PRICE"] = "500"
os.environ["TIER_A_HIGH_PRICE"] = "600"
os.environ["TIER_B_CAPACITY"] = "3"
os.environ["TIER_B_PRICE"] = "400"
os.environ["TIER_C_CAPACITY"] = "2"
os.environ["TIER_C_PRICE"] = "300"
os.environ["STRICT_CAPACITY"] = "1"
os.environ["VERIFY_STATUS"] = "PENDING"
os.environ["VERIFY_REQUIRE_EXISTING"] = "0"
os.environ["LOG_LEVEL"] = "WARNING"

from contextlib import asynccontextmanager  # noqa: E402

import pytest  # noqa: E402

from upitix.infra.sql import open_database  # noqa: E402
from upitix.model.counter import new_store  # noqa: E402
from upitix.model.db import Base  # noqa: E402
from upitix.model.payment import PaymentStore  # noqa: E402


def remove_sqlite(path: Path) -> None:
    for suffix in ("", "-wal", "-shm"):
        p = Path(str(path) + suffix)
        if p.exists():
            p.unlink()


class Stores:
    """Opens fresh sessions per use, the way request dependencies do."""

    def __init__(self, SessionAsync, gated):
        self.SessionAsync = SessionAsync
        self.gated = gated

    @asynccontextmanager
    async def counters(self):
        async with self.SessionAsync() as session:
            yield new_store(db=session, gated=self.gated, backend="pg")

    @asynccontextmanager
    async def payments(self):
        async with self.SessionAsync() as session:
            yield PaymentStore(db=session, gated=self.gated)


@pytest.fixture
async def bare_stores(tmp_path):
    """Schema only, no counter row."""
    db = await open_database(
        f"sqlite:///{tmp_path / 'test.db'}", Base.metadata
    )
    yield Stores(db.SessionAsync, db.gated)
    await db.close()


@pytest.fixture
async def stores(bare_stores):
    async with bare_stores.counters() as cs:
        await cs.ensure_initialized()
    return bare_stores


@pytest.fixture
def buyer():
    return {
        "ticketType": "A",
        "name": "Asha Raman",
        "dept": "CSE",
        "studentId": "SEC21CS042",
        "phone": "9876543210",
    }


@pytest.fixture
def client():
    """TestClient over a fresh server database; startup runs per test."""
    from fastapi.testclient import TestClient
    from upitix.server import app

    remove_sqlite(SERVER_DB)
    with TestClient(app, raise_server_exceptions=False) as c:
        yield c
    remove_sqlite(SERVER_DB)
