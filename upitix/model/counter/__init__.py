# model/counter/__init__.py
from typing import Optional, Union
from sqlalchemy.ext.asyncio import AsyncSession
import redis.asyncio as redis

from ...config import COUNTER_BACKEND
from ...infra.sql import Gated
from ._postgres import CounterStore as PgCounterStore
from ._redis import CounterStore as RedisCounterStore

CounterStore = Union[PgCounterStore, RedisCounterStore]


# Factory keeps server.py simple and constructor-agnostic:
def new_store(*, db: Optional[AsyncSession] = None,
              r: Optional[redis.Redis] = None,
              gated: Optional[Gated] = None,
              backend: str = COUNTER_BACKEND) -> CounterStore:
    if backend == "pg":
        if db is None:
            raise RuntimeError("CounterStore(pg) requires db=AsyncSession")
        if gated is None:
            raise RuntimeError("CounterStore(pg) requires gated=Gated")
        return PgCounterStore(db=db, gated=gated)
    if backend == "redis":
        if r is None:
            raise RuntimeError("CounterStore(redis) requires r=redis.Redis")
        return RedisCounterStore(r)
    raise RuntimeError(f"unknown COUNTER_BACKEND: {backend!r}")


__all__ = ["CounterStore", "PgCounterStore", "RedisCounterStore", "new_store"]
