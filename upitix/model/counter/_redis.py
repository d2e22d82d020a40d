# model/counter/_redis.py
from __future__ import annotations
from typing import Dict, Optional
import redis.asyncio as redis

from ...errors import CounterUninitialized, InvalidInput


# ---- keys
COUNTER_KEY = "counters:tickets"
TIERS = ("A", "B", "C")

# HINCRBY guarded by the capacity; -1 = hash missing, -2 = tier full
LUA_INCR_BOUNDED = """
local v = redis.call('HGET', KEYS[1], ARGV[1])
if not v then return -1 end
if tonumber(v) >= tonumber(ARGV[2]) then return -2 end
return redis.call('HINCRBY', KEYS[1], ARGV[1], 1)
"""

# plain HINCRBY would silently create a missing hash
LUA_INCR = """
if redis.call('HEXISTS', KEYS[1], ARGV[1]) == 0 then return -1 end
return redis.call('HINCRBY', KEYS[1], ARGV[1], 1)
"""


def _check_tier(ticket_type: str) -> None:
    if ticket_type not in TIERS:
        raise InvalidInput("Invalid ticket type")


class CounterStore:
    def __init__(self, r: redis.Redis) -> None:
        self.r = r
        self._incr = r.register_script(LUA_INCR)
        self._incr_bounded = r.register_script(LUA_INCR_BOUNDED)

    async def ensure_initialized(self) -> bool:
        # HSETNX per field: never resets an existing count
        pipe = self.r.pipeline(transaction=True)
        for t in TIERS:
            pipe.hsetnx(COUNTER_KEY, t, 0)
        created = await pipe.execute()
        return any(created)

    async def snapshot(self) -> Optional[Dict[str, int]]:
        h = await self.r.hgetall(COUNTER_KEY)
        if not h:
            return None
        return {t: int(h.get(t, 0)) for t in TIERS}

    async def increment(self, ticket_type: str) -> int:
        _check_tier(ticket_type)
        res = int(await self._incr(keys=[COUNTER_KEY], args=[ticket_type]))
        if res == -1:
            raise CounterUninitialized()
        return res

    async def increment_bounded(
        self, ticket_type: str, limit: int
    ) -> Optional[int]:
        _check_tier(ticket_type)
        res = int(await self._incr_bounded(
            keys=[COUNTER_KEY], args=[ticket_type, limit]
        ))
        if res == -1:
            raise CounterUninitialized()
        if res == -2:
            return None
        return res
