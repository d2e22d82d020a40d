# model/counter/_postgres.py
"""
SQL ticket counter: one row in `ticket_counters` (id = 1) holding the sold
count of every tier.

Every reservation is a single UPDATE ... RETURNING, so concurrent increments
never lose updates. The bounded variant folds the capacity check into the
same statement (compare-and-increment).
"""
from __future__ import annotations
from typing import Dict, Optional

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from ...errors import CounterUninitialized, InvalidInput
from ...infra.sql import Gated

COUNTER_ID = 1

# fixed mapping, never built from user input
COLUMNS = {"A": "sold_a", "B": "sold_b", "C": "sold_c"}


def _column(ticket_type: str) -> str:
    try:
        return COLUMNS[ticket_type]
    except KeyError:
        raise InvalidInput("Invalid ticket type")


class CounterStore:
    def __init__(self, *, db: AsyncSession, gated: Gated) -> None:
        self.db = db
        self.gated = gated

    async def ensure_initialized(self) -> bool:
        """Create the all-zero counter row if absent. True if created."""
        async with self.gated():
            async with self.db.begin():
                res = await self.db.execute(text("""
                    INSERT INTO ticket_counters (id, sold_a, sold_b, sold_c)
                    VALUES (:id, 0, 0, 0)
                    ON CONFLICT (id) DO NOTHING
                """), {"id": COUNTER_ID})
        return res.rowcount == 1

    async def snapshot(self) -> Optional[Dict[str, int]]:
        async with self.gated():
            async with self.db.begin():
                row = (await self.db.execute(text("""
                    SELECT sold_a, sold_b, sold_c
                    FROM ticket_counters WHERE id = :id
                """), {"id": COUNTER_ID})).first()
        if row is None:
            return None
        return {"A": int(row[0]), "B": int(row[1]), "C": int(row[2])}

    async def increment(self, ticket_type: str) -> int:
        """Unconditional atomic +1. Returns the new sold count."""
        col = _column(ticket_type)
        async with self.gated():
            async with self.db.begin():
                row = (await self.db.execute(text(f"""
                    UPDATE ticket_counters SET {col} = {col} + 1
                    WHERE id = :id
                    RETURNING {col}
                """), {"id": COUNTER_ID})).first()
        if row is None:
            raise CounterUninitialized()
        return int(row[0])

    async def increment_bounded(
        self, ticket_type: str, limit: int
    ) -> Optional[int]:
        """
        Atomic +1 only while the sold count is below `limit`.
        Returns the new sold count, or None when the tier is full.
        """
        col = _column(ticket_type)
        async with self.gated():
            async with self.db.begin():
                row = (await self.db.execute(text(f"""
                    UPDATE ticket_counters SET {col} = {col} + 1
                    WHERE id = :id AND {col} < :limit
                    RETURNING {col}
                """), {"id": COUNTER_ID, "limit": limit})).first()
        if row is None:
            return None
        return int(row[0])
