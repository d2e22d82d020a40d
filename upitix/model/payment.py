# model/payment.py
from __future__ import annotations
from typing import Any, Dict, Optional
import uuid

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from ..helpers import now_ts
from ..infra.sql import Gated
from .db import Payment, STATUS_PENDING


class PaymentStore:
    def __init__(self, *, db: AsyncSession, gated: Gated) -> None:
        self.db = db
        self.gated = gated

    async def create_payment(
        self,
        *,
        name: str,
        dept: str,
        student_id: str,
        phone: str,
        ticket_type: str,
        price: int,
        currency: str = "INR",
    ) -> str:
        payment_id = uuid.uuid4().hex
        async with self.gated():
            async with self.db.begin():
                self.db.add(Payment(
                    id=payment_id,
                    name=name,
                    dept=dept,
                    student_id=student_id,
                    phone=phone,
                    ticket_type=ticket_type,
                    price=price,
                    currency=currency,
                    status=STATUS_PENDING,
                    created_at=now_ts(),
                ))
        return payment_id

    async def submit_utr(
        self, payment_id: str, utr: str, status: str = STATUS_PENDING
    ) -> bool:
        """
        Attach the buyer's UTR and set `status`.
        Returns False when no payment has that id (nothing is written).
        """
        async with self.gated():
            async with self.db.begin():
                res = await self.db.execute(text("""
                    UPDATE payments
                    SET utr = :utr, status = :status, submitted_at = :ts
                    WHERE id = :id
                """), {
                    "utr": utr,
                    "status": status,
                    "ts": now_ts(),
                    "id": payment_id,
                })
        return res.rowcount > 0

    async def get_payment(self, payment_id: str) -> Optional[Dict[str, Any]]:
        async with self.gated():
            async with self.db.begin():
                result = await self.db.execute(text("""
                    SELECT id, name, dept, student_id, phone, ticket_type,
                           price, currency, utr, status, created_at,
                           submitted_at
                    FROM payments WHERE id = :id
                """), {"id": payment_id})
                row = result.mappings().first()
        return dict(row) if row else None

    async def count_payments(self, ticket_type: Optional[str] = None) -> int:
        sql = "SELECT COUNT(*) FROM payments"
        params: Dict[str, Any] = {}
        if ticket_type is not None:
            sql += " WHERE ticket_type = :t"
            params["t"] = ticket_type
        async with self.gated():
            async with self.db.begin():
                n = (await self.db.execute(text(sql), params)).scalar_one()
        return int(n)
