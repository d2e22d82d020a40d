"""
Ticket allocation: validate, price, reserve one unit, record the payment.

The sold count is the only gate on availability and price. The price is
first decided from a snapshot of the counter; the reservation itself is a
single storage-side increment.

- strict (default): the increment is bounded by the tier capacity and the
  final price is re-derived from the slot actually reserved, so concurrent
  buyers can never push a tier past its capacity.
- legacy: unconditional increment at the snapshot price. Requests racing
  between snapshot and increment may overallocate by a few units.

There is no compensation step: if the payment insert fails after the
increment, the unit stays consumed.
"""
from __future__ import annotations
from typing import Any, Dict

from . import config
from .config import TierConfig
from .errors import CounterUninitialized, SoldOut
from .infra.logging import logger
from .model.counter import CounterStore
from .model.payment import PaymentStore
from .pricing import price_for
from .qr import build_upi_uri, qr_data_uri
from .validation import TicketRequest


async def reserve(
    counters: CounterStore,
    tier: TierConfig,
    strict: bool = config.STRICT_CAPACITY,
) -> int:
    """Reserve one unit of `tier`. Returns the price of the reserved slot."""
    snap = await counters.snapshot()
    if snap is None:
        raise CounterUninitialized()

    price = price_for(tier, snap[tier.name])
    if price is None:
        raise SoldOut(tier.name)

    if not strict:
        await counters.increment(tier.name)
        return price

    new_sold = await counters.increment_bounded(tier.name, tier.capacity)
    if new_sold is None:
        # lost the race for the last units
        raise SoldOut(tier.name)
    # bounded increment guarantees new_sold <= capacity
    return price_for(tier, new_sold - 1)


async def request_ticket(
    counters: CounterStore,
    payments: PaymentStore,
    req: TicketRequest,
    *,
    tiers: Dict[str, TierConfig] = config.TICKET_TIERS,
    strict: bool = config.STRICT_CAPACITY,
) -> Dict[str, Any]:
    tier = tiers[req.ticket_type]
    try:
        price = await reserve(counters, tier, strict=strict)
    except SoldOut:
        logger.info(f"tier {tier.name} sold out, rejecting {req.student_id}")
        raise

    try:
        payment_id = await payments.create_payment(
            name=req.name,
            dept=req.dept,
            student_id=req.student_id,
            phone=req.phone,
            ticket_type=req.ticket_type,
            price=price,
            currency=config.UPI_CURRENCY,
        )
    except Exception:
        logger.exception(
            f"payment insert failed after reserving tier {tier.name}; "
            "counter is ahead of payments by one"
        )
        raise
    logger.info(
        f"payment {payment_id} created: tier={tier.name} price={price} "
        f"student={req.student_id}"
    )

    qr = qr_data_uri(build_upi_uri(price))
    return {
        "price": price,
        "qr": qr,
        "paymentId": payment_id,
    }
