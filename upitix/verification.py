from __future__ import annotations
from typing import Dict

from . import config
from .errors import PaymentNotFound
from .infra.logging import logger
from .model.payment import PaymentStore
from .validation import VerificationRequest

ACK_MESSAGE = "Payment submitted for verification"


async def submit_verification(
    payments: PaymentStore,
    req: VerificationRequest,
    *,
    status: str = config.VERIFY_STATUS,
    require_existing: bool = config.VERIFY_REQUIRE_EXISTING,
) -> Dict[str, str]:
    """
    Attach the buyer's UTR to a payment.

    The status written is `status` (PENDING unless configured otherwise):
    confirmation happens out of band once someone has matched the UTR against
    the bank statement. Unknown payment ids are acknowledged like known ones
    unless `require_existing` is set.
    """
    updated = await payments.submit_utr(req.payment_id, req.utr, status)
    if not updated:
        if require_existing:
            raise PaymentNotFound(req.payment_id)
        logger.warning(f"UTR submitted for unknown payment {req.payment_id}")
    else:
        logger.info(f"UTR received for payment {req.payment_id}")
    return {"message": ACK_MESSAGE}
