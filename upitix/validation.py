from dataclasses import dataclass
from typing import Any, Dict

from .config import TICKET_TIERS
from .errors import InvalidInput
from .helpers import clean_str, is_valid_phone


@dataclass(frozen=True)
class TicketRequest:
    ticket_type: str
    name: str
    dept: str
    student_id: str
    phone: str


@dataclass(frozen=True)
class VerificationRequest:
    payment_id: str
    utr: str


def parse_ticket_request(payload: Dict[str, Any]) -> TicketRequest:
    req = TicketRequest(
        ticket_type=clean_str(payload.get("ticketType")),
        name=clean_str(payload.get("name")),
        dept=clean_str(payload.get("dept")),
        student_id=clean_str(payload.get("studentId"), allow_int=True),
        phone=clean_str(payload.get("phone"), allow_int=True),
    )
    if not all((req.ticket_type, req.name, req.dept, req.student_id,
                req.phone)):
        raise InvalidInput("Missing user details")
    if not is_valid_phone(req.phone):
        raise InvalidInput("Invalid phone number")
    if req.ticket_type not in TICKET_TIERS:
        raise InvalidInput("Invalid ticket type")
    return req


def parse_verification_request(payload: Dict[str, Any]) -> VerificationRequest:
    req = VerificationRequest(
        payment_id=clean_str(payload.get("paymentId")),
        utr=clean_str(payload.get("utr"), allow_int=True),
    )
    if not req.payment_id or not req.utr:
        raise InvalidInput("Missing payment details")
    return req
