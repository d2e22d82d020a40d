import pytest

from upitix.errors import InvalidInput
from upitix.validation import (
    TicketRequest, parse_ticket_request, parse_verification_request
)


def test_parse_ok(buyer):
    req = parse_ticket_request(buyer)
    assert req == TicketRequest(
        ticket_type="A",
        name="Asha Raman",
        dept="CSE",
        student_id="SEC21CS042",
        phone="9876543210",
    )


def test_strips_whitespace(buyer):
    buyer["name"] = "  Asha  "
    buyer["phone"] = " 9876543210 "
    req = parse_ticket_request(buyer)
    assert req.name == "Asha"
    assert req.phone == "9876543210"


def test_integer_phone_and_student_id_accepted(buyer):
    buyer["phone"] = 9876543210
    buyer["studentId"] = 4211
    req = parse_ticket_request(buyer)
    assert req.phone == "9876543210"
    assert req.student_id == "4211"


@pytest.mark.parametrize(
    "field", ["ticketType", "name", "dept", "studentId", "phone"]
)
def test_missing_field(buyer, field):
    del buyer[field]
    with pytest.raises(InvalidInput, match="Missing user details"):
        parse_ticket_request(buyer)


@pytest.mark.parametrize("value", ["", "   ", None, True, ["x"], {"a": 1}])
def test_blank_or_wrong_type_counts_as_missing(buyer, value):
    buyer["name"] = value
    with pytest.raises(InvalidInput, match="Missing user details"):
        parse_ticket_request(buyer)


@pytest.mark.parametrize("phone", [
    "5876543210",   # leading 5
    "987654321",    # 9 digits
    "98765432100",  # 11 digits
    "+919876543210",
    "98765 43210",
    "98765abcde",
])
def test_invalid_phone(buyer, phone):
    buyer["phone"] = phone
    with pytest.raises(InvalidInput, match="Invalid phone number"):
        parse_ticket_request(buyer)


@pytest.mark.parametrize("ticket_type", ["D", "a", "AB", "VIP"])
def test_invalid_ticket_type(buyer, ticket_type):
    buyer["ticketType"] = ticket_type
    with pytest.raises(InvalidInput, match="Invalid ticket type"):
        parse_ticket_request(buyer)


def test_verification_request():
    req = parse_verification_request({"paymentId": " abc ", "utr": 123456})
    assert req.payment_id == "abc"
    assert req.utr == "123456"


@pytest.mark.parametrize("payload", [
    {},
    {"paymentId": "abc"},
    {"utr": "123"},
    {"paymentId": "", "utr": "123"},
    {"paymentId": "abc", "utr": "  "},
])
def test_verification_missing(payload):
    with pytest.raises(InvalidInput, match="Missing payment details"):
        parse_verification_request(payload)
