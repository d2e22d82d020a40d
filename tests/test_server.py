from unittest.mock import patch

import pytest

from qr_decode import decode_qr
from upitix.qr import parse_upi_uri


def test_healthz(client):
    assert client.get("/healthz").json() == {"ok": True}


def test_startup_initializes_counter(client):
    inv = client.get("/api/inventory").json()
    assert inv["A"] == {"sold": 0, "capacity": 4, "available": 4,
                        "price": 500}
    assert inv["B"]["price"] == 400
    assert inv["C"]["available"] == 2


def test_buy_ticket(client, buyer):
    r = client.post("/buy-ticket", json=buyer)
    assert r.status_code == 200
    body = r.json()
    assert set(body) == {"price", "qr", "paymentId"}
    assert body["price"] == 500
    assert body["qr"].startswith("data:image/png;base64,")
    assert client.get("/api/inventory").json()["A"]["sold"] == 1


def test_price_step_and_sold_out(client, buyer):
    prices = [client.post("/buy-ticket", json=buyer).json()["price"]
              for _ in range(4)]
    assert prices == [500, 500, 600, 600]

    r = client.post("/buy-ticket", json=buyer)
    assert r.status_code == 400
    assert r.json() == {"error": "Ticket A Sold Out"}
    inv = client.get("/api/inventory").json()["A"]
    assert inv["sold"] == 4
    assert inv["price"] is None


@pytest.mark.parametrize("change,error", [
    ({"name": ""}, "Missing user details"),
    ({"dept": None}, "Missing user details"),
    ({"phone": "12345"}, "Invalid phone number"),
    ({"ticketType": "Z"}, "Invalid ticket type"),
])
def test_buy_ticket_bad_input(client, buyer, change, error):
    buyer.update(change)
    r = client.post("/buy-ticket", json=buyer)
    assert r.status_code == 400
    assert r.json() == {"error": error}
    assert client.get("/api/inventory").json()["A"]["sold"] == 0


@pytest.mark.parametrize("body", ["not json", "[1, 2]"])
def test_non_object_body(client, body):
    r = client.post("/buy-ticket", content=body,
                    headers={"content-type": "application/json"})
    assert r.status_code == 400
    assert r.json() == {"error": "Invalid JSON body"}


def test_storage_failure_is_generic_500(client, buyer):
    async def boom(*args, **kwargs):
        raise RuntimeError("disk on fire")

    with patch("upitix.model.payment.PaymentStore.create_payment", boom):
        r = client.post("/buy-ticket", json=buyer)
    assert r.status_code == 500
    assert r.json() == {"error": "Server error"}
    # no compensation: the unit stays reserved
    assert client.get("/api/inventory").json()["A"]["sold"] == 1


def test_qr_carries_price(client, buyer):
    for tier, price in (("A", 500), ("B", 400), ("C", 300)):
        buyer["ticketType"] = tier
        body = client.post("/buy-ticket", json=buyer).json()
        assert body["price"] == price
        fields = parse_upi_uri(decode_qr(body["qr"]))
        assert fields == {
            "pa": "msram.8274@okicici",
            "pn": "TEDxSairam",
            "am": str(price),
            "cu": "INR",
            "tn": "TEDx Ticket",
        }


def test_failing_dependency_is_json_500(client, buyer):
    def broken_store(*args, **kwargs):
        raise RuntimeError("redis pool exhausted")

    with patch("upitix.server.new_store", broken_store):
        r = client.post("/buy-ticket", json=buyer)
        inv = client.get("/api/inventory")
    assert r.status_code == 500
    assert r.json() == {"error": "Server error"}
    assert inv.status_code == 500
    assert inv.json() == {"error": "Server error"}


def test_confirm_payment(client, buyer):
    pid = client.post("/buy-ticket", json=buyer).json()["paymentId"]
    r = client.post("/confirm-payment",
                    json={"paymentId": pid, "utr": "412345678901"})
    assert r.status_code == 200
    assert r.json() == {"message": "Payment submitted for verification"}


def test_confirm_unknown_payment_acknowledged(client):
    r = client.post("/confirm-payment",
                    json={"paymentId": "missing", "utr": "1"})
    assert r.status_code == 200
    assert r.json() == {"message": "Payment submitted for verification"}


@pytest.mark.parametrize("body", [{}, {"paymentId": "x"}, {"utr": "1"}])
def test_confirm_payment_missing_fields(client, body):
    r = client.post("/confirm-payment", json=body)
    assert r.status_code == 400
    assert r.json() == {"error": "Missing payment details"}


def test_confirm_unknown_payment_rejected_when_required(client, monkeypatch):
    monkeypatch.setattr("upitix.config.VERIFY_REQUIRE_EXISTING", True)
    r = client.post("/confirm-payment",
                    json={"paymentId": "missing", "utr": "1"})
    assert r.status_code == 404
    assert r.json() == {"error": "Payment not found"}


def test_confirm_known_payment_when_required(client, buyer, monkeypatch):
    monkeypatch.setattr("upitix.config.VERIFY_REQUIRE_EXISTING", True)
    pid = client.post("/buy-ticket", json=buyer).json()["paymentId"]
    r = client.post("/confirm-payment", json={"paymentId": pid, "utr": "7"})
    assert r.status_code == 200
