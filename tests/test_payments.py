"""Tests for payment verifiers and the hosted payment link."""

from __future__ import annotations

import hashlib
import hmac
import json
import time

import pytest

from conftest import make_course
from services.errors import PaymentVerificationError
from services.payments import (
    CHECKOUT_COMPLETED,
    StripeWebhookVerifier,
    event_metadata,
    hosted_payment_url,
)

SECRET = "whsec_test"


def sign(payload: bytes, secret: str = SECRET) -> str:
    ts = int(time.time())
    signed = f"{ts}.".encode() + payload
    sig = hmac.new(secret.encode(), signed, hashlib.sha256).hexdigest()
    return f"t={ts},v1={sig}"


def completed_event(course_id="c1", device_id="dev1", status="paid", event_id="evt_1"):
    return {
        "id": event_id,
        "object": "event",
        "type": CHECKOUT_COMPLETED,
        "data": {
            "object": {
                "id": "cs_test_1",
                "object": "checkout.session",
                "payment_status": status,
                "metadata": {"course_id": course_id, "device_id": device_id},
            }
        },
    }


class TestStripeWebhookVerifier:
    def test_parse_valid_event(self):
        payload = json.dumps(completed_event()).encode()
        event = StripeWebhookVerifier(SECRET).parse_event(payload, sign(payload))
        assert event["type"] == CHECKOUT_COMPLETED
        assert event_metadata(event) == {"course_id": "c1", "device_id": "dev1"}

    def test_bad_signature_rejected(self):
        payload = json.dumps(completed_event()).encode()
        with pytest.raises(PaymentVerificationError):
            StripeWebhookVerifier(SECRET).parse_event(payload, sign(payload, "whsec_other"))

    def test_missing_secret_rejected(self):
        payload = json.dumps(completed_event()).encode()
        with pytest.raises(PaymentVerificationError):
            StripeWebhookVerifier("").parse_event(payload, sign(payload))

    def test_verify_checks_status_and_course(self):
        verifier = StripeWebhookVerifier(SECRET)
        assert verifier.verify("c1", completed_event()) is True
        assert verifier.verify("c2", completed_event()) is False
        assert verifier.verify("c1", completed_event(status="unpaid")) is False
        assert verifier.verify("c1", {**completed_event(), "type": "charge.refunded"}) is False
        assert verifier.verify("c1", None) is False


def test_hosted_payment_url_carries_merchant_and_price():
    url = hosted_payment_url("https://pay.example/payment/", "m-42", make_course("c1", price=49.99))
    assert url.startswith("https://pay.example/payment/?")
    assert "iid=m-42" in url
    assert "order_id=c1" in url
    assert "price_amount=49.99" in url
