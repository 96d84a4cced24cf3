# services/payments.py
"""
付款確認的信任邊界。

- ManualPaymentVerifier：demo 用，按下「模擬付款成功」就算數，不做任何驗證。
- StripeWebhookVerifier：正式環境用，驗 Stripe 簽章與事件內容。
"""
from __future__ import annotations

import json
import logging
from typing import Any, Dict, Mapping, Optional, Protocol
from urllib.parse import urlencode

import stripe

from models.catalog import Course
from services.errors import PaymentVerificationError

logger = logging.getLogger(__name__)

# 固定 API 版本
stripe.api_version = "2024-10-28.acacia"

_stripe_error = getattr(stripe, "error", None)
SignatureVerificationError = (
    getattr(stripe, "SignatureVerificationError", None)
    or getattr(_stripe_error, "SignatureVerificationError", Exception)
)
StripeError = getattr(stripe, "StripeError", None) or getattr(_stripe_error, "StripeError", Exception)

CHECKOUT_COMPLETED = "checkout.session.completed"


class PaymentVerifier(Protocol):
    # True：只能從 PaymentPending 轉成 Entitled
    requires_pending: bool

    def verify(self, course_id: str, evidence: Any = None) -> bool: ...


class ManualPaymentVerifier:
    requires_pending = True

    def verify(self, course_id: str, evidence: Any = None) -> bool:
        logger.warning("[payments] unverified demo confirmation for %s", course_id)
        return True


class StripeWebhookVerifier:
    requires_pending = False

    def __init__(self, webhook_secret: str):
        self.webhook_secret = webhook_secret

    def parse_event(self, payload: bytes, sig_header: str) -> Dict[str, Any]:
        """驗簽並回傳事件；任何失敗都轉成 PaymentVerificationError。"""
        if not self.webhook_secret:
            raise PaymentVerificationError("missing STRIPE_WEBHOOK_SECRET")
        try:
            stripe.Webhook.construct_event(
                payload=payload,
                sig_header=sig_header,
                secret=self.webhook_secret,
            )
        except SignatureVerificationError as e:
            raise PaymentVerificationError("invalid signature") from e
        except StripeError as e:
            raise PaymentVerificationError(f"stripe error: {e}") from e
        except ValueError as e:
            raise PaymentVerificationError(f"bad payload: {e}") from e
        # 簽章已驗過；回傳原文解析出的 dict，不依賴 StripeObject 的介面
        return json.loads(payload)

    def verify(self, course_id: str, evidence: Any = None) -> bool:
        if not isinstance(evidence, Mapping):
            return False
        if evidence.get("type") != CHECKOUT_COMPLETED:
            return False
        obj = (evidence.get("data") or {}).get("object") or {}
        if obj.get("payment_status") != "paid":
            return False
        return (obj.get("metadata") or {}).get("course_id") == course_id


def event_metadata(event: Mapping[str, Any]) -> Dict[str, str]:
    obj = (event.get("data") or {}).get("object") or {}
    return dict(obj.get("metadata") or {})


def hosted_payment_url(base_url: str, merchant_id: str, course: Course) -> str:
    """外部付款頁連結；只帶商家 id 與課程資訊，不經過本系統收款。"""
    query = urlencode({
        "iid": merchant_id,
        "order_id": course["id"],
        "price_amount": f"{course['price']:.2f}",
        "price_currency": "usd",
    })
    sep = "&" if "?" in base_url else "?"
    return f"{base_url}{sep}{query}"


def create_stripe_checkout(
    api_key: str,
    course: Course,
    device_id: str,
    success_url: str,
    cancel_url: str,
) -> Optional[str]:
    """
    建立 Stripe Checkout Session，回傳導向網址。
    金額一律以 catalog 為準；metadata 帶 device_id，webhook 才知道授權給誰。
    """
    stripe.api_key = api_key
    session = stripe.checkout.Session.create(
        mode="payment",
        success_url=success_url,
        cancel_url=cancel_url,
        line_items=[{
            "quantity": 1,
            "price_data": {
                "currency": "usd",
                "unit_amount": int(round(course["price"] * 100)),
                "product_data": {
                    "name": course["title"],
                    "metadata": {"course_id": course["id"]},
                },
            },
        }],
        metadata={"course_id": course["id"], "device_id": device_id},
    )
    checkout_url = getattr(session, "url", None)
    if not checkout_url and isinstance(session, dict):
        checkout_url = session.get("url")
    return checkout_url
