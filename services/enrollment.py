# services/enrollment.py
"""
單一課程的購買 / 下載狀態機（以目前裝置為範圍）：

    Browsing --enroll--> PaymentPending --付款成功--> Entitled
                             |
                             +--cancel--> Browsing

Entitled 是終點；之後每次下載都 +1，不去重。
"""
from __future__ import annotations

import logging
from enum import Enum
from typing import Any, Dict, NamedTuple, Optional, Set

from models.catalog import Course
from services.catalog_store import CatalogStore
from services.entitlements import EntitlementTracker
from services.payments import PaymentVerifier

logger = logging.getLogger(__name__)

PROCESSING_FEE = 0.0


class EnrollmentState(str, Enum):
    BROWSING = "browsing"
    PAYMENT_PENDING = "payment_pending"
    ENTITLED = "entitled"


class CheckoutQuote(NamedTuple):
    course_id: str
    title: str
    price: float
    fee: float
    total: float


class DownloadTicket(NamedTuple):
    course_id: str
    url: Optional[str]  # None：課程沒有 downloadUrl，降級處理
    downloads: int


def format_price(price: float) -> str:
    """卡片上的價格：整數不顯示小數（$20），其餘最多兩位（$49.99）。"""
    text = f"{price:.2f}".rstrip("0").rstrip(".")
    return f"${text}"


class EnrollmentFlow:
    def __init__(
        self,
        catalog: CatalogStore,
        entitlements: EntitlementTracker,
        pending: Optional[Set[str]] = None,
    ):
        self.catalog = catalog
        self.entitlements = entitlements
        # 呼叫端可傳入自己保存的 set（例如 Flask session），這裡直接修改它
        self.pending: Set[str] = pending if pending is not None else set()

    def state(self, course_id: str) -> EnrollmentState:
        if self.entitlements.has(course_id):
            return EnrollmentState.ENTITLED
        if course_id in self.pending:
            return EnrollmentState.PAYMENT_PENDING
        return EnrollmentState.BROWSING

    def enroll(self, course_id: str) -> Optional[CheckoutQuote]:
        course = self.catalog.get(course_id)
        if course is None:
            logger.info("[enroll] unknown course %s", course_id)
            return None
        if self.entitlements.has(course_id):
            return None
        self.pending.add(course_id)
        price = float(course["price"])
        return CheckoutQuote(
            course_id=course_id,
            title=course["title"],
            price=price,
            fee=PROCESSING_FEE,
            total=price + PROCESSING_FEE,
        )

    def cancel(self, course_id: str) -> None:
        self.pending.discard(course_id)

    def confirm_payment(self, course_id: str, verifier: PaymentVerifier, evidence: Any = None) -> bool:
        if self.catalog.get(course_id) is None:
            logger.info("[enroll] confirm for unknown course %s ignored", course_id)
            self.pending.discard(course_id)
            return False
        current = self.state(course_id)
        if current is EnrollmentState.ENTITLED:
            self.pending.discard(course_id)
            return True
        if verifier.requires_pending and current is not EnrollmentState.PAYMENT_PENDING:
            return False
        if not verifier.verify(course_id, evidence):
            return False
        self.entitlements.grant(course_id)
        self.pending.discard(course_id)
        return True

    def download(self, course_id: str) -> Optional[DownloadTicket]:
        if not self.entitlements.has(course_id):
            return None
        course = self.catalog.record_download(course_id)
        if course is None:
            return None
        return DownloadTicket(
            course_id=course_id,
            url=course.get("downloadUrl") or None,
            downloads=course["downloads"],
        )

    def card(self, course: Course) -> Dict[str, Any]:
        """課程卡片的 render model；已擁有就只顯示下載，否則只顯示購買。"""
        owned = self.entitlements.has(course["id"])
        return {
            "course": course,
            "owned": owned,
            "affordance": "download" if owned else "enroll",
            "badge": "Owned" if owned else format_price(course["price"]),
            "pending": course["id"] in self.pending,
        }
