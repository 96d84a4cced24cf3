"""Tests for the enroll -> pay -> unlock -> download state machine."""

from __future__ import annotations

from conftest import make_course
from models.catalog import Category
from services.catalog_store import CatalogStore
from services.enrollment import EnrollmentFlow, EnrollmentState, format_price
from services.entitlements import EntitlementTracker
from services.payments import ManualPaymentVerifier
from services.storage import DOWNLOAD_COUNTS_KEY, ENROLLED_KEY, JsonSlot


class RejectingVerifier:
    requires_pending = False

    def verify(self, course_id, evidence=None):
        return False


class EvidenceVerifier:
    requires_pending = False

    def verify(self, course_id, evidence=None):
        return evidence == "paid"


def _flow(store, *courses):
    catalog = CatalogStore(courses or [make_course("c1")], JsonSlot(store, DOWNLOAD_COUNTS_KEY))
    tracker = EntitlementTracker(JsonSlot(store, ENROLLED_KEY))
    return EnrollmentFlow(catalog, tracker)


class TestScenario:
    def test_purchase_then_two_downloads(self, store):
        flow = _flow(store, make_course("c1", category=Category.CRYPTO, price=49.99, downloads=10))
        assert flow.state("c1") is EnrollmentState.BROWSING
        assert flow.card(flow.catalog.get("c1"))["badge"] == "$49.99"

        quote = flow.enroll("c1")
        assert flow.state("c1") is EnrollmentState.PAYMENT_PENDING
        assert (quote.price, quote.fee, quote.total) == (49.99, 0.0, 49.99)

        assert flow.confirm_payment("c1", ManualPaymentVerifier()) is True
        assert flow.state("c1") is EnrollmentState.ENTITLED
        assert flow.entitlements.ids() == frozenset({"c1"})

        card = flow.card(flow.catalog.get("c1"))
        assert card["affordance"] == "download"
        assert card["badge"] == "Owned"

        flow.download("c1")
        ticket = flow.download("c1")
        assert ticket.downloads == 12
        assert flow.catalog.get("c1")["downloads"] == 12
        assert JsonSlot(store, DOWNLOAD_COUNTS_KEY).load() == {"c1": 2}


class TestTransitions:
    def test_cancel_returns_to_browsing(self, store):
        flow = _flow(store)
        flow.enroll("c1")
        flow.cancel("c1")
        assert flow.state("c1") is EnrollmentState.BROWSING
        assert len(flow.entitlements) == 0

    def test_demo_confirm_requires_pending(self, store):
        flow = _flow(store)
        assert flow.confirm_payment("c1", ManualPaymentVerifier()) is False
        assert not flow.entitlements.has("c1")

    def test_rejected_verification_keeps_pending(self, store):
        flow = _flow(store)
        flow.enroll("c1")
        assert flow.confirm_payment("c1", RejectingVerifier()) is False
        assert flow.state("c1") is EnrollmentState.PAYMENT_PENDING

    def test_out_of_band_verifier_can_grant_from_browsing(self, store):
        flow = _flow(store)
        assert flow.confirm_payment("c1", EvidenceVerifier(), "paid") is True
        assert flow.entitlements.has("c1")

    def test_enroll_unknown_or_owned_course(self, store):
        flow = _flow(store)
        assert flow.enroll("ghost") is None
        flow.enroll("c1")
        flow.confirm_payment("c1", ManualPaymentVerifier())
        assert flow.enroll("c1") is None
        assert flow.state("c1") is EnrollmentState.ENTITLED

    def test_confirm_for_deleted_course_is_noop(self, store):
        flow = _flow(store)
        flow.enroll("c1")
        flow.catalog.remove("c1")
        assert flow.confirm_payment("c1", ManualPaymentVerifier()) is False
        assert len(flow.entitlements) == 0

    def test_pending_set_is_shared_with_caller(self, store):
        pending = set()
        catalog = CatalogStore([make_course("c1")])
        flow = EnrollmentFlow(catalog, EntitlementTracker(), pending)
        flow.enroll("c1")
        assert pending == {"c1"}


class TestDownload:
    def test_download_requires_entitlement(self, store):
        flow = _flow(store)
        assert flow.download("c1") is None
        assert flow.catalog.get("c1")["downloads"] == 10

    def test_every_click_counts(self, store):
        flow = _flow(store, make_course("c1", downloads=0))
        flow.enroll("c1")
        flow.confirm_payment("c1", ManualPaymentVerifier())
        counts = [flow.download("c1").downloads for _ in range(5)]
        assert counts == [1, 2, 3, 4, 5]

    def test_missing_download_url_is_degraded_not_fatal(self, store):
        flow = _flow(store, make_course("c1", downloadUrl=None))
        flow.enroll("c1")
        flow.confirm_payment("c1", ManualPaymentVerifier())
        ticket = flow.download("c1")
        assert ticket.url is None
        assert ticket.downloads == 11


class TestCards:
    def test_affordance_is_exclusive(self, store):
        flow = _flow(store, make_course("c1"), make_course("c2"))
        flow.enroll("c1")
        flow.confirm_payment("c1", ManualPaymentVerifier())
        for course in flow.catalog.courses():
            card = flow.card(course)
            owned = flow.entitlements.has(course["id"])
            assert card["affordance"] == ("download" if owned else "enroll")

    def test_format_price(self):
        assert format_price(49.99) == "$49.99"
        assert format_price(20.0) == "$20"
        assert format_price(19.5) == "$19.5"
