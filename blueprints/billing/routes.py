# blueprints/billing/routes.py
from __future__ import annotations

from flask import current_app, flash, jsonify, redirect, render_template, request, url_for
from jinja2 import TemplateNotFound
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from services.context import build_storefront, device_id, save_pending, storefront
from services.db import get_session
from services.enrollment import EnrollmentState
from services.errors import PaymentVerificationError
from services.models import WebhookEvent
from services.payments import (
    CHECKOUT_COMPLETED,
    ManualPaymentVerifier,
    StripeError,
    StripeWebhookVerifier,
    create_stripe_checkout,
    event_metadata,
    hosted_payment_url,
)
from services.storage import SqlStore
from blueprints.storefront.routes import back_to_course
from . import bp

SUCCESS_MESSAGE = "Payment Successful! Course material is now available for download."


@bp.get("/ping")
def ping():
    return jsonify({"module": "billing", "ok": True})


@bp.get("/checkout/<course_id>")
def checkout(course_id: str):
    """
    付款頁（PaymentPending）：外部付款連結 + demo 用的「模擬付款成功」。
    直接開網址時也會進入 PaymentPending。
    """
    sf = storefront()
    course = sf.catalog.get(course_id)
    if course is None or sf.flow.state(course_id) is EnrollmentState.ENTITLED:
        return redirect(back_to_course(course))

    quote = sf.flow.enroll(course_id)
    save_pending(sf)

    pay_url = hosted_payment_url(
        current_app.config.get("PAYMENT_PAGE_URL", ""),
        current_app.config.get("PAYMENT_MERCHANT_ID", ""),
        course,
    )
    return render_template(
        "billing/checkout.html",
        course=course,
        quote=quote,
        pay_url=pay_url,
        stripe_enabled=bool(current_app.config.get("STRIPE_API_KEY")),
    )


@bp.post("/checkout/<course_id>/stripe")
def checkout_stripe(course_id: str):
    """建立 Stripe Checkout Session 並 303 轉導；未設定金鑰時回 400。"""
    api_key = current_app.config.get("STRIPE_API_KEY")
    if not api_key:
        return jsonify({"ok": False, "error": "missing STRIPE_API_KEY"}), 400

    sf = storefront()
    course = sf.catalog.get(course_id)
    if course is None:
        return jsonify({"ok": False, "error": "invalid course_id"}), 400

    success_url = url_for("billing.checkout_success", course_id=course_id, _external=True)
    cancel_url = url_for("billing.checkout_cancelled", course_id=course_id, _external=True)
    try:
        checkout_url = create_stripe_checkout(api_key, course, device_id(), success_url, cancel_url)
    except StripeError as e:
        user_msg = getattr(e, "user_message", None)
        current_app.logger.warning(f"[checkout] stripe error: {user_msg or e}")
        return jsonify({"ok": False, "error": f"stripe error: {user_msg or str(e)}"}), 400

    if not checkout_url:
        return jsonify({"ok": False, "error": "Stripe did not return a checkout URL"}), 500
    return redirect(checkout_url, code=303)


@bp.post("/confirm/<course_id>")
def confirm(course_id: str):
    """demo：手動觸發付款成功，代替真正的付款回呼。"""
    sf = storefront()
    ok = sf.flow.confirm_payment(course_id, ManualPaymentVerifier())
    save_pending(sf)
    if ok:
        flash(SUCCESS_MESSAGE, "success")
    else:
        flash("Payment could not be confirmed.", "error")
    return redirect(back_to_course(sf.catalog.get(course_id)))


@bp.post("/cancel/<course_id>")
def cancel(course_id: str):
    sf = storefront()
    sf.flow.cancel(course_id)
    save_pending(sf)
    return redirect(back_to_course(sf.catalog.get(course_id)))


@bp.get("/success/<course_id>")
def checkout_success(course_id: str):
    """Stripe 付款完成後導回；實際授權以 webhook 為準。"""
    sf = storefront()
    course = sf.catalog.get(course_id)
    try:
        return render_template(
            "billing/success.html",
            course=course,
            owned=sf.entitlements.has(course_id),
        )
    except TemplateNotFound:
        return "<h1>Payment received</h1><p>Your download unlocks once the payment is confirmed.</p>", 200


@bp.get("/cancelled/<course_id>")
def checkout_cancelled(course_id: str):
    sf = storefront()
    sf.flow.cancel(course_id)
    save_pending(sf)
    flash("Checkout cancelled.", "info")
    return redirect(back_to_course(sf.catalog.get(course_id)))


def _record_event(event: dict) -> bool:
    """冪等寫入 webhook_events；回傳是否為第一次收到。"""
    eid = event.get("id")
    if not eid:
        return True
    with get_session() as s:
        if s.query(WebhookEvent).filter_by(event_id=eid).first():
            return False
        s.add(WebhookEvent(event_id=eid, type=event.get("type", ""), payload=event))
        try:
            s.commit()
        except IntegrityError:
            s.rollback()
            return False
    return True


@bp.post("/webhook")
def webhook():
    """
    Stripe Webhook：驗簽 → 記錄事件 → checkout.session.completed 時授權給 metadata 裡的裝置。
    本地測試：
      stripe listen --forward-to http://localhost:5000/billing/webhook
    """
    verifier = StripeWebhookVerifier(current_app.config.get("STRIPE_WEBHOOK_SECRET", ""))
    try:
        event = verifier.parse_event(request.data, request.headers.get("Stripe-Signature", ""))
    except PaymentVerificationError as e:
        current_app.logger.warning(f"[webhook] rejected: {e}")
        return jsonify({"ok": False, "error": str(e)}), 400

    etype = event.get("type", "")
    try:
        first_time = _record_event(event)
    except SQLAlchemyError as e:
        current_app.logger.exception(f"[webhook] save event failed: {e}")
        # 回 200 避免 Stripe 無限重試
        return jsonify({"ok": False, "warning": "event log failed but ignored"}), 200

    if not first_time:
        return jsonify({"ok": True, "duplicate": True}), 200

    if etype != CHECKOUT_COMPLETED:
        current_app.logger.info(f"[webhook] received event: {etype}")
        return jsonify({"ok": True}), 200

    meta = event_metadata(event)
    course_id = meta.get("course_id")
    did = meta.get("device_id")
    if not course_id or not did:
        current_app.logger.warning(f"[webhook] missing metadata on {event.get('id')}")
        return jsonify({"ok": True, "granted": False}), 200

    sf = build_storefront(SqlStore(did))
    granted = sf.flow.confirm_payment(course_id, verifier, event)
    current_app.logger.info(
        f"[webhook] checkout.completed course_id={course_id} device={did} granted={granted}"
    )
    return jsonify({"ok": True, "granted": granted}), 200
