# blueprints/storefront/routes.py
from __future__ import annotations

from flask import current_app, flash, redirect, render_template, request, url_for

from models.catalog import Category
from services.context import save_pending, storefront
from services.views import ViewMode, filter_courses, parse_category, standard_categories
from . import bp


def _render_catalog(mode: ViewMode):
    q = request.args.get("q") or ""
    category = parse_category(request.args.get("category"))

    sf = storefront()
    items = filter_courses(sf.catalog.courses(), category=category, query=q, mode=mode)
    cards = [sf.flow.card(c) for c in items]

    return render_template(
        "storefront/catalog.html",
        view=mode.value,
        cards=cards,
        categories=standard_categories(),
        selected_category=category,
        q=q,
    )


@bp.get("/")
def index():
    return _render_catalog(ViewMode.STANDARD)


@bp.get("/special")
def special():
    return _render_catalog(ViewMode.PREMIUM)


@bp.get("/about")
def about():
    return render_template("storefront/about.html")


def back_to_course(course) -> str:
    """回到課程所在的分頁。"""
    if course is None:
        return url_for("storefront.index")
    if course["category"] == Category.SPECIAL:
        return url_for("storefront.special")
    return url_for("storefront.index", category=Category(course["category"]).value)


@bp.post("/courses/<course_id>/enroll")
def enroll(course_id: str):
    sf = storefront()
    quote = sf.flow.enroll(course_id)
    if quote is None:
        course = sf.catalog.get(course_id)
        if course is None:
            flash("This course is no longer available.", "error")
        return redirect(back_to_course(course))

    save_pending(sf)
    return redirect(url_for("billing.checkout", course_id=course_id))


@bp.post("/courses/<course_id>/download")
def download(course_id: str):
    sf = storefront()
    ticket = sf.flow.download(course_id)
    if ticket is None:
        # 未購買或課程已被刪除：不做任何變動
        flash("Purchase this course to unlock its materials.", "error")
        return redirect(back_to_course(sf.catalog.get(course_id)))

    current_app.logger.info(
        f"[download] course={course_id} downloads={ticket.downloads} has_url={bool(ticket.url)}"
    )
    if not ticket.url:
        # 沒有下載連結：計數照算，回空內容
        return "", 204
    return redirect(ticket.url)
