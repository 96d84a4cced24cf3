# blueprints/admin/routes.py
from __future__ import annotations

import hmac

from flask import abort, current_app, flash, jsonify, redirect, render_template, request, url_for
from flask_login import login_required, login_user, logout_user

from models.catalog import Category, Level
from services.admin_editor import dashboard_stats, form_defaults, parse_course_form, search_courses
from services.context import seed_catalog
from services.models import AdminUser
from . import bp


@bp.get("/ping")
def ping():
    return jsonify({"module": "admin", "ok": True})


@bp.route("/login", methods=["GET", "POST"])
def login():
    if request.method == "POST":
        password = request.form.get("password") or ""
        expected = current_app.config.get("ADMIN_PASSWORD", "")
        if not expected or not hmac.compare_digest(password.encode(), expected.encode()):
            flash("Invalid password.", "error")
            return render_template("admin/login.html"), 401

        login_user(AdminUser())
        return redirect(url_for("admin.dashboard"))

    return render_template("admin/login.html")


@bp.get("/logout")
@login_required
def logout():
    logout_user()
    return redirect(url_for("storefront.index"))


@bp.get("/")
@login_required
def dashboard():
    """課程清單 + 搜尋（title / category）+ 統計"""
    q = (request.args.get("q") or "").strip()
    courses = seed_catalog().courses()
    return render_template(
        "admin/dashboard.html",
        rows=search_courses(courses, q),
        stats=dashboard_stats(courses),
        q=q,
    )


def _render_editor(form, errors, course_id=None, status=200):
    return render_template(
        "admin/editor.html",
        form=form,
        errors=errors,
        course_id=course_id,
        categories=list(Category),
        levels=list(Level),
    ), status


@bp.route("/courses/new", methods=["GET", "POST"])
@login_required
def create_course():
    if request.method == "GET":
        return _render_editor(form_defaults(), {})

    result = parse_course_form(request.form)
    if not result.ok:
        return _render_editor(request.form, result.errors, status=400)

    if not seed_catalog().prepend(result.course):
        return _render_editor(request.form, {"id": "A course with this id already exists"}, status=400)

    current_app.logger.info(f"[admin] course created: {result.course['id']}")
    flash("Course created.", "success")
    return redirect(url_for("admin.dashboard"))


@bp.route("/courses/<course_id>/edit", methods=["GET", "POST"])
@login_required
def edit_course(course_id: str):
    store = seed_catalog()
    existing = store.get(course_id)
    if existing is None:
        abort(404)

    if request.method == "GET":
        return _render_editor(form_defaults(existing), {}, course_id=course_id)

    result = parse_course_form(request.form, existing=existing)
    if not result.ok:
        return _render_editor(request.form, result.errors, course_id=course_id, status=400)

    if not store.replace(result.course):
        # 編輯途中被刪除
        abort(404)

    current_app.logger.info(f"[admin] course updated: {course_id}")
    flash("Course saved.", "success")
    return redirect(url_for("admin.dashboard"))


@bp.post("/courses/<course_id>/delete")
@login_required
def delete_course(course_id: str):
    if seed_catalog().remove(course_id):
        current_app.logger.info(f"[admin] course deleted: {course_id}")
        flash("Course deleted.", "success")
    return redirect(url_for("admin.dashboard"))
