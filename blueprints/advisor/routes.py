# blueprints/advisor/routes.py
from __future__ import annotations

from flask import current_app, flash, jsonify, redirect, render_template, request, url_for

from services.advisor import AdvisorChat
from services.context import device_id
from services.errors import AdvisorBusyError
from . import bp


def _chat() -> AdvisorChat:
    return current_app.extensions["digitora.advisor"].get(device_id())


def _message_text() -> str:
    """JSON body 的 text 或表單欄位；型別不對一律當空字串。"""
    payload = request.get_json(silent=True)
    if isinstance(payload, dict):
        text = payload.get("text")
    else:
        text = request.form.get("text")
    return text.strip() if isinstance(text, str) else ""


@bp.get("/")
def chat_page():
    chat = _chat()
    return render_template("advisor/chat.html", messages=chat.messages, pending=chat.busy)


@bp.post("/")
def chat_submit():
    text = _message_text()
    if not text:
        flash("Type a question for the advisor first.", "error")
        return redirect(url_for("advisor.chat_page"))

    try:
        _chat().send(text)
    except AdvisorBusyError:
        flash("Digitora AI is still answering your previous question.", "error")
    return redirect(url_for("advisor.chat_page"))


@bp.get("/messages")
def messages():
    chat = _chat()
    return jsonify({"messages": chat.transcript(), "pending": chat.busy})


@bp.post("/messages")
def send():
    text = _message_text()
    if not text:
        return jsonify({"ok": False, "error": "empty message"}), 400

    chat = _chat()
    try:
        reply = chat.send(text)
    except AdvisorBusyError:
        current_app.logger.info(f"[advisor] busy, rejected message for {device_id()}")
        return jsonify({"ok": False, "error": "advisor is still answering"}), 409

    return jsonify({
        "ok": True,
        "reply": reply.to_dict() if reply else None,
        "messages": chat.transcript(),
    })
