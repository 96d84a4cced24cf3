# services/models.py
from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict

from sqlalchemy import JSON, DateTime, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column
from flask_login import UserMixin

from services.db import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# -------------------------
# 後台管理者（不進資料庫，只有一個帳號）
# -------------------------
class AdminUser(UserMixin):
    id = "admin"

    def __repr__(self) -> str:  # pragma: no cover
        return "<AdminUser>"


# -------------------------
# 裝置端 key-value 儲存（取代瀏覽器 localStorage）
# -------------------------
class StoredValue(Base):
    """
    每個裝置（namespace）一組 key；value 一律存 JSON 字串。
    讀取端必須容忍格式錯誤，所以這裡不用 JSON 欄位，保留原始文字。
    """
    __tablename__ = "stored_values"
    __table_args__ = (UniqueConstraint("namespace", "key", name="uq_stored_values_ns_key"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    namespace: Mapped[str] = mapped_column(String(64), index=True)
    key: Mapped[str] = mapped_column(String(128))
    value: Mapped[str] = mapped_column(Text)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=_utcnow, onupdate=_utcnow)

    def __repr__(self) -> str:  # pragma: no cover
        return f"<StoredValue ns={self.namespace!r} key={self.key!r}>"


# -------------------------
# Webhook 原始事件（去重 / 稽核）
# -------------------------
class WebhookEvent(Base):
    """
    保存從 Stripe 收到的原始事件。
    以 event_id 做唯一性，重送的事件不會重複授權。
    """
    __tablename__ = "webhook_events"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    event_id: Mapped[str] = mapped_column(String(128), unique=True, index=True)
    type: Mapped[str] = mapped_column(String(64))
    payload: Mapped[Dict[str, Any]] = mapped_column(JSON)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=_utcnow)

    def __repr__(self) -> str:  # pragma: no cover
        return f"<WebhookEvent id={self.id} event_id={self.event_id!r} type={self.type!r}>"
