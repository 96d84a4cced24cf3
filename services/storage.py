# services/storage.py
"""
裝置端狀態的持久化協作者。

業務邏輯只透過 JsonSlot 讀寫，不直接碰資料庫：
- load() 讀不到或格式錯誤 -> None
- save(value) 寫入成功回 True，失敗只記 log、回 False
"""
from __future__ import annotations

import json
import logging
from typing import Any, Dict, Optional, Protocol

from sqlalchemy.exc import SQLAlchemyError

from services.db import get_session
from services.errors import PersistenceReadError
from services.models import StoredValue

logger = logging.getLogger(__name__)

ENROLLED_KEY = "digitora_enrolled"
DOWNLOAD_COUNTS_KEY = "digitora_download_counts"


class KeyValueStore(Protocol):
    def get(self, key: str) -> Optional[str]: ...

    def set(self, key: str, value: str) -> None: ...


class MemoryStore:
    """純記憶體版本，給測試與 admin 用的 seed store。"""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self.data: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self.data.get(key)

    def set(self, key: str, value: str) -> None:
        self.data[key] = value


class SqlStore:
    """以 stored_values 資料表實作，每個裝置一個 namespace。"""

    def __init__(self, namespace: str):
        self.namespace = namespace

    def get(self, key: str) -> Optional[str]:
        with get_session() as s:
            row = s.query(StoredValue).filter_by(namespace=self.namespace, key=key).one_or_none()
            return row.value if row else None

    def set(self, key: str, value: str) -> None:
        with get_session() as s:
            row = s.query(StoredValue).filter_by(namespace=self.namespace, key=key).one_or_none()
            if row is None:
                s.add(StoredValue(namespace=self.namespace, key=key, value=value))
            else:
                row.value = value
            s.commit()


def decode(raw: Optional[str]) -> Any:
    if raw is None:
        raise PersistenceReadError("no stored value")
    try:
        return json.loads(raw)
    except (TypeError, ValueError) as e:
        raise PersistenceReadError(f"malformed stored value: {e}") from e


class JsonSlot:
    """store 裡的一個 key，值以 JSON 編碼。"""

    def __init__(self, store: KeyValueStore, key: str):
        self.store = store
        self.key = key

    def load(self) -> Optional[Any]:
        try:
            raw = self.store.get(self.key)
        except SQLAlchemyError:
            logger.exception("[storage] read %s failed", self.key)
            return None
        try:
            return decode(raw)
        except PersistenceReadError as e:
            logger.debug("[storage] %s treated as empty: %s", self.key, e)
            return None

    def save(self, value: Any) -> bool:
        try:
            self.store.set(self.key, json.dumps(value))
        except SQLAlchemyError:
            logger.exception("[storage] write %s failed", self.key)
            return False
        return True
