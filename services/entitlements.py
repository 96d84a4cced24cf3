# services/entitlements.py
from __future__ import annotations

import logging
from typing import FrozenSet, Optional, Set

from services.storage import JsonSlot

logger = logging.getLogger(__name__)


def _load_ids(slot: Optional[JsonSlot]) -> Set[str]:
    if slot is None:
        return set()
    data = slot.load()
    if not isinstance(data, list):
        if data is not None:
            logger.warning("[entitlements] ignoring malformed value: %r", data)
        return set()
    return {item for item in data if isinstance(item, str)}


class EntitlementTracker:
    """目前裝置已購買的課程 id；只增不減，每次 grant 後立即寫回。"""

    def __init__(self, slot: Optional[JsonSlot] = None):
        self._slot = slot
        self._ids = _load_ids(slot)

    def has(self, course_id: str) -> bool:
        return course_id in self._ids

    def grant(self, course_id: str) -> bool:
        """已擁有時不變動；回傳是否為新授權。"""
        if course_id in self._ids:
            return False
        self._ids.add(course_id)
        if self._slot is not None:
            self._slot.save(sorted(self._ids))
        logger.info("[entitlements] granted %s", course_id)
        return True

    def ids(self) -> FrozenSet[str]:
        return frozenset(self._ids)

    def __len__(self) -> int:
        return len(self._ids)

    def __contains__(self, course_id: object) -> bool:
        return course_id in self._ids
