# services/catalog_store.py
from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Optional

from models.catalog import Course, copy_course
from services.errors import NotFoundError
from services.storage import JsonSlot

logger = logging.getLogger(__name__)


def _load_overlay(slot: Optional[JsonSlot]) -> Dict[str, int]:
    """讀取下載次數 overlay；只接受 {id: 正整數}，其餘一律忽略。"""
    if slot is None:
        return {}
    data = slot.load()
    if not isinstance(data, dict):
        return {}
    overlay: Dict[str, int] = {}
    for course_id, value in data.items():
        # bool 是 int 的子類別，要先排除
        if isinstance(value, bool) or not isinstance(value, int):
            continue
        if value > 0:
            overlay[str(course_id)] = value
    return overlay


class CatalogStore:
    """
    課程清單的唯一擁有者。

    初始化時複製 seed，並把 overlay（本裝置額外累積的下載次數）加回去：
        working downloads = seed downloads + overlay[id]
    overlay 是直接累加的計數器，不是用 working - seed 反推。
    """

    def __init__(self, seed: Iterable[Course], overlay_slot: Optional[JsonSlot] = None):
        self._slot = overlay_slot
        self._overlay = _load_overlay(overlay_slot)
        self._courses: List[Course] = []
        for item in seed:
            course = copy_course(item)
            course["downloads"] = course["downloads"] + self._overlay.get(course["id"], 0)
            self._courses.append(course)

    # ---- 讀取 ----
    def courses(self) -> List[Course]:
        return list(self._courses)

    def get(self, course_id: str) -> Optional[Course]:
        for course in self._courses:
            if course["id"] == course_id:
                return course
        return None

    def require(self, course_id: str) -> Course:
        course = self.get(course_id)
        if course is None:
            raise NotFoundError(course_id)
        return course

    def __len__(self) -> int:
        return len(self._courses)

    def __contains__(self, course_id: object) -> bool:
        return any(c["id"] == course_id for c in self._courses)

    def extra_downloads(self, course_id: str) -> int:
        return self._overlay.get(course_id, 0)

    def overlay(self) -> Dict[str, int]:
        return dict(self._overlay)

    # ---- 後台 CRUD ----
    def replace(self, course: Course) -> bool:
        for i, existing in enumerate(self._courses):
            if existing["id"] == course["id"]:
                self._courses[i] = copy_course(course)
                return True
        logger.info("[catalog] replace skipped, unknown id %s", course["id"])
        return False

    def prepend(self, course: Course) -> bool:
        if course["id"] in self:
            logger.warning("[catalog] duplicate id %s rejected", course["id"])
            return False
        self._courses.insert(0, copy_course(course))
        return True

    def remove(self, course_id: str) -> bool:
        before = len(self._courses)
        self._courses = [c for c in self._courses if c["id"] != course_id]
        return len(self._courses) != before

    # ---- 下載計數 ----
    def record_download(self, course_id: str) -> Optional[Course]:
        """下載次數 +1 並寫回 overlay；課程已不存在時什麼都不做。"""
        course = self.get(course_id)
        if course is None:
            return None
        course["downloads"] = course.get("downloads", 0) + 1
        self._overlay[course_id] = self._overlay.get(course_id, 0) + 1
        if self._slot is not None:
            self._slot.save(self._overlay)
        return course
