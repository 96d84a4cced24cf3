# services/admin_editor.py
from __future__ import annotations

import math
import re
import time
from typing import Any, Dict, List, Mapping, NamedTuple, Optional

from models.catalog import Category, Course, Level

_URL_PATTERN = re.compile(r"^https?://.+", re.IGNORECASE)

DEFAULT_RATING = 5.0


class EditorResult(NamedTuple):
    course: Optional[Course]
    errors: Dict[str, str]

    @property
    def ok(self) -> bool:
        return not self.errors


def new_course_id() -> str:
    """以時間產生的 id，同一個 session 內不會撞號即可。"""
    return f"custom-{int(time.time() * 1000)}"


def parse_tags(raw: Optional[str]) -> List[str]:
    return [t.strip() for t in (raw or "").split(",") if t.strip()]


def _parse_number(raw: Any, cast) -> Optional[float]:
    text = str(raw if raw is not None else "").strip()
    if not text:
        return None
    try:
        value = cast(text)
    except ValueError:
        return None
    if isinstance(value, float) and not math.isfinite(value):
        return None
    return value


def parse_course_form(form: Mapping[str, Any], existing: Optional[Course] = None) -> EditorResult:
    """
    後台表單 -> Course。
    - 編輯：沿用原本的 id 與 downloads（id 建立後不可變）
    - 新增：產生新 id，downloads 從 0 開始
    有任何欄位錯誤時 course 為 None，呼叫端不可寫入 catalog。
    """
    errors: Dict[str, str] = {}

    title = (form.get("title") or "").strip()
    if not title:
        errors["title"] = "Title is required"
    description = (form.get("description") or "").strip()

    price = _parse_number(form.get("price"), float)
    if price is None:
        errors["price"] = "Price is required"
    elif price < 0:
        errors["price"] = "Price cannot be negative"

    students = _parse_number(form.get("students"), int)
    if students is None:
        errors["students"] = "Students count is required"
    elif students < 0:
        errors["students"] = "Students count cannot be negative"

    rating = _parse_number(form.get("rating"), float)
    if rating is None:
        rating = DEFAULT_RATING

    try:
        category = Category(form.get("category") or Category.CRYPTO.value)
    except ValueError:
        errors["category"] = "Unknown category"
        category = Category.CRYPTO

    try:
        level = Level(form.get("level") or Level.BEGINNER.value)
    except ValueError:
        errors["level"] = "Unknown level"
        level = Level.BEGINNER

    image = (form.get("image") or "").strip()
    if not image:
        errors["image"] = "Image URL is required"
    elif not _URL_PATTERN.match(image):
        errors["image"] = "Invalid URL (must start with http:// or https://)"

    download_url = (form.get("downloadUrl") or "").strip()
    if download_url and not _URL_PATTERN.match(download_url):
        errors["downloadUrl"] = "Invalid URL (must start with http:// or https://)"

    if errors:
        return EditorResult(None, errors)

    course: Course = {
        "id": existing["id"] if existing else new_course_id(),
        "title": title,
        "description": description,
        "price": float(price),
        "category": category,
        "level": level,
        "rating": float(rating),
        "students": int(students),
        "downloads": int(existing.get("downloads", 0)) if existing else 0,
        "image": image,
        "tags": parse_tags(form.get("tags")),
        "downloadUrl": download_url or None,
    }
    return EditorResult(course, {})


def form_defaults(course: Optional[Course] = None) -> Dict[str, Any]:
    """編輯表單的初始值；新增時給預設值。"""
    if course is None:
        return {
            "title": "",
            "description": "",
            "price": "20",
            "category": Category.CRYPTO.value,
            "level": Level.BEGINNER.value,
            "rating": str(DEFAULT_RATING),
            "students": "0",
            "image": "https://picsum.photos/800/600",
            "tags": "",
            "downloadUrl": "",
        }
    return {
        "title": course["title"],
        "description": course["description"],
        "price": str(course["price"]),
        "category": Category(course["category"]).value,
        "level": Level(course["level"]).value,
        "rating": str(course["rating"]),
        "students": str(course["students"]),
        "image": course["image"],
        "tags": ", ".join(course.get("tags") or []),
        "downloadUrl": course.get("downloadUrl") or "",
    }


def search_courses(courses: List[Course], term: str) -> List[Course]:
    """後台搜尋：title 或 category 不分大小寫。"""
    t = term.strip().lower()
    if not t:
        return list(courses)
    return [
        c for c in courses
        if t in c["title"].lower() or t in Category(c["category"]).value.lower()
    ]


def dashboard_stats(courses: List[Course]) -> Dict[str, Any]:
    count = len(courses)
    avg_price = sum(c["price"] for c in courses) / count if count else 0.0
    return {
        "count": count,
        "avg_price": round(avg_price, 2),
        "total_students": sum(c["students"] for c in courses),
    }
