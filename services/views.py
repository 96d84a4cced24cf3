# services/views.py
from __future__ import annotations

from enum import Enum
from typing import Iterable, List, Optional, assert_never

from models.catalog import Category, Course

DEFAULT_CATEGORY = Category.CRYPTO


class ViewMode(str, Enum):
    STANDARD = "standard"  # 首頁分類分頁
    PREMIUM = "premium"    # Special 專區


def standard_categories() -> List[Category]:
    """首頁分類分頁（不含 Special）。"""
    return [c for c in Category if c is not Category.SPECIAL]


def parse_category(raw: Optional[str]) -> Category:
    """查詢參數 -> 首頁分類；未知值或 Special 一律回預設分類。"""
    for cat in standard_categories():
        if raw == cat.value:
            return cat
    return DEFAULT_CATEGORY


def parse_view_mode(raw: Optional[str]) -> ViewMode:
    try:
        return ViewMode(raw)
    except ValueError:
        return ViewMode.STANDARD


def matches_category(course: Course, category: Category, mode: ViewMode) -> bool:
    if mode is ViewMode.PREMIUM:
        return course["category"] == Category.SPECIAL
    elif mode is ViewMode.STANDARD:
        return course["category"] == category
    else:
        assert_never(mode)


def matches_text(course: Course, query: str) -> bool:
    """title / description / 任一 tag 不分大小寫的子字串比對；空字串全部符合。"""
    q = query.lower()
    if not q:
        return True
    if q in course["title"].lower() or q in course["description"].lower():
        return True
    return any(q in tag.lower() for tag in course.get("tags") or [])


def filter_courses(
    courses: Iterable[Course],
    category: Category = DEFAULT_CATEGORY,
    query: str = "",
    mode: ViewMode = ViewMode.STANDARD,
) -> List[Course]:
    """保持原本順序的子序列；結果為空時由頁面顯示 empty state。"""
    return [
        c for c in courses
        if matches_category(c, category, mode) and matches_text(c, query)
    ]
