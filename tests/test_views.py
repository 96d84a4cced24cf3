"""Tests for the catalog filter / view engine."""

from __future__ import annotations

from conftest import make_course
from models.catalog import Category
from services.views import (
    ViewMode,
    filter_courses,
    parse_category,
    parse_view_mode,
    standard_categories,
)


def _catalog():
    return [
        make_course("a", title="Bitcoin Basics", category=Category.CRYPTO, tags=["BTC"]),
        make_course("b", title="Forex 101", category=Category.FOREX),
        make_course("c", title="Yield Strategies", description="Farming pools.",
                    category=Category.CRYPTO, tags=["DeFi", "Staking"]),
        make_course("d", title="MEV Bots", category=Category.SPECIAL, tags=["DeFi"]),
        make_course("e", title="Altcoins", category=Category.CRYPTO),
    ]


class TestFilterCourses:
    def test_empty_query_returns_category_subset_in_order(self):
        result = filter_courses(_catalog(), Category.CRYPTO, "", ViewMode.STANDARD)
        assert [c["id"] for c in result] == ["a", "c", "e"]

    def test_tag_match_is_case_insensitive(self):
        for q in ("defi", "DEFI", "DeFi"):
            result = filter_courses(_catalog(), Category.CRYPTO, q, ViewMode.STANDARD)
            assert [c["id"] for c in result] == ["c"]

    def test_matches_title_and_description(self):
        assert [c["id"] for c in filter_courses(_catalog(), Category.CRYPTO, "bitcoin")] == ["a"]
        assert [c["id"] for c in filter_courses(_catalog(), Category.CRYPTO, "POOLS")] == ["c"]

    def test_premium_view_only_shows_special(self):
        result = filter_courses(_catalog(), Category.CRYPTO, "defi", ViewMode.PREMIUM)
        assert [c["id"] for c in result] == ["d"]

    def test_premium_view_ignores_selected_category(self):
        result = filter_courses(_catalog(), Category.FOREX, "", ViewMode.PREMIUM)
        assert all(c["category"] == Category.SPECIAL for c in result)

    def test_standard_view_never_shows_special(self):
        for cat in standard_categories():
            result = filter_courses(_catalog(), cat, "", ViewMode.STANDARD)
            assert all(c["category"] != Category.SPECIAL for c in result)

    def test_filtering_is_idempotent(self):
        once = filter_courses(_catalog(), Category.CRYPTO, "a", ViewMode.STANDARD)
        twice = filter_courses(once, Category.CRYPTO, "a", ViewMode.STANDARD)
        assert once == twice

    def test_no_match_returns_empty_list(self):
        assert filter_courses(_catalog(), Category.STOCKS, "", ViewMode.STANDARD) == []


class TestParsing:
    def test_standard_categories_exclude_special(self):
        cats = standard_categories()
        assert Category.SPECIAL not in cats
        assert len(cats) == len(Category) - 1
        assert cats[0] is Category.CRYPTO

    def test_parse_category(self):
        assert parse_category("Forex") is Category.FOREX
        assert parse_category("NFT & Metaverse") is Category.NFT_METAVERSE
        assert parse_category("Special") is Category.CRYPTO
        assert parse_category("nope") is Category.CRYPTO
        assert parse_category(None) is Category.CRYPTO

    def test_parse_view_mode(self):
        assert parse_view_mode("premium") is ViewMode.PREMIUM
        assert parse_view_mode("bogus") is ViewMode.STANDARD
        assert parse_view_mode(None) is ViewMode.STANDARD
