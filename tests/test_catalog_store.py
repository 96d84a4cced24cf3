"""Tests for the catalog store and the download-counter overlay."""

from __future__ import annotations

import pytest

from conftest import make_course
from services.catalog_store import CatalogStore
from services.errors import NotFoundError
from services.storage import DOWNLOAD_COUNTS_KEY, JsonSlot, MemoryStore


def _slot(store):
    return JsonSlot(store, DOWNLOAD_COUNTS_KEY)


class TestOverlayMerge:
    def test_seed_plus_overlay(self):
        store = MemoryStore({DOWNLOAD_COUNTS_KEY: '{"c1": 3}'})
        catalog = CatalogStore([make_course("c1", downloads=120), make_course("c2")], _slot(store))
        assert catalog.get("c1")["downloads"] == 123
        assert catalog.get("c2")["downloads"] == 10

    def test_missing_downloads_defaults_to_zero(self, store):
        course = make_course("c1")
        del course["downloads"]
        catalog = CatalogStore([course], _slot(store))
        assert catalog.get("c1")["downloads"] == 0

    def test_malformed_overlay_ignored(self):
        for raw in ("nope", "[1, 2]", '{"c1": "3"}', '{"c1": -4}', '{"c1": true}'):
            store = MemoryStore({DOWNLOAD_COUNTS_KEY: raw})
            catalog = CatalogStore([make_course("c1", downloads=5)], _slot(store))
            assert catalog.get("c1")["downloads"] == 5

    def test_seed_is_not_mutated(self, store):
        seed = [make_course("c1", downloads=10)]
        catalog = CatalogStore(seed, _slot(store))
        catalog.record_download("c1")
        assert seed[0]["downloads"] == 10


class TestRecordDownload:
    def test_persisted_overlay_is_extra_count_only(self, store):
        catalog = CatalogStore([make_course("c1", downloads=120)], _slot(store))
        for _ in range(3):
            catalog.record_download("c1")
        assert catalog.get("c1")["downloads"] == 123
        assert _slot(store).load() == {"c1": 3}

    def test_counts_accumulate_across_reloads(self, store):
        seed = [make_course("c1", downloads=10)]
        CatalogStore(seed, _slot(store)).record_download("c1")
        again = CatalogStore(seed, _slot(store))
        again.record_download("c1")
        assert again.get("c1")["downloads"] == 12
        assert _slot(store).load() == {"c1": 2}

    def test_unknown_id_is_noop(self, store):
        catalog = CatalogStore([make_course("c1")], _slot(store))
        assert catalog.record_download("ghost") is None
        assert _slot(store).load() is None


class TestCrud:
    def test_prepend_and_duplicate(self):
        catalog = CatalogStore([make_course("c1")])
        assert catalog.prepend(make_course("c2")) is True
        assert [c["id"] for c in catalog.courses()] == ["c2", "c1"]
        assert catalog.prepend(make_course("c1", title="dup")) is False
        assert len(catalog) == 2
        assert catalog.get("c1")["title"] == "Course c1"

    def test_replace(self):
        catalog = CatalogStore([make_course("c1"), make_course("c2")])
        assert catalog.replace(make_course("c2", title="New")) is True
        assert [c["title"] for c in catalog.courses()] == ["Course c1", "New"]
        assert catalog.replace(make_course("ghost")) is False

    def test_remove(self):
        catalog = CatalogStore([make_course("c1"), make_course("c2")])
        assert catalog.remove("c1") is True
        assert catalog.remove("c1") is False
        assert catalog.get("c1") is None
        with pytest.raises(NotFoundError):
            catalog.require("c1")

    def test_courses_returns_snapshot(self):
        catalog = CatalogStore([make_course("c1")])
        snapshot = catalog.courses()
        snapshot.clear()
        assert len(catalog) == 1
