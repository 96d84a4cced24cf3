# services/context.py
"""每個 request 的組裝：裝置 id、該裝置的 catalog / entitlements / 狀態機。"""
from __future__ import annotations

import uuid
from typing import NamedTuple, Set

from flask import current_app, session

from services.catalog_store import CatalogStore
from services.enrollment import EnrollmentFlow
from services.entitlements import EntitlementTracker
from services.storage import DOWNLOAD_COUNTS_KEY, ENROLLED_KEY, JsonSlot, KeyValueStore, SqlStore

DEVICE_KEY = "device_id"
PENDING_KEY = "pending_courses"


class Storefront(NamedTuple):
    catalog: CatalogStore
    entitlements: EntitlementTracker
    flow: EnrollmentFlow


def device_id() -> str:
    """
    瀏覽器 cookie 內的隨機 id，扮演「這台裝置」的 localStorage 範圍。
    cookie 設為 permanent，關閉瀏覽器後仍保留已購課程與下載次數。
    """
    did = session.get(DEVICE_KEY)
    if not did:
        did = uuid.uuid4().hex
        session[DEVICE_KEY] = did
    session.permanent = True
    return did


def seed_catalog() -> CatalogStore:
    """整個 app 共用的 seed（後台編輯的對象），不含任何裝置的 overlay。"""
    return current_app.extensions["digitora.catalog"]


def build_storefront(store: KeyValueStore, pending: Set[str] | None = None) -> Storefront:
    catalog = CatalogStore(seed_catalog().courses(), JsonSlot(store, DOWNLOAD_COUNTS_KEY))
    entitlements = EntitlementTracker(JsonSlot(store, ENROLLED_KEY))
    return Storefront(catalog, entitlements, EnrollmentFlow(catalog, entitlements, pending))


def storefront() -> Storefront:
    pending = set(session.get(PENDING_KEY) or [])
    return build_storefront(SqlStore(device_id()), pending)


def save_pending(sf: Storefront) -> None:
    session[PENDING_KEY] = sorted(sf.flow.pending)
