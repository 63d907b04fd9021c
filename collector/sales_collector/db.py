"""Supabase 스토어 레지스트리.

테이블은 sales_tracker 스키마의 stores (id, name, url).
Supabase client 의 스키마 지정은 .schema() 로 한다.
"""

from __future__ import annotations

import logging

from supabase import create_client

from sales_collector.config import SUPABASE_SECRET_KEY, SUPABASE_URL
from sales_collector.models import Store

logger = logging.getLogger(__name__)

SCHEMA = "sales_tracker"
TABLE = "stores"


class SupabaseStoreRepository:
    """StoreRepository 와 같은 인터페이스의 Supabase 구현."""

    def __init__(self, client=None) -> None:
        if client is None:
            if not SUPABASE_URL or not SUPABASE_SECRET_KEY:
                raise RuntimeError("SUPABASE_URL / SUPABASE_SECRET_KEY 가 설정되지 않았습니다")
            client = create_client(SUPABASE_URL, SUPABASE_SECRET_KEY)
        self._client = client

    def _table(self):
        return self._client.schema(SCHEMA).table(TABLE)

    def add(self, store: Store) -> Store:
        if self.get(store.id) is not None:
            raise ValueError(f"store already registered: {store.id}")
        self._table().insert(store.to_dict()).execute()
        logger.info("stores 에 삽입: %s (%s)", store.name, store.url)
        return store

    def get(self, store_id: str) -> Store | None:
        resp = self._table().select("id, name, url").eq("id", store_id).execute()
        rows = resp.data or []
        return _to_store(rows[0]) if rows else None

    def find_by_url(self, url: str) -> Store | None:
        resp = self._table().select("id, name, url").eq("url", url).execute()
        rows = resp.data or []
        return _to_store(rows[0]) if rows else None

    def list(self) -> list[Store]:
        resp = self._table().select("id, name, url").order("name").execute()
        return [_to_store(row) for row in resp.data or []]


def _to_store(row: dict) -> Store:
    return Store(id=row["id"], name=row.get("name") or "", url=row.get("url") or "")
