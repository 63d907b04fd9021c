"""스토어 레지스트리 (인메모리)."""

from __future__ import annotations

import logging

from sales_collector.catalog import extract_store_slug
from sales_collector.models import Store

logger = logging.getLogger(__name__)

DEFAULT_STORES: list[tuple[str, str]] = [
    ("https://smartstore.naver.com/honey_mk/", "꿀달달"),
    ("https://smartstore.naver.com/minimalstudio", "미니멀스튜디오"),
    ("https://smartstore.naver.com/qweasdcziuoiasjlksdwe", "꿀밤선배"),
    ("https://smartstore.naver.com/codewiner", "코드위너"),
]


def make_store(url: str, name: str, store_id: str | None = None) -> Store:
    """URL 로부터 Store 를 만든다. id 를 생략하면 URL 의 스토어 식별자를 쓴다."""
    sid = store_id or extract_store_slug(url)
    if not sid:
        raise ValueError(f"store id cannot be derived from url: {url}")
    return Store(id=sid, name=name, url=url)


class StoreRepository:
    """스토어 추가·조회."""

    def __init__(self, stores: list[Store] | None = None) -> None:
        self._stores: dict[str, Store] = {}
        for store in stores or []:
            self.add(store)

    def add(self, store: Store) -> Store:
        if store.id in self._stores:
            raise ValueError(f"store already registered: {store.id}")
        self._stores[store.id] = store
        logger.info("스토어 등록: %s (%s)", store.name, store.url)
        return store

    def get(self, store_id: str) -> Store | None:
        return self._stores.get(store_id)

    def find_by_url(self, url: str) -> Store | None:
        slug = extract_store_slug(url)
        for store in self._stores.values():
            if store.url == url or (slug and store.id == slug):
                return store
        return None

    def list(self) -> list[Store]:
        return list(self._stores.values())


def default_repository() -> StoreRepository:
    """기본 스토어 목록으로 초기화된 레지스트리."""
    return StoreRepository([make_store(url, name) for url, name in DEFAULT_STORES])
