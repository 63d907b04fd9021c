"""스토어 판매량 분석 서비스.

처리 흐름:
  1. 스토어 페이지에서 상품 목록 추출
  2. BATCH_SIZE 개씩 판매량 추정 (배치 사이 BATCH_DELAY 초 대기)
  3. 스토어 단위로 합산
"""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, Sequence

from sales_collector.aggregate import build_store_aggregate
from sales_collector.batch import process_store
from sales_collector.catalog import get_product_list
from sales_collector.config import BATCH_DELAY, BATCH_SIZE
from sales_collector.inference import SalesInferenceEngine
from sales_collector.models import ProductInput, ProductSalesResult, StoreAggregate
from sales_collector.probe import ProbeClient

logger = logging.getLogger(__name__)

UNKNOWN_STORE_NAME = "알 수 없음"


class SalesCollectorService:
    """판매량 추정과 스토어 집계를 묶는다."""

    def __init__(
        self,
        probe_client: ProbeClient | None = None,
        *,
        batch_size: int = BATCH_SIZE,
        batch_delay: float = BATCH_DELAY,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        product_source: Callable[[str], list[ProductInput]] = get_product_list,
    ) -> None:
        self._owns_client = probe_client is None
        self._client = probe_client or ProbeClient()
        self._engine = SalesInferenceEngine(self._client.probe)
        self._batch_size = batch_size
        self._batch_delay = batch_delay
        self._sleep = sleep
        self._product_source = product_source

    def close(self) -> None:
        """직접 만든 ProbeClient 의 세션을 닫는다."""
        if self._owns_client:
            self._client.close()

    async def collect_product(self, product: ProductInput) -> ProductSalesResult:
        """상품 1개의 판매량을 추정한다."""
        return await self._engine.collect(product)

    async def analyze_products(
        self, store_url: str, store_name: str, products: Sequence[ProductInput]
    ) -> StoreAggregate:
        """주어진 상품 목록으로 스토어 집계를 만든다."""
        results = await process_store(
            products,
            self._engine.collect,
            batch_size=self._batch_size,
            batch_delay=self._batch_delay,
            sleep=self._sleep,
        )
        aggregate = build_store_aggregate(store_url, store_name, results)
        logger.info(
            "스토어 집계 완료: %s, 상품 %d 개, today=%d, week=%d, half_year=%d",
            store_name, len(results),
            aggregate.today_sales, aggregate.week_sales, aggregate.half_year_sales,
        )
        return aggregate

    async def analyze_store(
        self, store_url: str, store_name: str = UNKNOWN_STORE_NAME
    ) -> StoreAggregate:
        """스토어 URL 에서 상품을 추출해 판매량을 집계한다."""
        logger.info("스토어 분석 시작: %s (%s)", store_name, store_url)
        products = await asyncio.to_thread(self._product_source, store_url)
        if not products:
            logger.warning("상품이 없습니다: %s (%s)", store_name, store_url)
        return await self.analyze_products(store_url, store_name, products)
