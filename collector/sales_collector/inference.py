"""판매량 추정 엔진.

마케팅 메시지 API 는 "basis 를 초과한 구매자 수" 만 알려준다.
직전 응답값 + 1 을 다음 basis 로 사용해 값이 더 커지지 않을 때까지
바깥쪽으로 탐색한다 (상품당 최대 3회 조회).

  today == 0:
    basis=1 → first
      first == 0           → week=0, half_year=0
      basis=first+1 → second
        second > first     → week=first, half_year=second
        그 외              → week=0, half_year=first
  today > 0:
    basis=today+1 → w
      w > today            → week=w, half_year=(basis=w+1 의 결과 or w)
      그 외                → week=today, half_year=(w or today)
"""

from __future__ import annotations

import logging
from typing import Awaitable, Callable

from sales_collector.aggregate import validate
from sales_collector.config import INITIAL_BASIS, TODAY_BASIS
from sales_collector.models import (
    ProbeResult,
    ProductInput,
    ProductSalesResult,
    SalesSnapshot,
)

logger = logging.getLogger(__name__)

ProbeFunc = Callable[[str, int], Awaitable[ProbeResult]]


async def infer_sales(probe: ProbeFunc, product_id: str) -> SalesSnapshot:
    """상품 1개의 today / week / half_year 를 추정한다.

    조회 도중 예외가 나면 그때까지 얻은 값(나머지는 0)을 반환한다.
    반환값은 항상 validate() 를 거친다.
    """
    today = week = half_year = 0
    try:
        today = (await probe(product_id, TODAY_BASIS)).count
        logger.info("당일 판매량: product_id=%s, today=%d", product_id, today)

        if today == 0:
            first = (await probe(product_id, INITIAL_BASIS)).count
            if first > 0:
                second = (await probe(product_id, first + 1)).count
                if second > first:
                    week, half_year = first, second
                else:
                    week, half_year = 0, first
        else:
            week_probe = (await probe(product_id, today + 1)).count
            if week_probe > today:
                week = week_probe
                half_year_probe = (await probe(product_id, week_probe + 1)).count
                half_year = half_year_probe or week_probe
            else:
                week = today
                half_year = week_probe or today
    except Exception:
        logger.exception(
            "판매량 추정 중 오류, 부분 결과 사용: product_id=%s, today=%d, week=%d, half_year=%d",
            product_id, today, week, half_year,
        )

    return validate(SalesSnapshot(today=today, week=week, half_year=half_year))


class SalesInferenceEngine:
    """ProbeFunc 를 받아 상품 단위 결과를 만든다."""

    def __init__(self, probe: ProbeFunc) -> None:
        self._probe = probe

    async def collect(self, product: ProductInput) -> ProductSalesResult:
        logger.info("상품 처리 시작: %s (%s)", product.name, product.product_id)
        sales = await infer_sales(self._probe, product.product_id)
        logger.info(
            "상품 처리 완료: %s (%s), today=%d, week=%d, half_year=%d",
            product.name, product.product_id,
            sales.today, sales.week, sales.half_year,
        )
        return ProductSalesResult(
            product_id=product.product_id,
            name=product.name,
            stock_quantity=product.stock_quantity,
            price=product.price,
            sales=sales,
        )
