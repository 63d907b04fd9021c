"""배치 처리 모듈.

상품 목록을 BATCH_SIZE 개씩 나눠 배치 안에서는 동시에 조회하고,
배치 사이에는 BATCH_DELAY 초 대기한다 (업스트림 부하 완화).
"""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, Iterator, Sequence, TypeVar

from sales_collector.config import BATCH_DELAY, BATCH_SIZE
from sales_collector.models import ProductInput, ProductSalesResult, SalesSnapshot

logger = logging.getLogger(__name__)

T = TypeVar("T")

CollectFunc = Callable[[ProductInput], Awaitable[ProductSalesResult]]


def chunked(items: Sequence[T], size: int) -> Iterator[list[T]]:
    """items 를 size 개씩 순서대로 자른다."""
    if size < 1:
        raise ValueError(f"batch size must be >= 1, got {size}")
    for i in range(0, len(items), size):
        yield list(items[i:i + size])


def _zero_result(product: ProductInput) -> ProductSalesResult:
    return ProductSalesResult(
        product_id=product.product_id,
        name=product.name,
        stock_quantity=product.stock_quantity,
        price=product.price,
        sales=SalesSnapshot(),
    )


async def process_store(
    products: Sequence[ProductInput],
    collect: CollectFunc,
    *,
    batch_size: int = BATCH_SIZE,
    batch_delay: float = BATCH_DELAY,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> list[ProductSalesResult]:
    """전 상품의 판매량을 배치 단위로 추정한다.

    Returns:
        입력과 같은 순서의 결과 리스트. 실패한 상품은 판매량 0.
    """
    batches = list(chunked(products, batch_size))
    results: list[ProductSalesResult] = []

    for index, batch in enumerate(batches, start=1):
        logger.info("배치 처리 중: %d/%d (%d 개 상품)", index, len(batches), len(batch))

        outcomes = await asyncio.gather(
            *(collect(p) for p in batch), return_exceptions=True
        )
        for product, outcome in zip(batch, outcomes):
            if isinstance(outcome, BaseException):
                logger.error(
                    "상품 처리 실패, 0 으로 기록: %s (%s), error=%r",
                    product.name, product.product_id, outcome,
                )
                results.append(_zero_result(product))
            else:
                results.append(outcome)

        if index < len(batches):
            await sleep(batch_delay)

    return results
