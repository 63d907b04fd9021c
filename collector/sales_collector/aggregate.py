"""판매량 검증·스토어 집계 모듈."""

from __future__ import annotations

from typing import Iterable

from sales_collector.models import ProductSalesResult, SalesSnapshot, StoreAggregate


def validate(snapshot: SalesSnapshot) -> SalesSnapshot:
    """today <= week <= half_year 가 되도록 보정한다."""
    week = max(snapshot.week, snapshot.today)
    half_year = max(snapshot.half_year, week)
    return SalesSnapshot(today=snapshot.today, week=week, half_year=half_year)


def sum_sales(products: Iterable[ProductSalesResult]) -> SalesSnapshot:
    """상품별 판매량을 항목별로 합산한다."""
    today = week = half_year = 0
    for p in products:
        today += p.sales.today
        week += p.sales.week
        half_year += p.sales.half_year
    return SalesSnapshot(today=today, week=week, half_year=half_year)


def build_store_aggregate(
    store_url: str, store_name: str, products: list[ProductSalesResult]
) -> StoreAggregate:
    """상품별 결과로부터 스토어 집계를 만든다."""
    totals = sum_sales(products)
    return StoreAggregate(
        store_url=store_url,
        store_name=store_name,
        products=list(products),
        today_sales=totals.today,
        week_sales=totals.week,
        half_year_sales=totals.half_year,
    )
