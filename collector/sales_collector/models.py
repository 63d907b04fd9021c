"""데이터 모델 정의.

to_dict() 는 대시보드가 기대하는 camelCase 키로 직렬화한다.
"""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class ProbeResult:
    """마케팅 메시지 API 1회 조회 결과."""

    count: int = 0  # 0 = 판매 없음 또는 재시도 후 조회 실패


@dataclass(frozen=True)
class SalesSnapshot:
    """상품 1개의 추정 판매량."""

    today: int = 0
    week: int = 0
    half_year: int = 0

    def to_dict(self) -> dict:
        return {"today": self.today, "week": self.week, "halfYear": self.half_year}


@dataclass(frozen=True)
class ProductInput:
    """스토어 페이지에서 추출한 상품 1개."""

    product_id: str  # 상품번호 (productNo)
    name: str
    stock_quantity: int = 0
    price: int = 0  # 할인가 우선, 없으면 판매가


@dataclass(frozen=True)
class ProductSalesResult:
    """상품 1개의 판매량 추정 결과."""

    product_id: str
    name: str
    stock_quantity: int
    price: int
    sales: SalesSnapshot

    def to_dict(self) -> dict:
        return {
            "productId": self.product_id,
            "name": self.name,
            "stockQuantity": self.stock_quantity,
            "price": self.price,
            "sales": self.sales.to_dict(),
        }


@dataclass
class StoreAggregate:
    """스토어 단위 집계 결과."""

    store_url: str
    store_name: str
    products: list[ProductSalesResult] = field(default_factory=list)
    today_sales: int = 0
    week_sales: int = 0
    half_year_sales: int = 0

    def to_dict(self) -> dict:
        return {
            "storeUrl": self.store_url,
            "storeName": self.store_name,
            "products": [p.to_dict() for p in self.products],
            "todaySales": self.today_sales,
            "weekSales": self.week_sales,
            "halfYearSales": self.half_year_sales,
        }


@dataclass(frozen=True)
class Store:
    """분석 대상 스토어."""

    id: str  # URL 의 스토어 식별자 (예: honey_mk)
    name: str
    url: str

    def to_dict(self) -> dict:
        return {"id": self.id, "name": self.name, "url": self.url}
