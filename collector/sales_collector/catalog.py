"""스마트스토어 스토어 페이지에서 상품 목록을 추출하는 모듈.

취득 전략:
  1. <script> 안의 window.__PRELOADED_STATE__ JSON 파싱 (BeautifulSoup 로 탐색, 주전략)
  2. HTML 전체에 대한 정규식 매칭 (폴백)

상품 위치 (앞에서부터 우선):
  widgetContents.newProductWidget.A.data
  widgetContents.wholeProductWidget.A.data.simpleProducts
  widgetContents.productList.A.data
"""

from __future__ import annotations

import json
import logging
import re

import requests
from bs4 import BeautifulSoup

from sales_collector.config import NAVER_COOKIE, REQUEST_TIMEOUT, STORE_USER_AGENT
from sales_collector.models import ProductInput

logger = logging.getLogger(__name__)

_STATE_MARKER = "window.__PRELOADED_STATE__"

_SCRIPT_STATE_PATTERN = re.compile(
    r"window\.__PRELOADED_STATE__\s*=\s*(\{.*\})\s*;?\s*$", re.DOTALL
)
_HTML_STATE_PATTERN = re.compile(
    r"window\.__PRELOADED_STATE__\s*=\s*(\{.+?\})\s*;?\s*</script>", re.DOTALL
)

# smartstore.naver.com/{store_slug}/... 에서 추출
_STORE_URL_PATTERN = re.compile(
    r"https?://(?:m\.)?smartstore\.naver\.com/([^/?#]+)"
)

_PRODUCT_PATHS: list[tuple[str, tuple[str, ...]]] = [
    ("신상품 위젯", ("widgetContents", "newProductWidget", "A", "data")),
    ("전체상품 위젯", ("widgetContents", "wholeProductWidget", "A", "data", "simpleProducts")),
    ("상품 리스트", ("widgetContents", "productList", "A", "data")),
]


def fetch_store_page(store_url: str) -> str | None:
    """스토어 페이지 HTML 을 가져온다.

    Returns:
        HTML 문자열. 실패 시 None.
    """
    headers = {
        "User-Agent": STORE_USER_AGENT,
        "Accept-Language": "ko-KR,ko;q=0.9,en-US;q=0.8,en;q=0.7",
        "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
    }
    if NAVER_COOKIE:
        headers["Cookie"] = NAVER_COOKIE

    try:
        resp = requests.get(store_url, headers=headers, timeout=REQUEST_TIMEOUT)
        resp.raise_for_status()
        return resp.text
    except requests.RequestException as e:
        logger.error("스토어 페이지 취득 실패: store_url=%s, error=%s", store_url, e)
        return None


def parse_product_list(html: str) -> list[ProductInput]:
    """스토어 페이지 HTML 에서 상품 목록을 추출한다."""
    state = _load_preloaded_state(html)
    if state is None:
        logger.error("PRELOADED_STATE 를 찾을 수 없습니다")
        return []

    for label, path in _PRODUCT_PATHS:
        items = _deep_get(state, *path)
        if isinstance(items, list) and items:
            logger.info("%s 에서 상품 발견: %d 개", label, len(items))
            products = [p for p in (_to_product(item) for item in items) if p]
            logger.info("상품 추출 완료: %d 개", len(products))
            return products

    logger.error("어떤 경로에서도 상품을 찾을 수 없습니다")
    return []


def get_product_list(store_url: str) -> list[ProductInput]:
    """스토어 URL 로부터 상품 목록을 얻는다. 실패 시 빈 리스트."""
    html = fetch_store_page(store_url)
    if html is None:
        return []
    products = parse_product_list(html)
    logger.info("%s: %d 개 상품", store_url, len(products))
    return products


def extract_store_slug(url: str) -> str:
    """스토어 URL 에서 스토어 식별자를 추출한다.

    Returns:
        식별자 (예: honey_mk). 추출 실패 시 "".
    """
    m = _STORE_URL_PATTERN.search(url)
    if m:
        return m.group(1)
    return ""


def _load_preloaded_state(html: str) -> dict | None:
    soup = BeautifulSoup(html, "html.parser")
    raw: str | None = None
    for script in soup.find_all("script"):
        text = script.string or script.get_text() or ""
        if _STATE_MARKER not in text:
            continue
        m = _SCRIPT_STATE_PATTERN.search(text.strip())
        if m:
            raw = m.group(1)
            break

    if raw is None:
        logger.warning("<script> 탐색 실패. HTML 정규식으로 폴백")
        m = _HTML_STATE_PATTERN.search(html)
        if not m:
            return None
        raw = m.group(1)

    try:
        state = json.loads(raw)
    except json.JSONDecodeError as e:
        logger.error("PRELOADED_STATE JSON 파싱 실패: %s", e)
        return None
    return state if isinstance(state, dict) else None


def _to_product(item) -> ProductInput | None:
    if not isinstance(item, dict):
        return None
    product_no = item.get("productNo")
    if product_no is None or product_no == "":
        return None

    price = _deep_get(item, "benefitsView", "discountedSalePrice")
    if price is None:
        price = item.get("salePrice")
    stock = item.get("stockQuantity")

    return ProductInput(
        product_id=str(product_no),
        name=item.get("name") or "",
        stock_quantity=_to_int(stock, "stockQuantity", product_no),
        price=_to_int(price, "price", product_no),
    )


def _to_int(value, field: str, product_no) -> int:
    if value is None:
        return 0
    try:
        return int(value)
    except (TypeError, ValueError):
        logger.warning("%s 값이 숫자가 아닙니다: productNo=%s, value=%r", field, product_no, value)
        return 0


def _deep_get(d: dict, *keys: str):
    """중첩된 dict 에서 안전하게 값을 꺼낸다."""
    for key in keys:
        if not isinstance(d, dict):
            return None
        d = d.get(key)
    return d
