"""스마트스토어 판매량 추정: 메인 엔트리 포인트.

처리 흐름:
  1. 대상 스토어 결정 (--store-id / --store-url / --all)
  2. 스토어별로 상품 목록 추출 → 판매량 추정 → 집계
  3. 결과 JSON 출력 (--output 지정 시 파일)

단일 상품 모드: --product-id, --product-name
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
import time
from datetime import datetime
from pathlib import Path

from sales_collector.config import LOG_DIR
from sales_collector.models import ProductInput, Store
from sales_collector.service import UNKNOWN_STORE_NAME, SalesCollectorService
from sales_collector.stores import default_repository, make_store


def setup_logging() -> None:
    """로깅 초기 설정."""
    log_file = LOG_DIR / f"collector_{datetime.now().strftime('%Y%m%d')}.log"
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        handlers=[
            logging.StreamHandler(sys.stderr),
            logging.FileHandler(log_file, encoding="utf-8"),
        ],
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="smartstore-sales")
    target = parser.add_mutually_exclusive_group()
    target.add_argument("--store-id", help="레지스트리에 등록된 스토어 id")
    target.add_argument("--store-url", help="스토어 URL")
    target.add_argument("--all", action="store_true", help="등록된 전 스토어")
    target.add_argument("--product-id", help="단일 상품 모드의 상품번호")
    parser.add_argument("--store-name", default=UNKNOWN_STORE_NAME)
    parser.add_argument("--product-name", default="")
    parser.add_argument("--stock", type=int, default=0)
    parser.add_argument("--price", type=int, default=0)
    parser.add_argument("--output", default="", help="결과 JSON 파일 경로")
    parser.add_argument(
        "--registry",
        choices=["memory", "supabase"],
        default="memory",
        help="스토어 레지스트리 구현",
    )
    return parser


def _load_repository(kind: str):
    if kind == "supabase":
        from sales_collector.db import SupabaseStoreRepository

        return SupabaseStoreRepository()
    return default_repository()


def _resolve_stores(args: argparse.Namespace) -> list[Store]:
    logger = logging.getLogger(__name__)
    repo = _load_repository(args.registry)
    if args.store_url:
        known = repo.find_by_url(args.store_url)
        if known and args.store_name == UNKNOWN_STORE_NAME:
            return [known]
        return [make_store(args.store_url, args.store_name)]

    if args.all:
        return repo.list()
    if args.store_id:
        store = repo.get(args.store_id)
        if store is None:
            logger.error("등록되지 않은 스토어: %s", args.store_id)
            return []
        return [store]
    return []


async def _collect(args: argparse.Namespace, service: SalesCollectorService) -> list[dict]:
    if args.product_id:
        product = ProductInput(
            product_id=args.product_id,
            name=args.product_name,
            stock_quantity=args.stock,
            price=args.price,
        )
        result = await service.collect_product(product)
        return [result.to_dict()]

    outputs: list[dict] = []
    for store in _resolve_stores(args):
        aggregate = await service.analyze_store(store.url, store.name)
        outputs.append(aggregate.to_dict())
    return outputs


def run(argv: list[str] | None = None, service: SalesCollectorService | None = None) -> int:
    """메인 처리."""
    args = build_parser().parse_args(argv)
    setup_logging()
    logger = logging.getLogger(__name__)
    logger.info("=== 판매량 추정 시작 ===")
    start_time = time.time()

    service = service or SalesCollectorService()
    try:
        outputs = asyncio.run(_collect(args, service))
    except ValueError as e:
        logger.error("잘못된 인자: %s", e)
        return 1
    finally:
        service.close()

    if not outputs:
        logger.warning("분석할 대상이 없습니다. 종료합니다.")
        return 1

    body = outputs if args.all else outputs[0]
    text = json.dumps(body, ensure_ascii=False, indent=2)
    if args.output:
        output_path = Path(args.output)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text(text + "\n", encoding="utf-8")
        logger.info("결과 저장: %s", output_path)
    else:
        print(text)

    elapsed = time.time() - start_time
    logger.info("=== 판매량 추정 완료 ===")
    logger.info("대상: %d 건, 소요 시간: %.1f 초", len(outputs), elapsed)
    return 0


if __name__ == "__main__":
    sys.exit(run())
