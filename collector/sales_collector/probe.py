"""스마트스토어 마케팅 메시지 API 조회 모듈.

API 는 "basisPurchased 를 초과한 구매자 수" 를 문구로만 돌려준다.
조회 실패는 모두 count=0 으로 수렴한다 (fail-open).

재시도 정책:
  1. SSL/TLS 핸드셰이크 계열 오류 → attempt * 0.1 초 후 재시도
  2. 빈 응답 → attempt * 1 초 후 재시도
  3. JSON 객체가 아닌 응답 → attempt * 1 초 후 재시도
  그 외 전송 오류는 재시도하지 않는다.
"""

from __future__ import annotations

import asyncio
import json
import logging
import threading
from typing import Awaitable, Callable

import requests

from sales_collector.config import (
    MARKETING_MESSAGE_PARAMS,
    MARKETING_MESSAGE_URL_TEMPLATE,
    MAX_RETRIES,
    NAVER_COOKIE,
    PRODUCT_REFERER_TEMPLATE,
    REQUEST_TIMEOUT,
    USER_AGENT,
)
from sales_collector.models import ProbeResult
from sales_collector.phrase import find_count, parse_count

logger = logging.getLogger(__name__)

# 실패 분류
TRANSPORT = "transport"
EMPTY = "empty"
MALFORMED = "malformed"

_SSL_MARKERS = ("SSL", "tlsv1 alert")


def default_backoff(failure: str, attempt: int) -> float:
    """재시도 전 대기 시간(초)."""
    if failure == TRANSPORT:
        return 0.1 * attempt
    return 1.0 * attempt


def is_transient_transport_error(exc: Exception) -> bool:
    """핸드셰이크 실패 등 재시도할 가치가 있는 전송 오류인지 판정한다."""
    if isinstance(exc, requests.exceptions.SSLError):
        return True
    message = str(exc)
    return any(marker in message for marker in _SSL_MARKERS)


class ProbeClient:
    """마케팅 메시지 API 클라이언트.

    requests 호출은 블로킹이므로 asyncio.to_thread 로 실행한다.
    세션은 스레드마다 하나씩 둔다.
    """

    def __init__(
        self,
        *,
        cookie: str | None = None,
        session: requests.Session | None = None,
        timeout: float = REQUEST_TIMEOUT,
        url_template: str = MARKETING_MESSAGE_URL_TEMPLATE,
        backoff: Callable[[str, int], float] = default_backoff,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self._cookie = NAVER_COOKIE if cookie is None else cookie
        self._shared_session = session
        self._timeout = timeout
        self._url_template = url_template
        self._backoff = backoff
        self._sleep = sleep
        self._local = threading.local()
        self._sessions_lock = threading.Lock()
        self._owned_sessions: list[requests.Session] = []

    def _session(self) -> requests.Session:
        if self._shared_session is not None:
            return self._shared_session
        sess = getattr(self._local, "session", None)
        if isinstance(sess, requests.Session):
            return sess
        sess = requests.Session()
        self._local.session = sess
        with self._sessions_lock:
            self._owned_sessions.append(sess)
        return sess

    def close(self) -> None:
        """스레드별로 만든 세션을 모두 닫는다. 주입받은 세션은 닫지 않는다."""
        with self._sessions_lock:
            sessions, self._owned_sessions = self._owned_sessions, []
        for sess in sessions:
            sess.close()
        self._local = threading.local()

    def _headers(self, product_id: str) -> dict[str, str]:
        headers = {
            "accept": "application/json, text/plain, */*",
            "referer": PRODUCT_REFERER_TEMPLATE.format(product_id=product_id),
            "user-agent": USER_AGENT,
        }
        if self._cookie:
            headers["cookie"] = self._cookie
        return headers

    def fetch_marketing_message(self, product_id: str, basis: int) -> str:
        """API 를 1회 호출하고 응답 본문을 그대로 반환한다 (블로킹)."""
        url = self._url_template.format(product_id=product_id)
        params = {**MARKETING_MESSAGE_PARAMS, "basisPurchased": basis}
        resp = self._session().get(
            url,
            params=params,
            headers=self._headers(product_id),
            timeout=self._timeout,
        )
        return resp.text or ""

    async def probe(
        self, product_id: str, basis: int, max_attempts: int = MAX_RETRIES
    ) -> ProbeResult:
        """basis 를 초과한 구매자 수를 조회한다.

        Args:
            product_id: 상품번호
            basis: basisPurchased 값 (0 이상, 음수면 조회 없이 count=0)
            max_attempts: 최대 시도 횟수

        Returns:
            ProbeResult. 모든 실패는 count=0.
        """
        if basis < 0:
            logger.error("잘못된 basis: product_id=%s, basis=%d", product_id, basis)
            return ProbeResult(count=0)

        for attempt in range(1, max_attempts + 1):
            logger.info(
                "판매량 조회 시도: product_id=%s, basis=%d, attempt=%d",
                product_id, basis, attempt,
            )
            try:
                body = await asyncio.to_thread(
                    self.fetch_marketing_message, product_id, basis
                )
            except requests.RequestException as e:
                if not is_transient_transport_error(e):
                    logger.error(
                        "판매량 조회 실패: product_id=%s, basis=%d, error=%s",
                        product_id, basis, e,
                    )
                    return ProbeResult(count=0)
                logger.warning(
                    "SSL 오류: product_id=%s, basis=%d, attempt=%d, error=%s",
                    product_id, basis, attempt, e,
                )
                failure = TRANSPORT
            except Exception:
                logger.exception(
                    "판매량 조회 중 예기치 않은 오류: product_id=%s, basis=%d",
                    product_id, basis,
                )
                return ProbeResult(count=0)
            else:
                failure, payload = _decode(body)
                if failure is None:
                    count = parse_count(payload)
                    if count == 0:
                        _warn_no_count(product_id, basis, payload)
                    logger.info(
                        "판매량 조회 결과: product_id=%s, basis=%d, count=%d",
                        product_id, basis, count,
                    )
                    return ProbeResult(count=count)
                logger.warning(
                    "응답 이상(%s): product_id=%s, basis=%d, attempt=%d",
                    failure, product_id, basis, attempt,
                )

            if attempt < max_attempts:
                await self._sleep(self._backoff(failure, attempt))

        logger.warning(
            "재시도 초과로 0 처리: product_id=%s, basis=%d", product_id, basis
        )
        return ProbeResult(count=0)


def _decode(body: str) -> tuple[str | None, dict | None]:
    """응답 본문을 JSON 객체로 디코드한다.

    Returns:
        (실패 분류, payload). 성공 시 실패 분류는 None.
    """
    if not body or not body.strip():
        return EMPTY, None
    try:
        payload = json.loads(body.strip())
    except (json.JSONDecodeError, RecursionError):
        return MALFORMED, None
    if not isinstance(payload, dict):
        return MALFORMED, None
    return None, payload


def _warn_no_count(product_id: str, basis: int, payload: dict) -> None:
    phrase = payload.get("mainPhrase")
    if isinstance(phrase, str) and find_count(phrase) is not None:
        return
    if not phrase:
        logger.warning("mainPhrase 없음: product_id=%s, basis=%d", product_id, basis)
    else:
        logger.warning(
            "판매량 패턴 매칭 실패: product_id=%s, basis=%d, mainPhrase=%s",
            product_id, basis, phrase,
        )
