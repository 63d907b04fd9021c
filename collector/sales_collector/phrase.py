"""마케팅 문구 파서.

예: "최근 1주간 1,234명이 구매했어요" → 1234
"""

from __future__ import annotations

import re

# 천 단위 구분자(,)를 포함한 숫자 + "명"
_COUNT_PATTERN = re.compile(r"([\d,]+)명")


def find_count(phrase: str) -> int | None:
    """문구에서 구매자 수를 추출한다.

    Returns:
        구매자 수. 패턴이 없거나 정수로 변환할 수 없으면 None.
    """
    m = _COUNT_PATTERN.search(phrase)
    if not m:
        return None
    digits = m.group(1).replace(",", "")
    if not digits:
        return None
    try:
        return int(digits, 10)
    except ValueError:
        # int 변환 자릿수 상한 초과
        return None


def parse_count(payload) -> int:
    """API 응답의 mainPhrase 에서 구매자 수를 추출한다.

    mainPhrase 가 없거나 패턴이 맞지 않으면 0 을 반환한다 (로그는 호출측에서).
    """
    if not isinstance(payload, dict):
        return 0
    phrase = payload.get("mainPhrase")
    if not phrase or not isinstance(phrase, str):
        return 0
    return find_count(phrase) or 0
