"""설정 모듈: 환경변수·상수 정의."""

import os
from pathlib import Path

from dotenv import load_dotenv

# .env 는 프로젝트 루트에 배치
_PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent
load_dotenv(_PROJECT_ROOT / ".env")

# --- 네이버 세션 ---
NAVER_COOKIE: str = os.getenv("NAVER_COOKIE", "")

# --- Supabase (스토어 레지스트리, 선택) ---
SUPABASE_URL: str | None = os.getenv("SUPABASE_URL")
SUPABASE_SECRET_KEY: str | None = os.getenv("SUPABASE_SECRET_KEY")

# --- 스마트스토어 API ---
MARKETING_MESSAGE_URL_TEMPLATE = (
    "https://smartstore.naver.com/i/v1/marketing-message/{product_id}"
)
MARKETING_MESSAGE_PARAMS = {
    "currentPurchaseType": "Repaid",
    "usePurchased": "true",
}
PRODUCT_REFERER_TEMPLATE = "https://smartstore.naver.com/product/{product_id}"

# --- User-Agent ---
USER_AGENT = "Mozilla/5.0"
STORE_USER_AGENT = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) "
    "AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/134.0.0.0 Safari/537.36"
)

# --- 판매량 추정 ---
TODAY_BASIS = 0
INITIAL_BASIS = 1
MAX_RETRIES = int(os.getenv("MAX_RETRIES", "3"))

# --- 배치 설정 ---
BATCH_SIZE = int(os.getenv("BATCH_SIZE", "5"))
BATCH_DELAY = float(os.getenv("BATCH_DELAY", "2.0"))  # 초

# --- 요청 설정 ---
REQUEST_TIMEOUT = float(os.getenv("REQUEST_TIMEOUT", "15"))  # 초

# --- 로그 ---
LOG_DIR = Path(__file__).resolve().parent.parent / "logs"
LOG_DIR.mkdir(exist_ok=True)
