"""스마트스토어 판매량 추정 수집기."""
