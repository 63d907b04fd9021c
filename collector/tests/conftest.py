"""테스트 공용 픽스처."""

import pytest


class FakeSleep:
    """asyncio.sleep 대체. 대기 시간만 기록한다."""

    def __init__(self):
        self.delays: list[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


@pytest.fixture
def fake_sleep():
    return FakeSleep()
