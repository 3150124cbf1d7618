# tests/conftest.py
import pytest
from unittest.mock import AsyncMock, MagicMock


class FakeClock:
    """
    Monotonic clock whose time only moves when `sleep` is awaited.
    Lets the poller run through minutes of waiting instantly.
    """
    def __init__(self):
        self.now = 0.0
        self.sleeps = []

    def __call__(self) -> float:
        return self.now

    async def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def compose_client():
    """
    A Compose client double usable with 'async with'.
    Every API method is an AsyncMock; the listing starts empty.
    """
    client = MagicMock()
    client.__aenter__ = AsyncMock(return_value=client)
    client.__aexit__ = AsyncMock(return_value=False)
    client.add_whitelist = AsyncMock(return_value={"id": "recipe-1", "status": "running"})
    client.delete_whitelist = AsyncMock(return_value={"id": "recipe-2", "status": "running"})
    client.get_whitelist = AsyncMock(return_value=[])
    return client
