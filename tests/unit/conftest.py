"""Shared fixtures and fakes for unit tests."""

from __future__ import annotations

from unittest.mock import AsyncMock

import pytest

from sweep_cache.cache.ttl_cache import TTLCache
from sweep_cache.core.models import CachePolicy
from sweep_cache.event.inmemory import InMemoryEventSink
from sweep_cache.monitoring import metrics


class FakeClock:
    """Millisecond clock that only moves when told to."""

    def __init__(self, start: float = 1_700_000_000_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float = 0.0, minutes: float = 0.0) -> None:
        self.now += seconds * 1000.0 + minutes * 60_000.0


@pytest.fixture(autouse=True)
def reset_metrics():
    metrics.reset_all()
    yield
    metrics.reset_all()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def sink():
    return InMemoryEventSink()


@pytest.fixture
def make_cache(clock, sink):
    """Build a stopped cache on the fake clock; override any option."""

    def _make(**options) -> TTLCache:
        options.setdefault("name", "test-cache")
        options.setdefault("auto_start", False)
        options.setdefault("policy", CachePolicy.FORCE)
        return TTLCache(event_sink=sink, clock=clock, **options)

    return _make


@pytest.fixture
def mock_redis():
    """Mock redis.asyncio client."""
    client = AsyncMock()
    client.xadd = AsyncMock(return_value="1700000000000-0")
    client.xrevrange = AsyncMock(return_value=[])
    client.aclose = AsyncMock(return_value=None)
    return client
