from __future__ import annotations

import json
import logging
import time
import typing as t

from redis.asyncio import Redis

from sweep_cache.utils.resilience import CircuitBreaker, CircuitBreakerConfig, with_retries

from .base import EventSink
from .types import CacheEvent, ItemEvicted

_logger = logging.getLogger(__name__)


class RedisEventSink(EventSink):
    """Publishes cache notifications to Redis Streams.

    - One stream per cache at key: `{prefix}:events:{cache_name}`
    - Fields: `kind`, `key` (empty for sweep summaries), `ts`, `payload` (JSON)
    - Cached values are never published
    """

    def __init__(
        self,
        url: str = "redis://localhost:6379/0",
        *,
        prefix: str = "sweep_cache",
        stream_maxlen: t.Optional[int] = 10_000,
        client: t.Optional[t.Any] = None,
        breaker: t.Optional[CircuitBreaker] = None,
        circuit_breaker_enabled: bool = True,
        retry_attempts: int = 3,
        retry_backoff_ms: t.Optional[t.List[int]] = None,
    ) -> None:
        self._prefix = prefix.rstrip(":")
        self._stream_maxlen = stream_maxlen
        self._client = client if client is not None else Redis.from_url(url, decode_responses=True)
        self._breaker: t.Optional[CircuitBreaker] = None
        if circuit_breaker_enabled:
            self._breaker = breaker or CircuitBreaker(CircuitBreakerConfig(), name="redis-events")
        self._retry_attempts = retry_attempts
        self._retry_backoff_ms = retry_backoff_ms or [100, 500, 2000]

    def stream_key(self, cache_name: str) -> str:
        return f"{self._prefix}:events:{cache_name}"

    def _fields(self, event: CacheEvent) -> t.Dict[str, str]:
        return {
            "kind": event.kind.value,
            "key": event.key if isinstance(event, ItemEvicted) else "",
            "ts": str(int(time.time() * 1000)),
            "payload": json.dumps(event.to_dict(), default=str),
        }

    async def emit(self, event: CacheEvent) -> None:
        stream = self.stream_key(event.cache_name)
        fields = self._fields(event)

        async def _op() -> t.Any:
            if self._stream_maxlen:
                return await self._client.xadd(stream, fields, maxlen=self._stream_maxlen, approximate=True)
            return await self._client.xadd(stream, fields)

        if self._breaker is None:
            await with_retries(_op, self._retry_attempts, self._retry_backoff_ms)
            return
        await self._breaker.run(lambda: with_retries(_op, self._retry_attempts, self._retry_backoff_ms))

    async def read(self, cache_name: str, count: int = 100) -> t.List[t.Dict[str, t.Any]]:
        """Return the most recent notifications for a cache, oldest first."""
        rows = await self._client.xrevrange(self.stream_key(cache_name), max="+", min="-", count=count)
        events: t.List[t.Dict[str, t.Any]] = []
        for event_id, data in reversed(rows):
            payload = data.get("payload") or data.get(b"payload")
            if isinstance(payload, (bytes, bytearray)):
                payload = payload.decode()
            decoded = json.loads(payload) if payload else {}
            decoded["id"] = event_id.decode() if isinstance(event_id, (bytes, bytearray)) else str(event_id)
            events.append(decoded)
        return events

    async def close(self) -> None:
        await self._client.aclose()
