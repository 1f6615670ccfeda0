from __future__ import annotations

import asyncio
import inspect
import logging
import time
import typing as t
from dataclasses import dataclass

from sweep_cache.core.errors import NotFoundError, PopulateFailedError
from sweep_cache.core.keys import canonical_key
from sweep_cache.core.models import CachePolicy, Entry, SweepStats, now_ms
from sweep_cache.event.base import EventSink
from sweep_cache.event.inmemory import InMemoryEventSink
from sweep_cache.event.types import CacheEvent, EvictionReason, ItemEvicted, SweepCompleted
from sweep_cache.monitoring import metrics
from sweep_cache.utils.config import CacheConfig
from sweep_cache.utils.scheduler import PeriodicTask

_logger = logging.getLogger(__name__)

PopulateFn = t.Callable[[], t.Any]
Clock = t.Callable[[], float]


@dataclass(eq=False)
class _Flight:
    """A running population for one key and the number of callers awaiting it."""

    key: str
    task: "asyncio.Task[t.Any]"
    waiters: int = 0


def _snapshot(entries: t.Dict[str, Entry]) -> t.Dict[str, Entry]:
    return {key: entry.copy() if isinstance(entry, Entry) else entry for key, entry in entries.items()}


class TTLCache:
    """In-process key-value cache that evicts entries after a TTL.

    Policies:
    - ``force``: an entry lives ``ttl_minutes`` from the moment it was written
    - ``renew``: every read pushes the expiry back by ``ttl_minutes``

    A periodic sweep (every ``sweep_interval_ms``) evicts stale entries and
    emits ``item-evicted`` / ``sweep-completed`` notifications to the event
    sink. Reads also drop an entry that went stale between sweeps.

    ``get(data_id, populate)`` runs ``populate`` at most once per key at a
    time: concurrent callers for the same missing key share the first
    caller's result or failure. ``populate`` runs outside the cache lock and
    is never timed out, so a hung callback blocks every waiter on that key.
    Cancelling one caller detaches only that caller; ``populate`` is
    cancelled once no caller is left waiting for it.
    """

    def __init__(
        self,
        config: t.Optional[CacheConfig] = None,
        *,
        event_sink: t.Optional[EventSink] = None,
        clock: t.Optional[Clock] = None,
        **options: t.Any,
    ) -> None:
        if config is not None and options:
            raise TypeError("pass either a CacheConfig or keyword options, not both")
        self._config = config or CacheConfig(**options)
        self._events = event_sink if event_sink is not None else InMemoryEventSink()
        self._clock = clock or now_ms
        self._entries: t.Dict[str, Entry] = {}
        self._in_flight: t.Dict[str, _Flight] = {}
        self._lock = asyncio.Lock()
        self._sweeper = PeriodicTask(self._tick, self._config.sweep_interval_ms, name=f"sweep:{self.name}")
        if self._config.auto_start:
            self.start()

    # ------------------------------------------------------------------
    # Configuration / state
    # ------------------------------------------------------------------

    @property
    def name(self) -> str:
        return self._config.name

    @property
    def policy(self) -> CachePolicy:
        return t.cast(CachePolicy, self._config.policy)

    @property
    def ttl_minutes(self) -> float:
        return self._config.ttl_minutes

    @property
    def sweep_interval_ms(self) -> float:
        return self._config.sweep_interval_ms

    @property
    def running(self) -> bool:
        return self._sweeper.running

    @property
    def events(self) -> EventSink:
        return self._events

    @property
    def entries(self) -> t.Dict[str, Entry]:
        """Snapshot of the current key -> entry mapping; entries are copies."""
        return _snapshot(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def key(self, data_id: t.Any) -> str:
        return canonical_key(self.policy, data_id)

    # ------------------------------------------------------------------
    # Sweep lifecycle
    # ------------------------------------------------------------------

    def start(self) -> bool:
        return self._sweeper.start()

    async def stop(self) -> bool:
        return await self._sweeper.stop()

    async def __aenter__(self) -> "TTLCache":
        self.start()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.stop()

    async def _tick(self) -> None:
        await self.sweep(False)

    def _eviction_reason(self, entry: t.Any, now: float, forced: bool) -> t.Optional[EvictionReason]:
        if not isinstance(entry, Entry) or not entry.is_valid:
            return EvictionReason.INVALID
        try:
            if entry.is_stale(self.ttl_minutes, now):
                return EvictionReason.STALE
        except (TypeError, ValueError):
            return EvictionReason.INVALID
        if forced:
            return EvictionReason.FORCED
        return None

    async def sweep(self, forced: bool = False) -> SweepStats:
        """Evict stale, invalid or (when ``forced``) all entries."""
        started = time.perf_counter()
        now = self._clock()
        evicted: t.List[ItemEvicted] = []
        async with self._lock:
            scanned = len(self._entries)
            for key, entry in list(self._entries.items()):
                reason = self._eviction_reason(entry, now, forced)
                if reason is None:
                    continue
                del self._entries[key]
                evicted.append(ItemEvicted(cache_name=self.name, key=key, entry=entry, reason=reason))
            remaining = _snapshot(self._entries)

        stats = SweepStats(deleted_count=len(evicted), scanned_count=scanned)
        metrics.cache_sweep_duration_seconds.observe(time.perf_counter() - started, cache=self.name)
        if not evicted:
            return stats

        _logger.debug("Cache %s swept %d of %d entries", self.name, stats.deleted_count, stats.scanned_count)
        for event in evicted:
            metrics.cache_evictions_total.inc(cache=self.name, reason=event.reason.value)
            await self._emit(event)
        await self._emit(SweepCompleted(cache_name=self.name, remaining=remaining, stats=stats))
        return stats

    async def clear(self) -> SweepStats:
        return await self.sweep(forced=True)

    async def _emit(self, event: CacheEvent) -> None:
        try:
            await self._events.emit(event)
        except Exception:  # noqa: BLE001 - notification failures never reach cache callers
            _logger.warning("Cache %s could not deliver %s", self.name, event.kind.value, exc_info=True)

    # ------------------------------------------------------------------
    # Foreground operations
    # ------------------------------------------------------------------

    def _live_entry(self, key: str, now: float) -> t.Tuple[t.Optional[Entry], t.Optional[ItemEvicted]]:
        """Look up ``key``; expunge it if it fails the liveness check. Caller holds the lock."""
        entry = self._entries.get(key)
        if entry is None:
            return None, None
        reason = self._eviction_reason(entry, now, forced=False)
        if reason is None:
            return entry, None
        del self._entries[key]
        if reason == EvictionReason.STALE:
            reason = EvictionReason.EXPIRED_ON_READ
        metrics.cache_evictions_total.inc(cache=self.name, reason=reason.value)
        return None, ItemEvicted(cache_name=self.name, key=key, entry=entry, reason=reason)

    async def contains(self, data_id: t.Any) -> bool:
        key = self.key(data_id)
        async with self._lock:
            entry, expired = self._live_entry(key, self._clock())
        if expired is not None:
            await self._emit(expired)
        return entry is not None

    async def get(self, data_id: t.Any, populate: t.Optional[PopulateFn] = None) -> t.Any:
        key = self.key(data_id)
        value: t.Any = None
        flight: t.Optional[_Flight] = None
        async with self._lock:
            now = self._clock()
            entry, expired = self._live_entry(key, now)
            if entry is not None:
                if self.policy == CachePolicy.RENEW:
                    entry.renew(now)
                value = entry.value
            elif populate is not None:
                flight = self._in_flight.get(key)
                if flight is None:
                    task = asyncio.get_running_loop().create_task(
                        self._populate(key, populate), name=f"populate:{self.name}:{key}"
                    )
                    flight = _Flight(key=key, task=task)
                    self._in_flight[key] = flight
                flight.waiters += 1

        if expired is not None:
            await self._emit(expired)
        if entry is not None:
            metrics.cache_requests_total.inc(cache=self.name, result="hit")
            return value

        metrics.cache_requests_total.inc(cache=self.name, result="miss")
        if populate is None or flight is None:
            raise NotFoundError(key)
        return await self._join(flight)

    async def _join(self, flight: "_Flight") -> t.Any:
        try:
            # Shielded: one caller's cancellation leaves the population running for the others.
            return await asyncio.shield(flight.task)
        finally:
            flight.waiters -= 1
            if flight.waiters == 0 and not flight.task.done():
                # Last interested caller is gone.
                flight.task.cancel()
                if self._in_flight.get(flight.key) is flight:
                    del self._in_flight[flight.key]

    async def _populate(self, key: str, populate: PopulateFn) -> t.Any:
        started = time.perf_counter()
        _logger.debug("Cache %s populating %s", self.name, key)
        try:
            try:
                value = populate()
                if inspect.isawaitable(value):
                    value = await value
            except Exception as exc:
                metrics.cache_populate_total.inc(cache=self.name, outcome="error")
                raise PopulateFailedError(key, exc) from exc

            metrics.cache_populate_total.inc(cache=self.name, outcome="ok")
            metrics.cache_populate_latency_seconds.observe(time.perf_counter() - started, cache=self.name)
            async with self._lock:
                existing = self._entries.get(key)
                if existing is not None and existing.is_valid:
                    # An explicit set() landed while populating; it wins.
                    value = existing.value
                elif value is not None:
                    self._entries[key] = Entry.create(value, self._clock())
            return value
        finally:
            # Runs on every exit, BaseException included, so the key never stays pinned.
            flight = self._in_flight.get(key)
            if flight is not None and flight.task is asyncio.current_task():
                del self._in_flight[key]

    async def set(self, data_id: t.Any, value: t.Any) -> t.Any:
        key = self.key(data_id)
        async with self._lock:
            if value is None:
                self._entries.pop(key, None)
            else:
                self._entries[key] = Entry.create(value, self._clock())
        return value

    async def delete(self, data_id: t.Any) -> bool:
        key = self.key(data_id)
        async with self._lock:
            return self._entries.pop(key, None) is not None
