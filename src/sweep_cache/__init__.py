"""sweep_cache

A time-bounded, in-process key-value cache for asyncio applications with
force/renew expiry policies, a periodic eviction sweep, single-flight
population and pluggable eviction notifications.
"""

from .cache import TTLCache
from .core import (
    CacheError,
    CachePolicy,
    CircuitOpenError,
    Entry,
    InvalidConfigError,
    KeyEncodingError,
    NotFoundError,
    PopulateFailedError,
    SweepStats,
    canonical_key,
    stable_serialize,
)
from .event import (
    CacheEvent,
    CacheEventKind,
    EventSink,
    EvictionReason,
    InMemoryEventSink,
    ItemEvicted,
    NullEventSink,
    RedisEventSink,
    SweepCompleted,
)
from .utils.config import CacheConfig, EventSinkConfig, ResilienceConfig, SweepCacheConfig

__all__ = [
    "TTLCache",
    "Entry",
    "CachePolicy",
    "SweepStats",
    "canonical_key",
    "stable_serialize",
    "CacheConfig",
    "EventSinkConfig",
    "ResilienceConfig",
    "SweepCacheConfig",
    "CacheEvent",
    "CacheEventKind",
    "EvictionReason",
    "ItemEvicted",
    "SweepCompleted",
    "EventSink",
    "NullEventSink",
    "InMemoryEventSink",
    "RedisEventSink",
    "CacheError",
    "NotFoundError",
    "PopulateFailedError",
    "InvalidConfigError",
    "KeyEncodingError",
    "CircuitOpenError",
]

__version__ = "0.1.0"
