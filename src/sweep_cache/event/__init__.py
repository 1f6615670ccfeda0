from .base import EventSink, NullEventSink
from .inmemory import InMemoryEventSink
from .redis import RedisEventSink
from .types import (
    CacheEvent,
    CacheEventKind,
    EventCallback,
    EvictionReason,
    ItemEvicted,
    SweepCompleted,
)

__all__ = [
    "CacheEvent",
    "CacheEventKind",
    "EventCallback",
    "EvictionReason",
    "ItemEvicted",
    "SweepCompleted",
    "EventSink",
    "NullEventSink",
    "InMemoryEventSink",
    "RedisEventSink",
]
