from __future__ import annotations

import enum
import typing as t
from dataclasses import dataclass, field

from sweep_cache.core.models import Entry, SweepStats, now_ms


class CacheEventKind(str, enum.Enum):
    ITEM_EVICTED = "item-evicted"
    SWEEP_COMPLETED = "sweep-completed"


class EvictionReason(str, enum.Enum):
    FORCED = "forced"
    STALE = "stale"
    INVALID = "invalid"
    EXPIRED_ON_READ = "expired-on-read"


@dataclass
class ItemEvicted:
    cache_name: str
    key: str
    entry: Entry
    reason: EvictionReason = EvictionReason.STALE
    timestamp: float = field(default_factory=now_ms)
    kind: t.ClassVar[CacheEventKind] = CacheEventKind.ITEM_EVICTED

    def to_dict(self) -> t.Dict[str, t.Any]:
        # Values stay in-process; only metadata leaves.
        return {
            "kind": self.kind.value,
            "cache": self.cache_name,
            "key": self.key,
            "reason": self.reason.value,
            "created_at": getattr(self.entry, "created_at", None),
            "last_renewed_at": getattr(self.entry, "last_renewed_at", None),
            "timestamp": self.timestamp,
        }


@dataclass
class SweepCompleted:
    cache_name: str
    remaining: t.Dict[str, Entry]
    stats: SweepStats
    timestamp: float = field(default_factory=now_ms)
    kind: t.ClassVar[CacheEventKind] = CacheEventKind.SWEEP_COMPLETED

    def to_dict(self) -> t.Dict[str, t.Any]:
        return {
            "kind": self.kind.value,
            "cache": self.cache_name,
            "deleted_count": self.stats.deleted_count,
            "scanned_count": self.stats.scanned_count,
            "remaining_keys": sorted(self.remaining),
            "timestamp": self.timestamp,
        }


CacheEvent = t.Union[ItemEvicted, SweepCompleted]
EventCallback = t.Callable[[CacheEvent], t.Union[None, t.Awaitable[None]]]
