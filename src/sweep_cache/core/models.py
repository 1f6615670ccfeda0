from __future__ import annotations

import enum
import time
import typing as t
from dataclasses import dataclass, field, replace

MS_PER_MINUTE = 60_000


def now_ms() -> float:
    """Wall clock in milliseconds."""
    return time.time() * 1000.0


class CachePolicy(str, enum.Enum):
    FORCE = "force"
    RENEW = "renew"

    @classmethod
    def coerce(cls, value: t.Union["CachePolicy", str]) -> "CachePolicy":
        if isinstance(value, cls):
            return value
        return cls(str(value).strip().lower())


@dataclass
class Entry:
    """A cached value plus its timestamps (milliseconds)."""

    value: t.Any
    created_at: float = field(default_factory=now_ms)
    last_renewed_at: float = -1.0

    def __post_init__(self) -> None:
        if self.last_renewed_at < self.created_at:
            self.last_renewed_at = self.created_at

    @classmethod
    def create(cls, value: t.Any, now: t.Optional[float] = None) -> "Entry":
        stamp = now_ms() if now is None else now
        return cls(value=value, created_at=stamp, last_renewed_at=stamp)

    @property
    def is_valid(self) -> bool:
        return self.value is not None

    def is_stale(self, ttl_minutes: float, now: t.Optional[float] = None) -> bool:
        current = now_ms() if now is None else now
        return current - self.last_renewed_at >= ttl_minutes * MS_PER_MINUTE

    def renew(self, now: t.Optional[float] = None) -> None:
        current = now_ms() if now is None else now
        self.last_renewed_at = max(current, self.created_at)

    def copy(self) -> "Entry":
        """Detached copy; changing it leaves the original untouched."""
        return replace(self)


@dataclass
class SweepStats:
    deleted_count: int = 0
    scanned_count: int = 0
