from __future__ import annotations

from abc import ABC, abstractmethod

from .types import CacheEvent


class EventSink(ABC):
    """Receives the notifications a cache emits."""

    @abstractmethod
    async def emit(self, event: CacheEvent) -> None:  # pragma: no cover - interface
        raise NotImplementedError

    async def close(self) -> None:
        return None


class NullEventSink(EventSink):
    async def emit(self, event: CacheEvent) -> None:
        return None
