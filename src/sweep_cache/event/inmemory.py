from __future__ import annotations

import inspect
import logging
from collections import deque
from dataclasses import dataclass
from typing import Callable, Deque, List, Optional

from .base import EventSink
from .types import CacheEvent, CacheEventKind, EventCallback

_logger = logging.getLogger(__name__)


@dataclass(eq=False)
class Subscription:
    kind: Optional[CacheEventKind]
    callback: EventCallback

    def matches(self, event: CacheEvent) -> bool:
        return self.kind is None or self.kind == event.kind


class InMemoryEventSink(EventSink):
    """Observer registry delivering notifications to local subscribers.

    Subscribers run in registration order. A subscriber that raises is logged
    and skipped; the remaining subscribers still receive the event.
    """

    def __init__(self, history_size: int = 100) -> None:
        self._subscriptions: List[Subscription] = []
        self._history: Deque[CacheEvent] = deque(maxlen=history_size)

    @property
    def history(self) -> List[CacheEvent]:
        return list(self._history)

    def subscribe(
        self,
        kind: Optional[CacheEventKind | str],
        callback: EventCallback,
    ) -> Callable[[], None]:
        resolved = CacheEventKind(kind) if kind is not None else None
        subscription = Subscription(kind=resolved, callback=callback)
        self._subscriptions.append(subscription)

        def unsubscribe() -> None:
            if subscription in self._subscriptions:
                self._subscriptions.remove(subscription)

        return unsubscribe

    async def emit(self, event: CacheEvent) -> None:
        self._history.append(event)
        for subscription in list(self._subscriptions):
            if not subscription.matches(event):
                continue
            try:
                result = subscription.callback(event)
                if inspect.isawaitable(result):
                    await result
            except Exception:  # noqa: BLE001 - one consumer must not break delivery
                _logger.warning("Subscriber %r failed on %s", subscription.callback, event.kind.value, exc_info=True)

    async def close(self) -> None:
        self._subscriptions.clear()
