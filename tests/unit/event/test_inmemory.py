"""Unit tests for the in-memory observer registry."""

import pytest

from sweep_cache.core.models import Entry, SweepStats
from sweep_cache.event.inmemory import InMemoryEventSink
from sweep_cache.event.types import CacheEventKind, ItemEvicted, SweepCompleted


def evicted(key="k"):
    return ItemEvicted(cache_name="c", key=key, entry=Entry.create("v", now=0.0))


def completed():
    return SweepCompleted(cache_name="c", remaining={}, stats=SweepStats(1, 1))


@pytest.mark.asyncio
class TestInMemoryEventSink:
    async def test_filtered_subscription(self):
        sink = InMemoryEventSink()
        items, sweeps = [], []
        sink.subscribe(CacheEventKind.ITEM_EVICTED, items.append)
        sink.subscribe("sweep-completed", sweeps.append)

        await sink.emit(evicted())
        await sink.emit(completed())

        assert [e.key for e in items] == ["k"]
        assert len(sweeps) == 1

    async def test_async_callbacks(self):
        sink = InMemoryEventSink()
        seen = []

        async def on_event(event):
            seen.append(event.kind)

        sink.subscribe(None, on_event)
        await sink.emit(evicted())

        assert seen == [CacheEventKind.ITEM_EVICTED]

    async def test_unsubscribe(self):
        sink = InMemoryEventSink()
        seen = []
        unsubscribe = sink.subscribe(None, seen.append)

        await sink.emit(evicted("a"))
        unsubscribe()
        unsubscribe()
        await sink.emit(evicted("b"))

        assert [e.key for e in seen] == ["a"]

    async def test_delivery_order(self):
        sink = InMemoryEventSink()
        order = []
        sink.subscribe(None, lambda e: order.append(("first", e.key)))
        sink.subscribe(None, lambda e: order.append(("second", e.key)))

        await sink.emit(evicted("x"))
        await sink.emit(evicted("y"))

        assert order == [("first", "x"), ("second", "x"), ("first", "y"), ("second", "y")]

    async def test_history_is_bounded(self):
        sink = InMemoryEventSink(history_size=2)
        for key in "abc":
            await sink.emit(evicted(key))

        assert [e.key for e in sink.history] == ["b", "c"]

    async def test_unknown_kind_rejected(self):
        sink = InMemoryEventSink()
        with pytest.raises(ValueError):
            sink.subscribe("cleared", print)

    async def test_close_drops_subscribers(self):
        sink = InMemoryEventSink()
        seen = []
        sink.subscribe(None, seen.append)

        await sink.close()
        await sink.emit(evicted())

        assert seen == []


def test_event_payloads_exclude_values():
    payload = evicted().to_dict()
    assert payload["kind"] == "item-evicted"
    assert payload["key"] == "k"
    assert "value" not in payload

    summary = SweepCompleted(
        cache_name="c",
        remaining={"b": Entry.create(1), "a": Entry.create(2)},
        stats=SweepStats(deleted_count=3, scanned_count=5),
    ).to_dict()
    assert summary["remaining_keys"] == ["a", "b"]
    assert summary["deleted_count"] == 3
    assert summary["scanned_count"] == 5
