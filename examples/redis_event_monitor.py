#!/usr/bin/env python3

import json
import time
from typing import Dict, List, Optional

import click
import redis


def _now() -> str:
    return time.strftime("%H:%M:%S")


def normalize_prefix(prefix: str) -> str:
    # RedisEventSink drops trailing colons the same way
    return prefix.rstrip(":")


def stream_head(prefix: str) -> str:
    return f"{normalize_prefix(prefix)}:events:"


def cache_name_from_key(key: str, prefix: str) -> str:
    head = stream_head(prefix)
    return key[len(head):] if key.startswith(head) else key


def list_streams(client: redis.Redis, prefix: str) -> List[str]:
    head = stream_head(prefix)
    keys = client.keys(f"{head}*")
    return sorted(k for k in keys if k.startswith(head))


def stream_tail(client: redis.Redis, key: str, count: int) -> List[Dict]:
    rows = client.xrevrange(key, max="+", min="-", count=count)
    events = []
    for event_id, fields in reversed(rows):
        try:
            payload = json.loads(fields.get("payload", "{}"))
        except ValueError:
            payload = {"raw": fields.get("payload")}
        payload["id"] = event_id
        events.append(payload)
    return events


def describe(event: Dict) -> str:
    if event.get("kind") == "item-evicted":
        return f"{event['id']}  evicted  {event.get('key')}  reason={event.get('reason')}"
    if event.get("kind") == "sweep-completed":
        return (
            f"{event['id']}  sweep    deleted={event.get('deleted_count')} "
            f"scanned={event.get('scanned_count')} remaining={len(event.get('remaining_keys', []))}"
        )
    return f"{event['id']}  {event}"


def clear_streams(client: redis.Redis, prefix: str, cache_name: Optional[str]) -> int:
    keys = [f"{stream_head(prefix)}{cache_name}"] if cache_name else list_streams(client, prefix)
    return client.delete(*keys) if keys else 0


def monitor(client: redis.Redis, prefix: str, interval: float, tail: int) -> None:
    while True:
        click.echo(f"\n[{_now()}] sweep-cache event streams prefix='{prefix}'")
        streams = list_streams(client, prefix)
        if not streams:
            click.echo("  No event streams found.")
        for idx, key in enumerate(streams, start=1):
            cache_name = cache_name_from_key(key, prefix)
            click.echo(f"  [{idx:02d}] {cache_name}  events={client.xlen(key)}")
            for event in stream_tail(client, key, tail):
                click.echo(f"      - {describe(event)}")
        try:
            time.sleep(interval)
        except KeyboardInterrupt:
            break


@click.command()
@click.option("--redis-url", default="redis://localhost:6379/0", help="Redis URL the RedisEventSink writes to")
@click.option("--prefix", default="sweep_cache", help="Stream key prefix used by the sink")
@click.option("--interval", default=2.0, type=float, help="Polling interval seconds")
@click.option("--tail", default=5, type=int, help="Show the N most recent events per cache")
@click.option("--clear", default=None, help="Delete one cache's stream by name, or 'all'")
def main(redis_url: str, prefix: str, interval: float, tail: int, clear: Optional[str]) -> None:
    client = redis.Redis.from_url(redis_url, decode_responses=True)
    prefix = normalize_prefix(prefix)
    if clear:
        removed = clear_streams(client, prefix, None if clear == "all" else clear)
        click.echo(f"Removed {removed} stream(s)")
        return
    monitor(client, prefix, interval, tail)


if __name__ == "__main__":
    main()
