#!/usr/bin/env python3

import asyncio
import logging
import random
import time

import click

from sweep_cache import CacheEventKind, InMemoryEventSink, TTLCache
from sweep_cache.monitoring import metrics
from sweep_cache.utils.config import CacheConfig

logger = logging.getLogger(__name__)


async def fetch_profile(user_id: int, delay: float) -> dict:
    # Stands in for a slow remote call
    await asyncio.sleep(delay)
    return {"id": user_id, "score": random.randint(0, 100), "fetched_at": time.strftime("%H:%M:%S")}


async def run_demo(config: CacheConfig, clients: int, users: int, rounds: int, delay: float) -> None:
    sink = InMemoryEventSink()
    sink.subscribe(
        CacheEventKind.ITEM_EVICTED,
        lambda e: logger.info("evicted %s (%s)", e.key, e.reason.value),
    )
    sink.subscribe(
        CacheEventKind.SWEEP_COMPLETED,
        lambda e: logger.info("sweep removed %d of %d", e.stats.deleted_count, e.stats.scanned_count),
    )

    async with TTLCache(config, event_sink=sink) as cache:
        for round_no in range(1, rounds + 1):
            started = time.perf_counter()
            calls = [
                cache.get({"user": i % users}, lambda uid=i % users: fetch_profile(uid, delay))
                for i in range(clients)
            ]
            results = await asyncio.gather(*calls)
            elapsed = time.perf_counter() - started
            click.echo(f"round {round_no}: {len(results)} lookups, {len(cache)} cached, {elapsed:.3f}s")
            await asyncio.sleep(config.sweep_interval_ms / 1000.0)

        stats = await cache.clear()
        click.echo(f"cleared {stats.deleted_count} entries")

    hits = metrics.cache_requests_total.get(cache=config.name, result="hit")
    misses = metrics.cache_requests_total.get(cache=config.name, result="miss")
    populates = metrics.cache_populate_total.get(cache=config.name, outcome="ok")
    click.echo(f"hits={hits:.0f} misses={misses:.0f} populate_calls={populates:.0f}")


@click.command()
@click.option("--name", default="demo-cache", help="Cache name used in logs and events")
@click.option("--policy", type=click.Choice(["force", "renew"], case_sensitive=False), default="force")
@click.option("--ttl-minutes", default=0.02, type=float, help="Entry lifetime in minutes")
@click.option("--sweep-interval-ms", default=250, type=int, help="Sweep cadence in milliseconds")
@click.option("--clients", default=50, type=int, help="Concurrent lookups per round")
@click.option("--users", default=5, type=int, help="Distinct keys per round")
@click.option("--rounds", default=8, type=int, help="Number of rounds to run")
@click.option("--delay", default=0.2, type=float, help="Simulated populate latency in seconds")
@click.option(
    "--log-level",
    default="INFO",
    help="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
)
def main(
    name: str,
    policy: str,
    ttl_minutes: float,
    sweep_interval_ms: int,
    clients: int,
    users: int,
    rounds: int,
    delay: float,
    log_level: str,
) -> None:
    logging.basicConfig(
        level=getattr(logging, log_level.upper()),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    config = CacheConfig(
        name=name,
        policy=policy,
        ttl_minutes=ttl_minutes,
        sweep_interval_ms=sweep_interval_ms,
        auto_start=False,
    )
    asyncio.run(run_demo(config, clients, users, rounds, delay))


if __name__ == "__main__":
    main()
