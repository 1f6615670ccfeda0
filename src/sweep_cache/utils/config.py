from __future__ import annotations

import dataclasses
import os
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Dict, List, Mapping, Optional, Union

from sweep_cache.core.errors import InvalidConfigError
from sweep_cache.core.models import CachePolicy

if TYPE_CHECKING:
    from sweep_cache.event.base import EventSink
    from sweep_cache.utils.resilience import CircuitBreaker


def _positive(name: str, value: Any) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise InvalidConfigError(f"{name} must be a number, got {value!r}")
    if not value > 0:
        raise InvalidConfigError(f"{name} must be > 0, got {value!r}")
    return value


@dataclass
class CacheConfig:
    name: str = "unnamed-cache"
    policy: Union[CachePolicy, str] = CachePolicy.FORCE
    ttl_minutes: float = 1
    sweep_interval_ms: float = 1000
    auto_start: bool = True

    def __post_init__(self) -> None:
        try:
            self.policy = CachePolicy.coerce(self.policy)
        except ValueError as exc:
            raise InvalidConfigError(f"unknown cache policy {self.policy!r}") from exc
        _positive("ttl_minutes", self.ttl_minutes)
        _positive("sweep_interval_ms", self.sweep_interval_ms)
        self.name = str(self.name)


@dataclass
class EventSinkConfig:
    type: str = "memory"  # memory | redis | none
    redis_url: str = "redis://localhost:6379/0"
    prefix: str = "sweep_cache"
    stream_maxlen: Optional[int] = 10_000
    history_size: int = 100

    def __post_init__(self) -> None:
        self.type = self.type.strip().lower()
        if self.type not in {"memory", "redis", "none"}:
            raise InvalidConfigError(f"unknown event sink type {self.type!r}")


@dataclass
class ResilienceConfig:
    circuit_breaker_enabled: bool = True
    failure_threshold: int = 5
    reset_timeout_seconds: float = 30.0
    retry_max_attempts: int = 3
    retry_backoff_ms: List[int] = dataclasses.field(default_factory=lambda: [100, 500, 2000])


@dataclass
class SweepCacheConfig:
    cache: CacheConfig = dataclasses.field(default_factory=CacheConfig)
    events: EventSinkConfig = dataclasses.field(default_factory=EventSinkConfig)
    resilience: ResilienceConfig = dataclasses.field(default_factory=ResilienceConfig)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "SweepCacheConfig":
        def build(dc_cls, key):
            values = data.get(key) or {}
            known = {f.name for f in dataclasses.fields(dc_cls)}
            unknown = set(values) - known
            if unknown:
                raise InvalidConfigError(f"unknown {key} option(s): {', '.join(sorted(unknown))}")
            return dc_cls(**values)

        return cls(
            cache=build(CacheConfig, "cache"),
            events=build(EventSinkConfig, "events"),
            resilience=build(ResilienceConfig, "resilience"),
        )

    @classmethod
    def from_env(cls, prefix: str = "SWEEP_CACHE_", environ: Optional[Mapping[str, str]] = None) -> "SweepCacheConfig":
        env = os.environ if environ is None else environ

        def get(name: str) -> Optional[str]:
            raw = env.get(prefix + name)
            return raw.strip() if raw is not None else None

        def number(name: str) -> Optional[float]:
            raw = get(name)
            if raw is None:
                return None
            try:
                return float(raw)
            except ValueError as exc:
                raise InvalidConfigError(f"{prefix}{name} must be a number, got {raw!r}") from exc

        cache: Dict[str, Any] = {}
        if get("NAME") is not None:
            cache["name"] = get("NAME")
        if get("POLICY") is not None:
            cache["policy"] = get("POLICY")
        for field_name, env_name in (("ttl_minutes", "TTL_MINUTES"), ("sweep_interval_ms", "SWEEP_INTERVAL_MS")):
            value = number(env_name)
            if value is not None:
                cache[field_name] = value
        if get("AUTO_START") is not None:
            cache["auto_start"] = get("AUTO_START").lower() in {"1", "true", "yes", "y", "on"}

        events: Dict[str, Any] = {}
        if get("EVENT_SINK") is not None:
            events["type"] = get("EVENT_SINK")
        if get("REDIS_URL") is not None:
            events["redis_url"] = get("REDIS_URL")
        if get("REDIS_PREFIX") is not None:
            events["prefix"] = get("REDIS_PREFIX")

        return cls.from_dict({"cache": cache, "events": events})

    def build_event_sink(self) -> "EventSink":
        return build_event_sink(self.events, self.resilience)


def build_circuit_breaker(config: ResilienceConfig) -> "CircuitBreaker":
    from sweep_cache.utils.resilience import CircuitBreaker, CircuitBreakerConfig

    return CircuitBreaker(
        CircuitBreakerConfig(
            failure_threshold=config.failure_threshold,
            reset_timeout_seconds=config.reset_timeout_seconds,
        ),
        name="redis-events",
    )


def build_event_sink(events: EventSinkConfig, resilience: Optional[ResilienceConfig] = None) -> "EventSink":
    # Imported here: the event package depends on this module's siblings.
    from sweep_cache.event import InMemoryEventSink, NullEventSink, RedisEventSink

    if events.type == "none":
        return NullEventSink()
    if events.type == "redis":
        resilience = resilience or ResilienceConfig()
        return RedisEventSink(
            events.redis_url,
            prefix=events.prefix,
            stream_maxlen=events.stream_maxlen,
            breaker=build_circuit_breaker(resilience),
            circuit_breaker_enabled=resilience.circuit_breaker_enabled,
            retry_attempts=resilience.retry_max_attempts,
            retry_backoff_ms=resilience.retry_backoff_ms,
        )
    return InMemoryEventSink(history_size=events.history_size)
