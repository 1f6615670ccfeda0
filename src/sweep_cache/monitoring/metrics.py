from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, Dict, List, Tuple


def _label_key(labels: Dict[str, Any]) -> Tuple:
    return tuple(sorted(labels.items()))


@dataclass
class Counter:
    name: str
    help: str
    values: Dict[Tuple, float] = field(default_factory=dict)

    def inc(self, value: float = 1.0, **labels: Any) -> None:
        key = _label_key(labels)
        self.values[key] = self.values.get(key, 0.0) + value

    def get(self, **labels: Any) -> float:
        return self.values.get(_label_key(labels), 0.0)

    def reset(self) -> None:
        self.values.clear()


@dataclass
class Histogram:
    name: str
    help: str
    buckets: List[float]
    counts: Dict[Tuple, List[int]] = field(default_factory=dict)

    def __post_init__(self) -> None:
        # Last bucket catches everything above the largest bound.
        if not self.buckets or self.buckets[-1] != math.inf:
            self.buckets = list(self.buckets) + [math.inf]

    def observe(self, val: float, **labels: Any) -> None:
        key = _label_key(labels)
        if key not in self.counts:
            self.counts[key] = [0 for _ in self.buckets]
        for i, b in enumerate(self.buckets):
            if val <= b:
                self.counts[key][i] += 1
                break

    def count(self, **labels: Any) -> int:
        return sum(self.counts.get(_label_key(labels), []))

    def reset(self) -> None:
        self.counts.clear()


# Predefined metrics
cache_requests_total = Counter("sweep_cache_requests_total", "Cache lookups by result (hit/miss)")
cache_populate_total = Counter("sweep_cache_populate_total", "Populate callback runs by outcome")
cache_evictions_total = Counter("sweep_cache_evictions_total", "Evicted entries by reason")
cache_populate_latency_seconds = Histogram(
    "sweep_cache_populate_latency_seconds",
    "Populate callback latency",
    buckets=[0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 5.0],
)
cache_sweep_duration_seconds = Histogram(
    "sweep_cache_sweep_duration_seconds",
    "Time spent in a single sweep pass",
    buckets=[0.0005, 0.001, 0.002, 0.005, 0.01, 0.02, 0.05],
)

ALL_METRICS = [
    cache_requests_total,
    cache_populate_total,
    cache_evictions_total,
    cache_populate_latency_seconds,
    cache_sweep_duration_seconds,
]


def reset_all() -> None:
    for metric in ALL_METRICS:
        metric.reset()
