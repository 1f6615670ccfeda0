"""Utility module for scheduling and resilience patterns."""

from .resilience import CircuitBreaker, CircuitBreakerConfig, CircuitState, with_retries
from .scheduler import PeriodicTask

__all__ = [
    "CircuitBreaker",
    "CircuitBreakerConfig",
    "CircuitState",
    "PeriodicTask",
    "with_retries",
]
