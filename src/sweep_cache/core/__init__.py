"""Core data model, canonical keys and errors."""

from .errors import (
    CacheError,
    CircuitOpenError,
    InvalidConfigError,
    KeyEncodingError,
    NotFoundError,
    PopulateFailedError,
)
from .keys import canonical_key, stable_serialize
from .models import CachePolicy, Entry, SweepStats, now_ms

__all__ = [
    # Models
    "Entry",
    "CachePolicy",
    "SweepStats",
    "now_ms",
    # Keys
    "canonical_key",
    "stable_serialize",
    # Errors
    "CacheError",
    "NotFoundError",
    "PopulateFailedError",
    "InvalidConfigError",
    "KeyEncodingError",
    "CircuitOpenError",
]
