from __future__ import annotations


class CacheError(Exception):
    """Base error for sweep-cache."""


class NotFoundError(CacheError):
    """Raised when a key has no entry and no populate callback was given."""

    def __init__(self, key: str) -> None:
        super().__init__(f"no cache entry for key {key}")
        self.key = key


class PopulateFailedError(CacheError):
    """Raised to every caller waiting on a populate callback that failed."""

    def __init__(self, key: str, cause: BaseException) -> None:
        super().__init__(f"populate failed for key {key}: {cause!r}")
        self.key = key
        self.cause = cause


class InvalidConfigError(CacheError, ValueError):
    """Raised when cache configuration is rejected at construction time."""


class KeyEncodingError(CacheError, TypeError):
    """Raised when an identifier cannot be turned into a canonical key."""


class CircuitOpenError(CacheError):
    """Raised when a circuit breaker refuses a call."""
