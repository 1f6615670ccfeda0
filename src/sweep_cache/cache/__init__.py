from .ttl_cache import TTLCache

__all__ = ["TTLCache"]
