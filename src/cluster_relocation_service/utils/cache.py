"""Cache of the last BareMetalHost generation handled per host."""

from __future__ import annotations

import os
import time
from typing import Any, Optional

# Cache with TTL support
_cache: dict[str, tuple[Any, float]] = {}
_cache_ttl: float = float(os.getenv("HOST_CACHE_TTL_SECONDS", "300.0"))


def get_cached_object(key: str) -> Optional[Any]:
    """Get an object from cache if it hasn't expired.

    Args:
        key: Cache key (typically "kind:namespace:name")

    Returns:
        Cached object or None if not found or expired
    """
    if key not in _cache:
        return None

    obj, timestamp = _cache[key]
    if time.time() - timestamp > _cache_ttl:
        del _cache[key]
        return None

    return obj


def set_cached_object(key: str, obj: Any) -> None:
    """Store an object in cache with the current timestamp."""
    _cache[key] = (obj, time.time())


def invalidate_cache(key: Optional[str] = None) -> None:
    """Drop one cache entry, or all of them when ``key`` is None."""
    if key is None:
        _cache.clear()
    else:
        _cache.pop(key, None)


def make_cache_key(kind: str, namespace: str, name: str) -> str:
    return f"{kind}:{namespace}:{name}"
