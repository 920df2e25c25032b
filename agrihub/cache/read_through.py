"""Read-through caching around an expensive computation."""

from __future__ import annotations

from datetime import timedelta
from typing import Any, Callable, Optional, TypeVar

from agrihub.cache.store import CacheStore
from agrihub.errors import CacheError

T = TypeVar("T")


def get_or_compute(
    cache: CacheStore,
    key: str,
    ttl: timedelta,
    compute: Callable[[], T],
    *,
    dump: Optional[Callable[[T], Any]] = None,
    load: Optional[Callable[[Any], T]] = None,
) -> T:
    """Return the cached value under *key*, else ``compute()`` and store it.

    A hit never invokes *compute*.  Cache failures on either side are printed
    and ignored; errors raised by *compute* propagate untouched.

    Args:
        cache: The cache store (may be unavailable).
        key: Fully derived cache key (see :mod:`agrihub.cache.keys`).
        ttl: Lifetime of the stored entry.
        compute: Zero-argument callable producing the live result.
        dump: Converts the result into a cacheable structure.  Identity when
            omitted.
        load: Rebuilds a result from the cached structure.  Identity when
            omitted.
    """
    try:
        if cache.exists(key):
            cached = cache.get(key)
            if cached is not None:
                return load(cached) if load else cached
    except CacheError as exc:
        print(f"[CACHE] read failed for {key}: {exc}")
    except (ValueError, TypeError) as exc:
        # Stale entry from an older payload shape: recompute and overwrite.
        print(f"[CACHE] discarding unreadable entry {key}: {exc}")

    result = compute()

    try:
        cache.set(key, dump(result) if dump else result, ttl)
    except CacheError as exc:
        print(f"[CACHE] write failed for {key}: {exc}")
    return result
