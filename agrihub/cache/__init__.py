"""Cache package: Redis store, key derivation and the read-through helper."""

from agrihub.cache.read_through import get_or_compute
from agrihub.cache.store import CacheStore

__all__ = ["CacheStore", "get_or_compute"]
