"""Redis-backed key/value cache with JSON values.

Usage::

    from agrihub.cache.store import CacheStore

    cache = CacheStore.connect()
    cache.set("portfolio:0xabc", {"farmPlotNFTCount": 3}, timedelta(minutes=3))

Every failure (no server, connection drop, undecodable payload) surfaces as
:class:`~agrihub.errors.CacheError`.  Callers treat the cache as best-effort
and fall back to the live path.
"""

from __future__ import annotations

import base64
import json
from datetime import datetime, timedelta
from typing import Any, Optional, Union

import redis

from agrihub.config import settings
from agrihub.errors import CacheError

Expiry = Union[timedelta, int, float]

# ---------------------------------------------------------------------------
# JSON codec; bytes and datetimes survive a round trip
# ---------------------------------------------------------------------------
_BYTES_TAG = "__bytes__"
_DATETIME_TAG = "__datetime__"


def _default(obj: Any) -> Any:
    if isinstance(obj, (bytes, bytearray)):
        return {_BYTES_TAG: base64.b64encode(bytes(obj)).decode("ascii")}
    if isinstance(obj, datetime):
        return {_DATETIME_TAG: obj.isoformat()}
    raise TypeError(f"Object of type {type(obj).__name__} is not cacheable")


def _object_hook(obj: dict[str, Any]) -> Any:
    if len(obj) == 1:
        if _BYTES_TAG in obj:
            return base64.b64decode(obj[_BYTES_TAG])
        if _DATETIME_TAG in obj:
            return datetime.fromisoformat(obj[_DATETIME_TAG])
    return obj


def dumps(value: Any) -> str:
    """Serialise *value* for storage."""
    return json.dumps(value, default=_default, separators=(",", ":"))


def loads(raw: Union[str, bytes]) -> Any:
    """Inverse of :func:`dumps`."""
    return json.loads(raw, object_hook=_object_hook)


# ---------------------------------------------------------------------------
# Store
# ---------------------------------------------------------------------------

class CacheStore:
    """Thin wrapper around a ``redis.Redis`` client.

    A store built with ``client=None`` is *unavailable*: ``exists`` answers
    ``False`` and every other operation raises :class:`CacheError`, so the
    service keeps running without a cache.
    """

    def __init__(self, client: Optional[redis.Redis] = None) -> None:
        self._client = client

    @classmethod
    def connect(
        cls,
        host: Optional[str] = None,
        port: Optional[int] = None,
        password: Optional[str] = None,
        db: Optional[int] = None,
    ) -> "CacheStore":
        """Open a connection and ping it; degrade to an unavailable store on failure."""
        client = redis.Redis(
            host=host or settings.redis_host,
            port=port or settings.redis_port,
            password=password or settings.redis_password or None,
            db=settings.redis_db if db is None else db,
            socket_timeout=settings.request_timeout,
            socket_connect_timeout=5,
        )
        try:
            client.ping()
        except redis.RedisError as exc:
            print(f"[CACHE] Redis unreachable ({exc}); continuing without caching.")
            return cls(None)
        print("[CACHE] Connected to Redis.")
        return cls(client)

    @property
    def available(self) -> bool:
        return self._client is not None

    def _require(self) -> redis.Redis:
        if self._client is None:
            raise CacheError("redis client not available")
        return self._client

    def exists(self, key: str) -> bool:
        """Return ``True`` if *key* is present."""
        if self._client is None:
            return False
        try:
            return self._client.exists(key) > 0
        except redis.RedisError as exc:
            raise CacheError(f"exists({key!r}) failed: {exc}") from exc

    def get(self, key: str) -> Any:
        """Return the decoded value stored under *key*, or ``None`` on a miss."""
        client = self._require()
        try:
            raw = client.get(key)
        except redis.RedisError as exc:
            raise CacheError(f"get({key!r}) failed: {exc}") from exc
        if raw is None:
            return None
        try:
            return loads(raw)
        except (ValueError, TypeError) as exc:
            raise CacheError(f"undecodable value under {key!r}: {exc}") from exc

    def set(self, key: str, value: Any, ttl: Expiry) -> None:
        """Store *value* under *key* for *ttl* (timedelta or seconds)."""
        client = self._require()
        try:
            payload = dumps(value)
        except (TypeError, ValueError) as exc:
            raise CacheError(f"cannot serialise value for {key!r}: {exc}") from exc
        seconds = ttl.total_seconds() if isinstance(ttl, timedelta) else float(ttl)
        try:
            client.set(key, payload, px=max(1, int(seconds * 1000)))
        except redis.RedisError as exc:
            raise CacheError(f"set({key!r}) failed: {exc}") from exc

    def delete(self, key: str) -> None:
        client = self._require()
        try:
            client.delete(key)
        except redis.RedisError as exc:
            raise CacheError(f"delete({key!r}) failed: {exc}") from exc

    def ttl(self, key: str) -> Optional[float]:
        """Remaining lifetime of *key* in seconds; ``None`` if absent or persistent."""
        client = self._require()
        try:
            remaining = client.pttl(key)
        except redis.RedisError as exc:
            raise CacheError(f"ttl({key!r}) failed: {exc}") from exc
        if remaining is None or remaining < 0:
            return None
        return remaining / 1000.0

    def close(self) -> None:
        if self._client is not None:
            self._client.close()
