"""Shared fakes for the graph store, cache store and identity verifier.

Nothing here opens a socket: the graph store answers from scripted rows, the
cache keeps encoded values in a dict, and image fetches are plain callables.
"""

from __future__ import annotations

import copy
import threading
from datetime import timedelta
from typing import Any, Optional, Union

import pytest

from agrihub.auth.verifier import IdentityVerifier
from agrihub.cache.store import CacheStore, dumps, loads
from agrihub.errors import CacheError

TEST_SECRET = "unit-test-secret-key-with-enough-entropy-0123456789"
DEV_TOKEN = "dev_bypass_authorized"
DEV_SUBJECT = "0x984785A89BF95cb3d5Df4E45F670081944d8D547"


class FakeCache(CacheStore):
    """In-memory cache that round-trips values through the real codec."""

    def __init__(self, failing: bool = False) -> None:
        super().__init__(client=None)
        self.failing = failing
        self.data: dict[str, str] = {}
        self.ttls: dict[str, float] = {}
        self.sets: list[str] = []
        self.gets: list[str] = []

    @property
    def available(self) -> bool:
        return True

    def _check(self) -> None:
        if self.failing:
            raise CacheError("cache offline")

    def exists(self, key: str) -> bool:
        self._check()
        return key in self.data

    def get(self, key: str) -> Any:
        self._check()
        self.gets.append(key)
        raw = self.data.get(key)
        return None if raw is None else loads(raw)

    def set(self, key: str, value: Any, ttl: Union[timedelta, float]) -> None:
        self._check()
        self.sets.append(key)
        self.data[key] = dumps(value)
        self.ttls[key] = ttl.total_seconds() if isinstance(ttl, timedelta) else float(ttl)

    def delete(self, key: str) -> None:
        self._check()
        self.data.pop(key, None)
        self.ttls.pop(key, None)

    def ttl(self, key: str) -> Optional[float]:
        self._check()
        return self.ttls.get(key)

    def close(self) -> None:
        pass


class FakeGraphStore:
    """Answers ``read_query`` from ``(substring, rows-or-exception)`` scripts.

    Writes are only recorded.
    """

    def __init__(self, scripts: Optional[list[tuple[str, Any]]] = None) -> None:
        self.scripts = list(scripts or [])
        self.calls: list[tuple[str, dict[str, Any]]] = []
        self.writes: list[tuple[str, dict[str, Any]]] = []
        self._lock = threading.Lock()

    def add(self, marker: str, result: Any) -> None:
        self.scripts.append((marker, result))

    def read_query(self, query: str, params: Optional[dict[str, Any]] = None) -> list[dict[str, Any]]:
        with self._lock:
            self.calls.append((query, dict(params or {})))
        for marker, result in self.scripts:
            if marker in query:
                if isinstance(result, Exception):
                    raise result
                return copy.deepcopy(result)
        return []

    def write_query(self, query: str, params: Optional[dict[str, Any]] = None) -> None:
        with self._lock:
            self.writes.append((query, dict(params or {})))

    def close(self) -> None:
        pass


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture()
def cache() -> FakeCache:
    return FakeCache()


@pytest.fixture()
def graph() -> FakeGraphStore:
    return FakeGraphStore()


@pytest.fixture()
def verifier() -> IdentityVerifier:
    return IdentityVerifier(
        store=None,
        secret=TEST_SECRET,
        bypass_token=DEV_TOKEN,
        dev_subject=DEV_SUBJECT,
    )


@pytest.fixture()
def png_bytes() -> bytes:
    return b"\x89PNG\r\n\x1a\n" + b"\x00" * 8


@pytest.fixture()
def broken_cache() -> FakeCache:
    return FakeCache(failing=True)
