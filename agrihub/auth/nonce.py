"""Single-use login nonces held in process memory.

Each subject has at most one outstanding nonce.  A nonce is valid for
``ttl_seconds`` after issue and is removed the first time it is consumed,
whether or not the presented value matched.  Expired entries are dropped
lazily on access, or in bulk by :meth:`NonceStore.sweep`.
"""

from __future__ import annotations

import secrets
import threading
import time
from dataclasses import dataclass
from typing import Callable, Optional

from agrihub.config import settings


@dataclass
class NonceEntry:
    value: str
    issued_at: float


class NonceStore:
    def __init__(
        self,
        ttl_seconds: Optional[float] = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.ttl_seconds = settings.nonce_ttl_seconds if ttl_seconds is None else ttl_seconds
        self._clock = clock
        self._entries: dict[str, NonceEntry] = {}
        self._lock = threading.Lock()

    def _expired(self, entry: NonceEntry, now: float) -> bool:
        return now - entry.issued_at > self.ttl_seconds

    def issue(self, subject: str) -> str:
        """Create (or replace) the nonce for *subject* and return it."""
        value = secrets.token_hex(16)
        with self._lock:
            self._entries[subject] = NonceEntry(value=value, issued_at=self._clock())
        return value

    def consume(self, subject: str, value: str) -> bool:
        """Check *value* against the outstanding nonce and retire it."""
        with self._lock:
            entry = self._entries.pop(subject, None)
        if entry is None or self._expired(entry, self._clock()):
            return False
        return secrets.compare_digest(entry.value, value)

    def sweep(self) -> int:
        """Drop every expired entry; returns how many were removed."""
        now = self._clock()
        with self._lock:
            stale = [s for s, entry in self._entries.items() if self._expired(entry, now)]
            for subject in stale:
                del self._entries[subject]
        return len(stale)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
