"""In-flight guard that drops duplicate deliveries for the same PR."""

from __future__ import annotations

import threading

from roastbot.models import DedupKey


class InFlightGuard:
    """Set of PR keys currently being processed.

    A key is held for the duration of one pipeline run and released at the
    end whatever the result, so it suppresses concurrent redeliveries but
    not later re-triggers. ``try_acquire`` is a single check-and-insert
    under a lock, so two tasks can never both acquire the same key.
    """

    def __init__(self) -> None:
        self._keys: set[DedupKey] = set()
        self._lock = threading.Lock()

    def try_acquire(self, key: DedupKey) -> bool:
        with self._lock:
            if key in self._keys:
                return False
            self._keys.add(key)
            return True

    def release(self, key: DedupKey) -> None:
        """Idempotent: releasing a key that is not held is a no-op."""
        with self._lock:
            self._keys.discard(key)

    def __contains__(self, key: DedupKey) -> bool:
        with self._lock:
            return key in self._keys

    def __len__(self) -> int:
        with self._lock:
            return len(self._keys)
