"""Per-item mutual exclusion."""

import threading
from collections.abc import Iterator
from contextlib import contextmanager


class KeyedLocks:
    """
    Registry of re-entrant locks keyed by item id.

    Operations on the same id serialize; operations on different ids never
    share a lock. Entries are reference counted and dropped once no thread
    holds or waits on them, so the registry does not grow with the key space.
    """

    def __init__(self) -> None:
        self._registry_lock = threading.Lock()
        self._locks: dict[str, threading.RLock] = {}
        self._refcounts: dict[str, int] = {}

    @contextmanager
    def hold(self, key: str) -> Iterator[None]:
        """Hold the lock for ``key`` for the duration of the block."""
        with self._registry_lock:
            lock = self._locks.get(key)
            if lock is None:
                lock = threading.RLock()
                self._locks[key] = lock
            self._refcounts[key] = self._refcounts.get(key, 0) + 1

        try:
            with lock:
                yield
        finally:
            with self._registry_lock:
                remaining = self._refcounts[key] - 1
                if remaining:
                    self._refcounts[key] = remaining
                else:
                    del self._refcounts[key]
                    del self._locks[key]

    def active_keys(self) -> list[str]:
        """Keys currently held or awaited."""
        with self._registry_lock:
            return list(self._locks)
