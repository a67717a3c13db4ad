"""Resolution cache with at-most-one computation per key.

Each key maps to a ``concurrent.futures.Future``. The first caller for a
key installs the future and computes the value; concurrent callers for
the same key wait on that future instead of recomputing. A computation
that raises is removed from the cache so a later call may retry it, and
the exception is re-raised to every waiter.
"""

from __future__ import annotations

import threading
from concurrent.futures import Future
from typing import Callable, Generic, Hashable, TypeVar

V = TypeVar("V")


class ResolutionCache(Generic[V]):
    """Thread-safe key -> value store with in-flight de-duplication."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._entries: dict[Hashable, Future[V]] = {}
        self._hits = 0
        self._misses = 0

    def get_or_compute(self, key: Hashable, compute: Callable[[], V]) -> V:
        """Return the cached value for *key*, computing it at most once."""
        with self._lock:
            future = self._entries.get(key)
            if future is not None:
                self._hits += 1
                owner = False
            else:
                self._misses += 1
                future = Future()
                self._entries[key] = future
                owner = True

        if not owner:
            return future.result()

        try:
            value = compute()
        except BaseException as exc:
            with self._lock:
                self._entries.pop(key, None)
            future.set_exception(exc)
            raise
        future.set_result(value)
        return value

    def __contains__(self, key: Hashable) -> bool:
        with self._lock:
            return key in self._entries

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    @property
    def hits(self) -> int:
        return self._hits

    @property
    def misses(self) -> int:
        return self._misses

    def clear(self) -> None:
        """Drop every entry and reset the counters."""
        with self._lock:
            self._entries.clear()
            self._hits = 0
            self._misses = 0
