"""In-memory counter store.

Notes:
- Per-process only: running multiple workers multiplies the effective limit.
- Thread-safe: uses a lock around shared state.
- Expired counters are swept whenever a new counter is seeded, so past
  windows do not accumulate.
- Optional max_entries bound evicts the oldest counters first; an evicted
  live counter restarts at the seed, which undercounts that window.
"""

from __future__ import annotations

import logging
import threading
import time
from collections import OrderedDict
from dataclasses import dataclass
from typing import Callable

from throttling.adapters.storage.base import AbstractCounterStore, Seed, resolve_seed

logger = logging.getLogger(__name__)


@dataclass
class StoredCounter:
    count: int
    expires_at: float | None
    expires_in: int | None


class InMemoryCounterStore(AbstractCounterStore):
    """Counter store backed by a dict.

    Suitable for tests and single-process deployments. Use RedisCounterStore
    when several processes must share the same budget.
    """

    def __init__(
        self,
        *,
        clock: Callable[[], float] = time.time,
        max_entries: int | None = None,
    ) -> None:
        """Initialize an empty store.

        Args:
            clock: Time source function returning UNIX time in seconds.
            max_entries: Maximum number of counters kept (None for unlimited).

        Raises:
            ValueError: If max_entries is not positive.
        """
        if max_entries is not None and max_entries < 1:
            raise ValueError("max_entries must be >= 1")

        self._clock = clock
        self._max_entries = max_entries
        self._lock = threading.RLock()
        self._counters: OrderedDict[str, StoredCounter] = OrderedDict()

    def size(self) -> int:
        """Number of counters held, including expired ones not yet swept."""
        with self._lock:
            return len(self._counters)

    def _live_counter(self, key: str, now: float) -> StoredCounter | None:
        counter = self._counters.get(key)
        if counter is not None and counter.expires_at is not None and now >= counter.expires_at:
            del self._counters[key]
            return None
        return counter

    def _evict_expired_locked(self, now: float) -> None:
        expired = [
            key
            for key, counter in self._counters.items()
            if counter.expires_at is not None and now >= counter.expires_at
        ]
        for key in expired:
            del self._counters[key]
        if expired:
            logger.debug("counter_store.swept", extra={"evicted": len(expired)})

    def _evict_if_over_capacity_locked(self) -> None:
        if self._max_entries is None:
            return
        while len(self._counters) > self._max_entries:
            self._counters.popitem(last=False)

    def fetch(self, key: str, *, expires_in: int, seed: Seed = 0) -> int:
        now = self._clock()
        with self._lock:
            counter = self._live_counter(key, now)
            if counter is None:
                self._evict_expired_locked(now)
                counter = StoredCounter(
                    count=resolve_seed(seed),
                    expires_at=now + expires_in,
                    expires_in=expires_in,
                )
                self._counters[key] = counter
                self._evict_if_over_capacity_locked()
            return counter.count

    def increment(self, key: str) -> None:
        now = self._clock()
        with self._lock:
            counter = self._live_counter(key, now)
            if counter is not None:
                counter.count += 1

    def values(self) -> dict[str, StoredCounter]:
        """Snapshot of the live counters keyed by storage key."""
        now = self._clock()
        with self._lock:
            for key in list(self._counters):
                self._live_counter(key, now)
            return {
                key: StoredCounter(c.count, c.expires_at, c.expires_in)
                for key, c in self._counters.items()
            }

    def clear(self) -> None:
        """Drop every counter."""
        with self._lock:
            self._counters.clear()
