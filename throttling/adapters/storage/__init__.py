"""Counter store adapters.

The check engine depends only on AbstractCounterStore, so the in-memory store
used in development and tests can be swapped for Redis through configuration
(THROTTLE_BACKEND) without touching calling code.
"""

from throttling.adapters.storage.base import AbstractCounterStore, Seed
from throttling.adapters.storage.factory import create_counter_store
from throttling.adapters.storage.in_memory import InMemoryCounterStore, StoredCounter
from throttling.adapters.storage.redis_store import RedisCounterStore

__all__ = [
    "AbstractCounterStore",
    "InMemoryCounterStore",
    "RedisCounterStore",
    "Seed",
    "StoredCounter",
    "create_counter_store",
]
