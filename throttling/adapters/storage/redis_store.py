"""Redis-backed counter store.

Counters are plain Redis integers with a TTL matching the end of their
window, so several API processes share one budget per identity.
"""

from __future__ import annotations

import logging

import redis

from throttling.adapters.storage.base import AbstractCounterStore, Seed, resolve_seed
from throttling.core.errors import StorageError

logger = logging.getLogger(__name__)

# INCR would recreate a key that expired after fetch, without any TTL.
_INCR_IF_EXISTS = """
if redis.call('EXISTS', KEYS[1]) == 1 then
    return redis.call('INCR', KEYS[1])
end
return 0
"""


class RedisCounterStore(AbstractCounterStore):
    """Counter store using Redis atomic commands."""

    def __init__(self, client: redis.Redis) -> None:
        """Wrap an existing Redis client.

        Args:
            client: Connected redis-py client.
        """
        self._client = client
        self._incr_if_exists = client.register_script(_INCR_IF_EXISTS)

    @classmethod
    def from_url(cls, url: str, *, socket_timeout: float | None = None) -> "RedisCounterStore":
        """Build a store from a redis:// URL."""
        return cls(redis.Redis.from_url(url, socket_timeout=socket_timeout))

    def fetch(self, key: str, *, expires_in: int, seed: Seed = 0) -> int:
        initial = resolve_seed(seed)
        try:
            # SET NX EX seeds the counter and its expiry in one atomic command
            self._client.set(key, initial, nx=True, ex=expires_in)
            raw = self._client.get(key)
        except redis.RedisError as exc:
            logger.error(
                "counter_store.fetch_failed",
                extra={"backend": "redis", "error_type": type(exc).__name__},
            )
            raise StorageError(
                code="storage_unavailable",
                message=f"Redis fetch failed: {exc}",
                details={"backend": "redis"},
            ) from exc

        # Expired between SET and GET: the window is over, nothing counted yet
        if raw is None:
            return initial
        return int(raw)

    def increment(self, key: str) -> None:
        try:
            self._incr_if_exists(keys=[key])
        except redis.RedisError as exc:
            logger.error(
                "counter_store.increment_failed",
                extra={"backend": "redis", "error_type": type(exc).__name__},
            )
            raise StorageError(
                code="storage_unavailable",
                message=f"Redis increment failed: {exc}",
                details={"backend": "redis"},
            ) from exc
