"""Factory pattern for creating counter store instances."""

from throttling.adapters.storage.base import AbstractCounterStore
from throttling.adapters.storage.in_memory import InMemoryCounterStore
from throttling.adapters.storage.redis_store import RedisCounterStore
from throttling.core.config import Settings, settings as default_settings
from throttling.core.errors import ConfigurationError


def create_counter_store(settings: Settings | None = None) -> AbstractCounterStore:
    """Instantiate the counter store selected by THROTTLE_BACKEND.

    Args:
        settings: Settings to read; defaults to the global settings instance.

    Returns:
        AbstractCounterStore: Configured backend.

    Raises:
        ConfigurationError: If the backend name is unknown.
    """
    cfg = settings or default_settings
    backend = cfg.throttle.backend.lower()

    if backend == "memory":
        return InMemoryCounterStore()

    if backend == "redis":
        return RedisCounterStore.from_url(
            cfg.redis.url,
            socket_timeout=cfg.redis.socket_timeout_seconds,
        )

    raise ConfigurationError(
        code="unknown_backend",
        message=f"Unknown counter store backend: '{backend}'. Supported backends: memory, redis",
        details={"backend": backend},
    )
