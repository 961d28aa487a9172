"""Tests for counter store selection."""

import pytest

from throttling.adapters.storage.factory import create_counter_store
from throttling.adapters.storage.in_memory import InMemoryCounterStore
from throttling.adapters.storage.redis_store import RedisCounterStore
from throttling.core.config import Settings
from throttling.core.errors import ConfigurationError


def _settings(monkeypatch: pytest.MonkeyPatch, backend: str) -> Settings:
    monkeypatch.setenv("THROTTLE_BACKEND", backend)
    return Settings()


def test_memory_backend(monkeypatch: pytest.MonkeyPatch) -> None:
    assert isinstance(create_counter_store(_settings(monkeypatch, "memory")), InMemoryCounterStore)


def test_redis_backend_is_case_insensitive(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("REDIS_URL", "redis://cache:6379/2")

    assert isinstance(create_counter_store(_settings(monkeypatch, "Redis")), RedisCounterStore)


def test_unknown_backend_raises(monkeypatch: pytest.MonkeyPatch) -> None:
    with pytest.raises(ConfigurationError) as exc_info:
        create_counter_store(_settings(monkeypatch, "memcached"))

    assert exc_info.value.code == "unknown_backend"
