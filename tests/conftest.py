"""Pytest configuration and fixtures shared across all test modules.

Environment variables are set before any import of throttling.core.config so
the global settings never pick up a developer's .env file or a Redis URL.
"""

import os

# CRITICAL: Set this before any imports that might load settings
os.environ["APP_ENV"] = "testing"
os.environ.setdefault("THROTTLE_BACKEND", "memory")
os.environ.setdefault("THROTTLE_ENABLED", "true")

from unittest.mock import Mock  # noqa: E402

import pytest  # noqa: E402

from throttling.adapters.storage.base import AbstractCounterStore  # noqa: E402
from throttling.adapters.storage.in_memory import InMemoryCounterStore  # noqa: E402
from throttling.services.throttle import ThrottleContext  # noqa: E402


class FakeTime:
    """Deterministic clock used to test window and expiration logic."""

    def __init__(self, start: float = 1_334_261_569.0) -> None:
        self.current = start

    def time(self) -> float:
        return self.current

    def advance(self, seconds: float) -> None:
        self.current += seconds


@pytest.fixture
def fake_time() -> FakeTime:
    return FakeTime()


@pytest.fixture
def memory_store(fake_time: FakeTime) -> InMemoryCounterStore:
    return InMemoryCounterStore(clock=fake_time.time)


@pytest.fixture
def mock_store() -> Mock:
    """Counter store double; set ``fetch.return_value`` or ``side_effect``."""
    store = Mock(spec=AbstractCounterStore)
    store.fetch.return_value = 0
    return store


@pytest.fixture
def make_context(fake_time: FakeTime):
    """Build a fresh ThrottleContext over the given limits and store."""

    def _make(limits, store, **kwargs) -> ThrottleContext:
        return ThrottleContext(limits, store, clock=fake_time.time, **kwargs)

    return _make
