"""Unit tests for the in-memory counter store."""

import threading

import pytest

from throttling.adapters.storage.in_memory import InMemoryCounterStore
from throttling.services.throttle import ThrottleContext


def test_fetch_seeds_absent_key_at_zero(memory_store: InMemoryCounterStore) -> None:
    assert memory_store.fetch("k", expires_in=60) == 0
    assert memory_store.values()["k"].count == 0


def test_fetch_does_not_count_as_hit(memory_store: InMemoryCounterStore) -> None:
    memory_store.fetch("k", expires_in=60)
    memory_store.fetch("k", expires_in=60)

    assert memory_store.fetch("k", expires_in=60) == 0


def test_increment_adds_one(memory_store: InMemoryCounterStore) -> None:
    memory_store.fetch("k", expires_in=60)
    memory_store.increment("k")
    memory_store.increment("k")

    assert memory_store.fetch("k", expires_in=60) == 2


def test_seed_may_be_callable(memory_store: InMemoryCounterStore) -> None:
    assert memory_store.fetch("k", expires_in=60, seed=lambda: 3) == 3
    assert memory_store.fetch("k", expires_in=60, seed=lambda: 99) == 3


def test_increment_of_absent_key_is_noop(memory_store: InMemoryCounterStore) -> None:
    memory_store.increment("missing")

    assert memory_store.values() == {}


def test_counter_expires(memory_store: InMemoryCounterStore, fake_time) -> None:
    memory_store.fetch("k", expires_in=10)
    memory_store.increment("k")

    fake_time.advance(9)
    assert memory_store.fetch("k", expires_in=1) == 1

    fake_time.advance(1)
    assert "k" not in memory_store.values()
    assert memory_store.fetch("k", expires_in=10) == 0


def test_increment_after_expiry_does_not_resurrect(memory_store: InMemoryCounterStore, fake_time) -> None:
    memory_store.fetch("k", expires_in=5)
    fake_time.advance(5)

    memory_store.increment("k")

    assert memory_store.values() == {}


def test_values_reports_expiration(memory_store: InMemoryCounterStore, fake_time) -> None:
    memory_store.fetch("k", expires_in=30)

    counter = memory_store.values()["k"]
    assert counter.expires_in == 30
    assert counter.expires_at == fake_time.time() + 30


def test_clear_drops_everything(memory_store: InMemoryCounterStore) -> None:
    memory_store.fetch("a", expires_in=60)
    memory_store.fetch("b", expires_in=60)

    memory_store.clear()

    assert memory_store.values() == {}


def test_concurrent_increments_are_not_lost() -> None:
    store = InMemoryCounterStore()
    store.fetch("k", expires_in=600)

    def _hit() -> None:
        for _ in range(100):
            store.increment("k")

    threads = [threading.Thread(target=_hit) for _ in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert store.fetch("k", expires_in=600) == 800


def test_past_windows_are_swept(memory_store: InMemoryCounterStore, fake_time) -> None:
    throttle = ThrottleContext(
        {"foo": {"limit": 5, "period": 2}}, memory_store, clock=fake_time.time
    ).for_policy("foo")

    for _ in range(1000):
        assert throttle.check_ip("127.0.0.1") is True
        fake_time.advance(2)

    assert memory_store.size() <= 2


def test_sweep_keeps_live_counters(memory_store: InMemoryCounterStore, fake_time) -> None:
    memory_store.fetch("long", expires_in=100)
    memory_store.increment("long")
    memory_store.fetch("short", expires_in=1)

    fake_time.advance(5)
    memory_store.fetch("new", expires_in=10)

    assert memory_store.size() == 2
    assert memory_store.fetch("long", expires_in=100) == 1


def test_max_entries_evicts_oldest(fake_time) -> None:
    store = InMemoryCounterStore(clock=fake_time.time, max_entries=2)
    for key in ("a", "b", "c"):
        store.fetch(key, expires_in=60)

    assert store.size() == 2
    assert set(store.values()) == {"b", "c"}


def test_invalid_max_entries() -> None:
    with pytest.raises(ValueError):
        InMemoryCounterStore(max_entries=0)
