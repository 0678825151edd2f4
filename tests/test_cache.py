"""Tests for the TTL cache."""

import time

from echolog.cache import TTLCache


class FakeClock:
    def __init__(self) -> None:
        self.now = 0.0

    def __call__(self) -> float:
        return self.now


def test_get_returns_stored_value() -> None:
    cache = TTLCache(default_ttl_seconds=10, clock=FakeClock())
    cache.set("key", "value")

    assert cache.get("key") == "value"
    assert cache.get("missing") is None


def test_entries_expire_after_ttl() -> None:
    clock = FakeClock()
    cache = TTLCache(default_ttl_seconds=10, clock=clock)
    cache.set("default", "a")
    cache.set("short", "b", ttl_seconds=1)

    clock.now = 5
    assert cache.get("default") == "a"
    assert cache.get("short") is None

    clock.now = 11
    assert cache.get("default") is None
    assert len(cache) == 0


def test_sweep_removes_only_expired_entries() -> None:
    clock = FakeClock()
    cache = TTLCache(default_ttl_seconds=10, clock=clock)
    cache.set("old", 1, ttl_seconds=1)
    cache.set("older", 2, ttl_seconds=2)
    cache.set("fresh", 3)

    clock.now = 3

    assert cache.sweep() == 2
    assert len(cache) == 1
    assert cache.get("fresh") == 3


def test_make_key_hashes_content() -> None:
    key = TTLCache.make_key("title", "hello")

    assert key.startswith("title:")
    assert key == TTLCache.make_key("title", "hello")
    assert key != TTLCache.make_key("tags", "hello")
    assert key != TTLCache.make_key("title", "hello!")


def test_clear() -> None:
    cache = TTLCache()
    cache.set("key", "value")

    cache.clear()

    assert len(cache) == 0


def test_sweeper_thread_removes_expired_entries() -> None:
    cache = TTLCache(default_ttl_seconds=0.01)
    cache.set("key", "value")

    cache.start_sweeper(0.01)
    try:
        deadline = time.monotonic() + 2
        while len(cache) and time.monotonic() < deadline:
            time.sleep(0.01)
    finally:
        cache.stop_sweeper()

    assert len(cache) == 0
