"""Tests for the bounded TTL response cache."""
from __future__ import annotations

import threading

from jobradar.cache import ResponseCache, make_cache_key


class Clock:
    def __init__(self) -> None:
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now


def test_cache_key_ignores_parameter_order() -> None:
    assert make_cache_key("RemoteOK", {"a": 1, "b": 2}) == make_cache_key("RemoteOK", {"b": 2, "a": 1})


def test_cache_key_distinguishes_sources_and_values() -> None:
    base = make_cache_key("RemoteOK", {"keywords": ["react"]})
    assert base != make_cache_key("Remotive", {"keywords": ["react"]})
    assert base != make_cache_key("RemoteOK", {"keywords": ["vue"]})
    assert base.startswith("RemoteOK|keywords:")


def test_cache_key_nested_dicts_are_order_independent() -> None:
    k1 = make_cache_key("s", {"filters": {"x": 1, "y": 2}})
    k2 = make_cache_key("s", {"filters": {"y": 2, "x": 1}})
    assert k1 == k2


def test_get_returns_miss_for_unknown_key() -> None:
    cache = ResponseCache()
    assert cache.get("nope") == (None, False)


def test_entry_expires_after_ttl() -> None:
    clock = Clock()
    cache = ResponseCache(clock=clock)
    cache.set("k", [1, 2], ttl_seconds=60)

    clock.now += 60
    assert cache.get("k") == ([1, 2], True)

    clock.now += 0.5
    assert cache.get("k") == (None, False)
    assert len(cache) == 0


def test_capacity_evicts_least_recently_used() -> None:
    cache = ResponseCache(max_entries=3)
    for key in ("a", "b", "c"):
        cache.set(key, key.upper(), ttl_seconds=100)

    # touching "a" makes "b" the least recently used
    assert cache.get("a") == ("A", True)
    cache.set("d", "D", ttl_seconds=100)

    assert len(cache) == 3
    assert "b" not in cache
    assert all(k in cache for k in ("a", "c", "d"))


def test_overwriting_existing_key_does_not_evict() -> None:
    cache = ResponseCache(max_entries=2)
    cache.set("a", 1, ttl_seconds=100)
    cache.set("b", 2, ttl_seconds=100)
    cache.set("a", 3, ttl_seconds=100)

    assert len(cache) == 2
    assert cache.get("a") == (3, True)
    assert cache.get("b") == (2, True)


def test_concurrent_writers_never_exceed_capacity() -> None:
    cache = ResponseCache(max_entries=10)

    def writer(offset: int) -> None:
        for i in range(200):
            cache.set(f"{offset}-{i}", i, ttl_seconds=100)
            cache.get(f"{offset}-{i // 2}")

    threads = [threading.Thread(target=writer, args=(n,)) for n in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert len(cache) == 10
