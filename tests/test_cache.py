"""Tests for rss_reader.cache."""

import threading

import pytest

from rss_reader.cache import LRUCache


class TestLRUCache:
    def test_evicts_least_recently_used(self) -> None:
        cache = LRUCache(2)
        cache.put("a", 1)
        cache.put("b", 2)
        assert cache.get("a") == 1  # "b" is now the oldest
        cache.put("c", 3)
        assert "b" not in cache
        assert cache.get("a") == 1
        assert cache.get("c") == 3

    def test_zero_size_disables_caching(self) -> None:
        cache = LRUCache(0)
        cache.put("a", 1)
        assert cache.get("a") is None
        assert len(cache) == 0

    def test_negative_size_rejected(self) -> None:
        with pytest.raises(ValueError):
            LRUCache(-1)

    def test_clear(self) -> None:
        cache = LRUCache(4)
        cache.put("a", 1)
        cache.clear()
        assert cache.get("a") is None

    def test_len_and_contains_wait_for_writers(self) -> None:
        cache = LRUCache(4)
        cache.put("a", 1)
        results = []

        def read() -> None:
            results.append((len(cache), "a" in cache))

        with cache._lock:
            reader = threading.Thread(target=read)
            reader.start()
            reader.join(timeout=0.2)
            assert reader.is_alive()
            assert results == []
        reader.join(timeout=5)
        assert results == [(1, True)]
