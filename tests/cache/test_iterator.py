"""Tests for objcache.cache.iterator: read-only key iteration."""

import pytest

from objcache.cache.errors import UnsupportedOperationError
from objcache.cache.iterator import CacheKeyIterator
from tests.factories import fill, make_cache


class TestCacheKeyIterator:
    def test_yields_keys_in_order(self):
        assert list(CacheKeyIterator(["a", "b"])) == ["a", "b"]

    def test_has_next(self):
        it = CacheKeyIterator(["a"])
        assert it.has_next()
        assert next(it) == "a"
        assert not it.has_next()
        with pytest.raises(StopIteration):
            next(it)

    def test_remove_is_unsupported(self, clock):
        cache = make_cache()
        fill(cache, clock, {"a": 1, "b": 2})
        it = cache.iterator()
        next(it)
        with pytest.raises(UnsupportedOperationError):
            it.remove()
        assert cache.keys() == ["a", "b"]

    def test_remove_is_not_implemented_error(self):
        with pytest.raises(NotImplementedError):
            CacheKeyIterator([]).remove()

    def test_iterates_snapshot(self, clock):
        cache = make_cache()
        fill(cache, clock, {"a": 1, "b": 2})
        it = iter(cache)
        cache.remove("b")
        cache.put("c", 3)
        assert list(it) == ["a", "b"]

    def test_iteration_does_not_touch(self, clock):
        cache = make_cache()
        fill(cache, clock, {"a": 1})
        clock.set(50)
        list(cache)
        assert cache.last_access_time("a") == 1
