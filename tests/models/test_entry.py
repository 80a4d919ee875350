from objcache.models.entry import CacheEntry, CacheStats
from objcache.models.enums import EvictionPolicy


class TestCacheEntry:
    def test_order_key(self):
        entry = CacheEntry(key="k", value=1, recency=10, sequence=4)
        assert entry.order_key == (10, 4)

    def test_mutable(self):
        entry = CacheEntry(key="k", value=1, recency=10, sequence=4)
        entry.value = 2
        assert entry.value == 2


class TestCacheStats:
    def test_policy_coerced_from_string(self):
        stats = CacheStats(name="c", policy="random", size=0, max_size=-1, capacity=-1)
        assert stats.policy is EvictionPolicy.RANDOM
        assert stats.oldest_touch_ms is None

    def test_dump(self):
        stats = CacheStats(
            name="c",
            policy=EvictionPolicy.RANDOM,
            size=1,
            max_size=5,
            capacity=4,
            oldest_touch_ms=3,
            newest_touch_ms=3,
        )
        assert stats.model_dump()["capacity"] == 4
