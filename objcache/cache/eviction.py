"""Victim selection for each eviction policy."""

import random

from objcache.cache.recency import RecencyIndex
from objcache.models.entry import CacheEntry
from objcache.models.enums import EvictionPolicy


def select_victim(
    policy: EvictionPolicy, index: RecencyIndex, rng: random.Random
) -> CacheEntry | None:
    """Pick the entry *policy* would evict next, or ``None`` if *index* is empty.

    Args:
        policy: Active eviction policy.
        index: Recency order of the cache's current entries.
        rng: Random source used by ``EvictionPolicy.RANDOM``.
    """
    if not len(index):
        return None
    if policy == EvictionPolicy.MOST_RECENTLY_TOUCHED:
        return index.last()
    if policy == EvictionPolicy.LEAST_RECENTLY_TOUCHED:
        return index.first()
    return index.at(rng.randrange(len(index)))
