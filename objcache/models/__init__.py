from objcache.models.entry import CacheEntry, CacheStats
from objcache.models.enums import EvictionPolicy

__all__ = [
    "CacheEntry",
    "CacheStats",
    "EvictionPolicy",
]
