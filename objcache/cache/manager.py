"""Management contracts for hosts that control caches without knowing their contents.

``CacheManager`` covers a single cache (``ObjectCache`` satisfies it directly).
``MultipleCacheManager`` mirrors it for hosts holding several named caches;
every method there is optional and may raise ``UnsupportedOperationError``.
"""

import logging
import random
import threading
from collections.abc import Hashable, Mapping
from typing import Any, Protocol, runtime_checkable

from objcache.cache.errors import UnknownCacheError, UnsupportedOperationError
from objcache.cache.object_cache import UNBOUNDED, ObjectCache
from objcache.models.entry import CacheStats
from objcache.models.enums import EvictionPolicy

logger = logging.getLogger(__name__)


@runtime_checkable
class CacheManager(Protocol):
    """Control surface for one cache."""

    def flush(self) -> None: ...

    def set_max_size(self, size: int) -> None: ...

    def resize(self, size: int) -> None: ...

    def capacity(self) -> int: ...

    def is_empty(self) -> bool: ...

    def to_map(self) -> dict[Hashable, Any]: ...

    def merge(self, other: ObjectCache) -> None: ...

    def put_all(self, mapping: Mapping[Hashable, Any]) -> None: ...

    def set_policy(self, policy: EvictionPolicy | str) -> None: ...


@runtime_checkable
class MultipleCacheManager(Protocol):
    """Control surface for several caches, selected by name."""

    def flush(self, name: str) -> None: ...

    def set_max_size(self, name: str, size: int) -> None: ...

    def resize(self, name: str, size: int) -> None: ...

    def capacity(self, name: str) -> int: ...

    def is_empty(self, name: str) -> bool: ...

    def to_map(self, name: str) -> dict[Hashable, Any]: ...

    def merge(self, name: str, other: ObjectCache) -> None: ...

    def put_all(self, name: str, mapping: Mapping[Hashable, Any]) -> None: ...

    def set_policy(self, name: str, policy: EvictionPolicy | str) -> None: ...


class CacheRegistry:
    """Named caches owned by one host, created explicitly and passed where needed.

    The default cache is created with the registry and its name cannot change.

    Args:
        default_name: Name of the cache returned by :meth:`default`.
        default_policy: Policy for caches created without one.
        default_max_size: Bound for caches created without one.
        rng: Random source shared by the registry's caches.
    """

    def __init__(
        self,
        default_name: str = "default",
        *,
        default_policy: EvictionPolicy | str = EvictionPolicy.LEAST_RECENTLY_TOUCHED,
        default_max_size: int = UNBOUNDED,
        rng: random.Random | None = None,
    ) -> None:
        self._default_name = default_name
        self._default_policy = EvictionPolicy.parse(default_policy)
        self._default_max_size = default_max_size
        self._rng = rng
        self._caches: dict[str, ObjectCache] = {}
        self._lock = threading.Lock()
        self.create(default_name)

    @property
    def default_name(self) -> str:
        return self._default_name

    def default(self) -> ObjectCache:
        return self.get(self._default_name)

    def names(self) -> list[str]:
        with self._lock:
            return sorted(self._caches)

    def __contains__(self, name: object) -> bool:
        with self._lock:
            return name in self._caches

    def create(
        self,
        name: str,
        policy: EvictionPolicy | str | None = None,
        max_size: int | None = None,
    ) -> ObjectCache:
        """Return the cache called *name*, creating it if needed.

        Raises:
            InvalidPolicyError: If *policy* is not recognised.
        """
        with self._lock:
            existing = self._caches.get(name)
            if existing is not None:
                return existing
            cache = ObjectCache(
                self._default_policy if policy is None else policy,
                self._default_max_size if max_size is None else max_size,
                rng=self._rng,
            )
            self._caches[name] = cache
        logger.info("Created cache '%s' (%s)", name, cache.policy.value)
        return cache

    def get(self, name: str) -> ObjectCache:
        """Raises:
        UnknownCacheError: If no cache is called *name*.
        """
        with self._lock:
            cache = self._caches.get(name)
        if cache is None:
            raise UnknownCacheError(f"No cache named '{name}'")
        return cache

    def drop(self, name: str) -> None:
        """Forget the cache called *name*. The default cache cannot be dropped.

        Raises:
            UnsupportedOperationError: If *name* is the default cache.
            UnknownCacheError: If no cache is called *name*.
        """
        if name == self._default_name:
            raise UnsupportedOperationError("The default cache cannot be dropped")
        with self._lock:
            if self._caches.pop(name, None) is None:
                raise UnknownCacheError(f"No cache named '{name}'")
        logger.info("Dropped cache '%s'", name)

    def stats(self, name: str) -> CacheStats:
        cache = self.get(name)
        keys = cache.keys()
        return CacheStats(
            name=name,
            policy=cache.policy,
            size=len(keys),
            max_size=cache.max_size,
            capacity=cache.capacity(),
            oldest_touch_ms=cache.last_access_time(keys[0]) if keys else None,
            newest_touch_ms=cache.last_access_time(keys[-1]) if keys else None,
        )

    # ── MultipleCacheManager ─────────────────────────────────────────────────

    def flush(self, name: str) -> None:
        self.get(name).flush()

    def set_max_size(self, name: str, size: int) -> None:
        self.get(name).set_max_size(size)

    def resize(self, name: str, size: int) -> None:
        self.get(name).resize(size)

    def capacity(self, name: str) -> int:
        return self.get(name).capacity()

    def is_empty(self, name: str) -> bool:
        return self.get(name).is_empty()

    def to_map(self, name: str) -> dict[Hashable, Any]:
        return self.get(name).to_map()

    def merge(self, name: str, other: ObjectCache) -> None:
        self.get(name).merge(other)

    def put_all(self, name: str, mapping: Mapping[Hashable, Any]) -> None:
        self.get(name).put_all(mapping)

    def set_policy(self, name: str, policy: EvictionPolicy | str) -> None:
        self.get(name).set_policy(policy)
