from collections.abc import Hashable, Iterator

from objcache.cache.errors import UnsupportedOperationError


class CacheKeyIterator(Iterator[Hashable]):
    """Read-only iterator over cache keys, least recently touched first.

    Iterates a snapshot taken when it was created; later cache changes are not seen.
    """

    def __init__(self, keys: list[Hashable]) -> None:
        self._keys = iter(keys)
        self._remaining = len(keys)

    def __next__(self) -> Hashable:
        key = next(self._keys)
        self._remaining -= 1
        return key

    def has_next(self) -> bool:
        return self._remaining > 0

    def remove(self) -> None:
        """Always fails: caches cannot be modified through their iterator.

        Raises:
            UnsupportedOperationError: Always.
        """
        raise UnsupportedOperationError("Remove not supported for object caches")
