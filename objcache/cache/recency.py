"""Total order over cache entries by last touch time.

Entries are kept in a ``SortedKeyList`` keyed by ``(recency, sequence)``.
``sequence`` is unique per cache, so the key identifies exactly one slot and
keys themselves are never compared.
"""

from collections.abc import Iterator

from sortedcontainers import SortedKeyList

from objcache.models.entry import CacheEntry

# Sentinel sequence numbers for range bounds
_LOW_SEQ = -1
_HIGH_SEQ = float("inf")


def _order_key(entry: CacheEntry) -> tuple[int, int]:
    return entry.order_key


class RecencyIndex:
    """Sorted view of entries, oldest touch first.

    Not thread-safe on its own; the owning cache holds its lock around every call.
    An entry's recency and sequence must only change through :meth:`reposition`.
    """

    def __init__(self) -> None:
        self._entries: SortedKeyList = SortedKeyList(key=_order_key)

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[CacheEntry]:
        return iter(self._entries)

    def add(self, entry: CacheEntry) -> None:
        self._entries.add(entry)

    def discard(self, entry: CacheEntry) -> None:
        """Remove *entry* using the order key it currently carries."""
        pos = self._entries.bisect_key_left(entry.order_key)
        if pos < len(self._entries) and self._entries[pos] is entry:
            del self._entries[pos]

    def reposition(self, entry: CacheEntry, recency: int, sequence: int) -> None:
        """Move *entry* to a new place in the order, updating it in step."""
        self.discard(entry)
        entry.recency = recency
        entry.sequence = sequence
        self.add(entry)

    def first(self) -> CacheEntry | None:
        return self._entries[0] if self._entries else None

    def last(self) -> CacheEntry | None:
        return self._entries[-1] if self._entries else None

    def at(self, index: int) -> CacheEntry:
        return self._entries[index]

    def between(self, start: int, end: int) -> list[CacheEntry]:
        """Entries whose recency lies in the closed interval [start, end]."""
        if start > end:
            return []
        return list(
            self._entries.irange_key(min_key=(start, _LOW_SEQ), max_key=(end, _HIGH_SEQ))
        )

    def clear(self) -> None:
        self._entries.clear()
