"""Bounded object cache with recency tracking, policy-driven eviction and time slicing.

Every entry records the wall-clock millisecond of its last *touch* (insert,
``put`` of an existing key, or a successful ``get``). When the cache holds more
entries than its maximum size, entries are evicted according to the active
:class:`~objcache.models.enums.EvictionPolicy`.

All public methods take one re-entrant lock for their whole duration, so the
entry store and the recency index are never observed out of step.
"""

import itertools
import logging
import random
import threading
import time
from collections.abc import Hashable, Mapping
from datetime import datetime, timedelta, timezone
from typing import Any

from objcache.cache.errors import EmptyCacheError
from objcache.cache.eviction import select_victim
from objcache.cache.iterator import CacheKeyIterator
from objcache.cache.predicates import Predicate, filter_matching
from objcache.cache.recency import RecencyIndex
from objcache.models.entry import CacheEntry
from objcache.models.enums import EvictionPolicy

logger = logging.getLogger(__name__)

UNBOUNDED = -1
"""Maximum size (and capacity) sentinel for a cache without a size bound."""

EPOCH_MS = 0
FAR_FUTURE_MS = 2**63 - 1

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)

TimeBound = int | datetime


def now_ms() -> int:
    """Current wall-clock time in whole milliseconds since the epoch."""
    return time.time_ns() // 1_000_000


def to_millis(when: TimeBound) -> int:
    """Convert a slice bound to epoch milliseconds.

    Naive datetimes are interpreted in local time, as ``datetime.timestamp`` does.
    """
    if isinstance(when, datetime):
        aware = when if when.tzinfo is not None else when.astimezone()
        return (aware - _EPOCH) // timedelta(milliseconds=1)
    return int(when)


class ObjectCache:
    """Key/value cache bounded by an optional maximum size.

    Args:
        policy: Eviction policy (an ``EvictionPolicy`` or one of its names).
        max_size: Maximum number of entries; values below 1 leave the cache unbounded.
        rng: Random source for ``EvictionPolicy.RANDOM``.

    Raises:
        InvalidPolicyError: If *policy* is not recognised.
    """

    def __init__(
        self,
        policy: EvictionPolicy | str = EvictionPolicy.RANDOM,
        max_size: int = UNBOUNDED,
        *,
        rng: random.Random | None = None,
    ) -> None:
        self._policy = EvictionPolicy.parse(policy)
        self._max_size = max_size if max_size >= 1 else UNBOUNDED
        self._rng = rng or random.Random()
        self._entries: dict[Hashable, CacheEntry] = {}
        self._order = RecencyIndex()
        self._sequence = itertools.count()
        self._lock = threading.RLock()

    def __repr__(self) -> str:
        return (
            f"ObjectCache(policy={self._policy.value!r}, "
            f"max_size={self._max_size}, size={len(self._entries)})"
        )

    # ── Policy & bounds ──────────────────────────────────────────────────────

    @property
    def policy(self) -> EvictionPolicy:
        return self._policy

    def get_policy(self) -> EvictionPolicy:
        return self._policy

    def set_policy(self, policy: EvictionPolicy | str) -> None:
        """Change the policy used by future evictions.

        Raises:
            InvalidPolicyError: If *policy* is not recognised.
        """
        parsed = EvictionPolicy.parse(policy)
        with self._lock:
            self._policy = parsed
        logger.info("Cache policy set to %s", parsed.value)

    @property
    def max_size(self) -> int:
        return self._max_size

    def get_max_size(self) -> int:
        return self._max_size

    def set_max_size(self, size: int) -> None:
        """Record a new bound without evicting. Sizes below 1 are ignored."""
        if size < 1:
            return
        with self._lock:
            self._max_size = size

    def resize(self, size: int) -> None:
        """Set the bound to *size* and evict down to it now. ``size <= 0`` is ignored."""
        if size <= 0:
            return
        with self._lock:
            self._max_size = size
            evicted = self._shrink_to(size)
        logger.info("Cache resized to %d (%d evicted)", size, evicted)

    def capacity(self) -> int:
        with self._lock:
            if self._max_size == UNBOUNDED:
                return UNBOUNDED
            return self._max_size - len(self._entries)

    def size(self) -> int:
        with self._lock:
            return len(self._entries)

    def __len__(self) -> int:
        return self.size()

    def is_empty(self) -> bool:
        return self.size() == 0

    # ── Core operations ──────────────────────────────────────────────────────

    def put(self, key: Hashable, value: Any) -> None:
        """Store *value* under *key*, touching the entry.

        A new key is only inserted after evicting enough entries to leave room
        for it under the current bound.
        """
        with self._lock:
            self._put_locked(key, value)

    def put_all(self, mapping: Mapping[Hashable, Any]) -> None:
        """Equivalent to calling :meth:`put` for every item of *mapping*."""
        with self._lock:
            for key, value in mapping.items():
                self._put_locked(key, value)

    def get(self, key: Hashable, default: Any = None) -> Any:
        """Return the value for *key* (touching it), or *default* if absent."""
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return default
            self._touch(entry)
            return entry.value

    def remove(self, key: Hashable) -> None:
        with self._lock:
            entry = self._entries.pop(key, None)
            if entry is not None:
                self._order.discard(entry)

    def contains_key(self, key: Hashable) -> bool:
        with self._lock:
            return key in self._entries

    def __contains__(self, key: object) -> bool:
        return self.contains_key(key)  # type: ignore[arg-type]

    def flush(self) -> None:
        """Remove every entry."""
        with self._lock:
            self._entries.clear()
            self._order.clear()

    # ── Ordered access ───────────────────────────────────────────────────────

    def first_key(self) -> Hashable:
        """Key with the smallest recency. Does not touch.

        Raises:
            EmptyCacheError: If the cache has no entries.
        """
        with self._lock:
            return self._first_entry().key

    def last_key(self) -> Hashable:
        """Key with the largest recency. Does not touch.

        Raises:
            EmptyCacheError: If the cache has no entries.
        """
        with self._lock:
            return self._last_entry().key

    def first_value(self) -> Any:
        """Value with the smallest recency; the entry is touched.

        Raises:
            EmptyCacheError: If the cache has no entries.
        """
        with self._lock:
            entry = self._first_entry()
            self._touch(entry)
            return entry.value

    def last_value(self) -> Any:
        """Value with the largest recency; the entry is touched.

        Raises:
            EmptyCacheError: If the cache has no entries.
        """
        with self._lock:
            entry = self._last_entry()
            self._touch(entry)
            return entry.value

    def last_access_time(self, key: Hashable) -> int | None:
        """Recorded recency of *key* in epoch milliseconds, or ``None`` if absent."""
        with self._lock:
            entry = self._entries.get(key)
            return entry.recency if entry is not None else None

    def set_last_access_time(self, key: Hashable, when: TimeBound) -> None:
        """Overwrite the recorded recency of *key* without touching it.

        Missing keys are ignored.
        """
        with self._lock:
            entry = self._entries.get(key)
            if entry is not None:
                self._order.reposition(entry, to_millis(when), next(self._sequence))

    # ── Snapshots ────────────────────────────────────────────────────────────

    def keys(self) -> list[Hashable]:
        """All keys, least recently touched first."""
        with self._lock:
            return [entry.key for entry in self._order]

    def values(self) -> list[Any]:
        """All values, least recently touched first."""
        with self._lock:
            return [entry.value for entry in self._order]

    def keys_to_list(self, target: list) -> None:
        target.extend(self.keys())

    def values_to_list(self, target: list) -> None:
        target.extend(self.values())

    def to_map(self) -> dict[Hashable, Any]:
        """Key/value dump, least recently touched first."""
        with self._lock:
            return {entry.key: entry.value for entry in self._order}

    def iterator(self) -> CacheKeyIterator:
        """Read-only iterator over a recency-ordered snapshot of the keys."""
        return CacheKeyIterator(self.keys())

    def __iter__(self) -> CacheKeyIterator:
        return self.iterator()

    def _entry_snapshot(self) -> list[tuple[Hashable, Any, int]]:
        with self._lock:
            return [(e.key, e.value, e.recency) for e in self._order]

    # ── Predicate scans ──────────────────────────────────────────────────────

    def keys_matching(self, predicate: Predicate) -> list[Hashable]:
        """Keys accepted by *predicate*. Keys of other types are skipped."""
        return filter_matching(self.keys(), predicate)

    def values_matching(self, predicate: Predicate) -> list[Any]:
        """Values accepted by *predicate*. Values of other types are skipped."""
        return filter_matching(self.values(), predicate)

    def keys_for_filtered_values(self, predicate: Predicate) -> list[Hashable]:
        """Keys whose value is accepted by *predicate*.

        Each value is read through :meth:`get`, so every examined entry is touched.
        """
        matched: list[Hashable] = []
        with self._lock:
            for key in self.keys():
                value = self.get(key)
                if predicate.applies(value) and predicate.accept(value):
                    matched.append(key)
        return matched

    # ── Merge & slicing ──────────────────────────────────────────────────────

    def merge(self, other: "ObjectCache") -> None:
        """Copy every entry of *other*, keeping its recorded recency.

        The bound is enforced once all entries are copied.
        """
        if other is self:
            return
        snapshot = other._entry_snapshot()
        with self._lock:
            for key, value, recency in snapshot:
                entry = self._entries.get(key)
                if entry is None:
                    self._insert(key, value, recency)
                else:
                    entry.value = value
                    self._order.reposition(entry, recency, next(self._sequence))
            if self._max_size != UNBOUNDED:
                self._shrink_to(self._max_size)
        logger.debug("Merged %d entries", len(snapshot))

    def cache_slice(self, from_: TimeBound, to: TimeBound) -> "ObjectCache":
        """New cache (same policy and bound) holding entries touched within [from_, to].

        Entries are copied oldest first through :meth:`put`, so the slice obeys the
        bound as it fills: if the window holds more entries than the bound, the
        policy evicts some of them from the slice.
        """
        start, end = to_millis(from_), to_millis(to)
        with self._lock:
            sliced = ObjectCache(self._policy, self._max_size, rng=self._rng)
            for entry in self._order.between(start, end):
                sliced.put(entry.key, entry.value)
                sliced.set_last_access_time(entry.key, entry.recency)
        return sliced

    def cache_slice_from(self, from_: TimeBound) -> "ObjectCache":
        return self.cache_slice(from_, FAR_FUTURE_MS)

    def cache_slice_to(self, to: TimeBound) -> "ObjectCache":
        return self.cache_slice(EPOCH_MS, to)

    def slice(self, from_: TimeBound, to: TimeBound) -> dict[Hashable, Any]:
        """Key/value snapshot of entries touched within [from_, to]."""
        start, end = to_millis(from_), to_millis(to)
        with self._lock:
            return {e.key: e.value for e in self._order.between(start, end)}

    def slice_from(self, from_: TimeBound) -> dict[Hashable, Any]:
        return self.slice(from_, FAR_FUTURE_MS)

    def slice_to(self, to: TimeBound) -> dict[Hashable, Any]:
        return self.slice(EPOCH_MS, to)

    # ── Internals (lock held) ────────────────────────────────────────────────

    def _put_locked(self, key: Hashable, value: Any) -> None:
        bound = self._max_size
        if bound != UNBOUNDED:
            self._shrink_to(bound)
            if key not in self._entries:
                self._shrink_to(bound - 1)

        entry = self._entries.get(key)
        if entry is None:
            self._insert(key, value, now_ms())
        else:
            entry.value = value
            self._touch(entry)

    def _insert(self, key: Hashable, value: Any, recency: int) -> None:
        entry = CacheEntry(key=key, value=value, recency=recency, sequence=next(self._sequence))
        self._entries[key] = entry
        self._order.add(entry)

    def _touch(self, entry: CacheEntry) -> None:
        self._order.reposition(entry, now_ms(), next(self._sequence))

    def _shrink_to(self, limit: int) -> int:
        evicted = 0
        while len(self._entries) > limit:
            victim = select_victim(self._policy, self._order, self._rng)
            if victim is None:
                break
            self._order.discard(victim)
            del self._entries[victim.key]
            evicted += 1
            logger.debug("Evicted %r (policy=%s)", victim.key, self._policy.value)
        return evicted

    def _first_entry(self) -> CacheEntry:
        entry = self._order.first()
        if entry is None:
            raise EmptyCacheError("Cache is empty")
        return entry

    def _last_entry(self) -> CacheEntry:
        entry = self._order.last()
        if entry is None:
            raise EmptyCacheError("Cache is empty")
        return entry
