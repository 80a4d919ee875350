from enum import StrEnum

from objcache.cache.errors import InvalidPolicyError


class EvictionPolicy(StrEnum):
    """Which entry to evict when a cache grows past its maximum size.

    The legacy names keep their historical mapping: ``"oldest"`` evicts
    the entry with the *largest* recorded touch time and ``"youngest"`` the one
    with the smallest.
    """

    MOST_RECENTLY_TOUCHED = "most_recently_touched"
    LEAST_RECENTLY_TOUCHED = "least_recently_touched"
    RANDOM = "random"

    @classmethod
    def parse(cls, value: object) -> "EvictionPolicy":
        """Resolve *value* to a policy.

        Raises:
            InvalidPolicyError: If *value* is not a recognised policy or alias.
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            name = value.strip().lower()
            name = _LEGACY_ALIASES.get(name, name)
            try:
                return cls(name)
            except ValueError:
                pass
        raise InvalidPolicyError(f"Incorrect policy: {value!r}")


_LEGACY_ALIASES = {
    "oldest": EvictionPolicy.MOST_RECENTLY_TOUCHED.value,
    "youngest": EvictionPolicy.LEAST_RECENTLY_TOUCHED.value,
    "mru": EvictionPolicy.MOST_RECENTLY_TOUCHED.value,
    "lru": EvictionPolicy.LEAST_RECENTLY_TOUCHED.value,
}
