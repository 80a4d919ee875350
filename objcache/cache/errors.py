"""Exception hierarchy for the object cache and its managers."""


class CacheError(Exception):
    """Base class for all cache errors."""


class InvalidPolicyError(CacheError, ValueError):
    """Eviction policy is not one of the recognised values."""


class EmptyCacheError(CacheError, LookupError):
    """A first/last accessor was called on a cache with no entries."""


class UnsupportedOperationError(CacheError, NotImplementedError):
    """The manager or iterator does not support the requested operation."""


class UnknownCacheError(UnsupportedOperationError, KeyError):
    """A keyed manager was asked about a cache name it does not hold."""

    def __str__(self) -> str:
        # KeyError.__str__ would repr() the message
        return str(self.args[0]) if self.args else ""
