"""Type-scoped predicates for filtering cache keys and values.

A predicate only ever sees items that are instances of its ``applies_to`` type;
anything else is skipped without calling it. Field access is resolved once, when
the predicate is built, through :func:`accessor`.
"""

import operator
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from typing import Any

Accessor = Callable[[object], object]


def accessor(path: str) -> Accessor:
    """Build a getter for a dotted attribute path, e.g. ``"owner.address.city"``.

    An empty path returns the item itself.
    """
    path = path.strip()
    if not path:
        return lambda item: item
    return operator.attrgetter(path)


@dataclass(frozen=True, slots=True)
class Predicate:
    """Boolean test over items of a declared type.

    Args:
        applies_to: Type (or tuple of types) the predicate understands.
        accept: Called with each applicable item; exceptions propagate to the caller.
    """

    applies_to: type | tuple[type, ...]
    accept: Callable[[Any], bool]

    def applies(self, item: object) -> bool:
        return isinstance(item, self.applies_to)

    def __call__(self, item: object) -> bool:
        return self.applies(item) and bool(self.accept(item))

    @classmethod
    def where(
        cls,
        applies_to: type | tuple[type, ...],
        path: str,
        test: Callable[[object], bool],
    ) -> "Predicate":
        """Predicate applying *test* to the value found at *path* on each item."""
        get = accessor(path)
        return cls(applies_to, lambda item: test(get(item)))

    @classmethod
    def equals(
        cls, applies_to: type | tuple[type, ...], path: str, expected: object
    ) -> "Predicate":
        return cls.where(applies_to, path, lambda found: found == expected)


def filter_matching(items: Iterable[Any], predicate: Predicate) -> list[Any]:
    """Items of the predicate's type that it accepts, in input order."""
    return [item for item in items if predicate.applies(item) and predicate.accept(item)]
