"""User-friendly error messages and safe tool wrapper."""

import logging

from objcache.cache.errors import (
    EmptyCacheError,
    InvalidPolicyError,
    UnknownCacheError,
    UnsupportedOperationError,
)
from objcache.models.enums import EvictionPolicy

logger = logging.getLogger(__name__)


def get_user_message(error: Exception, context: dict | None = None) -> str:
    """Map an exception to a user-friendly message.

    Args:
        error: The exception to translate.
        context: Optional dict with extra info (e.g. {"cache": "sessions"}).

    Returns:
        A human-readable error message.
    """
    cache = (context or {}).get("cache", "the cache")

    if isinstance(error, InvalidPolicyError):
        choices = ", ".join(p.value for p in EvictionPolicy)
        return f"{error}. Use one of: {choices}."
    if isinstance(error, EmptyCacheError):
        return f"Cache '{cache}' is empty."
    if isinstance(error, UnknownCacheError):
        return f"No cache named '{cache}'. Use list_caches to see what exists."
    if isinstance(error, UnsupportedOperationError):
        return f"That operation is not supported for '{cache}'. {error}"
    return "Something went wrong. Please try again or check the server log."


async def safe_tool_wrapper(
    func,  # type: ignore[no-untyped-def]
    *args: object,
    context: dict | None = None,
    **kwargs: object,
) -> str:
    """Call an async function, catching errors and returning friendly messages.

    Args:
        func: Async callable to invoke.
        *args: Positional arguments for *func*.
        context: Optional context dict for error messages.
        **kwargs: Keyword arguments for *func*.

    Returns:
        The function's return value on success, or a user-friendly error string.
    """
    try:
        return await func(*args, **kwargs)
    except Exception as exc:  # noqa: BLE001
        logger.exception("Tool error in %s", func.__name__)
        return get_user_message(exc, context)
