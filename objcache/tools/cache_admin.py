import logging
from datetime import datetime, timezone

from fastmcp import FastMCP

from objcache.cache.object_cache import FAR_FUTURE_MS, UNBOUNDED
from objcache.server import get_registry
from objcache.tools.error_messages import safe_tool_wrapper

logger = logging.getLogger(__name__)

_MISSING = object()


def _format_ms(ms: int | None) -> str:
    if ms is None:
        return "-"
    return datetime.fromtimestamp(ms / 1000, tz=timezone.utc).strftime("%Y-%m-%d %H:%M:%S.%f")[:-3]


def _format_bound(size: int) -> str:
    return "unbounded" if size == UNBOUNDED else str(size)


def register_cache_tools(mcp: FastMCP) -> None:
    """Register cache management tools on the MCP server."""

    @mcp.tool
    async def list_caches() -> str:
        """List every named cache with its policy, size and bound.

        Returns:
            One line per cache; the default cache is marked.
        """
        registry = get_registry()
        lines: list[str] = []
        for name in registry.names():
            stats = registry.stats(name)
            marker = " (default)" if name == registry.default_name else ""
            lines.append(
                f"- {name}{marker}: {stats.size} entries, "
                f"max {_format_bound(stats.max_size)}, policy {stats.policy.value}"
            )
        return "\n".join(lines)

    @mcp.tool
    async def create_cache(
        name: str,
        policy: str | None = None,
        max_size: int | None = None,
    ) -> str:
        """Create a named cache, or report the existing one.

        Args:
            name: Cache name.
            policy: "most_recently_touched", "least_recently_touched" or "random".
            max_size: Maximum number of entries; omit or use -1 for no bound.

        Returns:
            Confirmation with the cache's policy and bound.
        """

        async def _create() -> str:
            registry = get_registry()
            existed = name in registry
            cache = registry.create(name, policy=policy, max_size=max_size)
            verb = "already exists" if existed else "created"
            return (
                f"Cache '{name}' {verb} "
                f"(policy {cache.policy.value}, max {_format_bound(cache.max_size)})."
            )

        return await safe_tool_wrapper(_create, context={"cache": name})

    @mcp.tool
    async def drop_cache(name: str) -> str:
        """Delete a named cache and everything in it. The default cache is kept.

        Args:
            name: Cache name.
        """

        async def _drop() -> str:
            get_registry().drop(name)
            return f"Dropped cache '{name}'."

        return await safe_tool_wrapper(_drop, context={"cache": name})

    @mcp.tool
    async def cache_stats(name: str | None = None) -> str:
        """Show size, bound, capacity, policy and touch-time range of a cache.

        Args:
            name: Cache name; the default cache when omitted.
        """

        async def _stats() -> str:
            registry = get_registry()
            stats = registry.stats(name or registry.default_name)
            capacity = "unbounded" if stats.max_size == UNBOUNDED else str(stats.capacity)
            return "\n".join(
                [
                    f"Cache '{stats.name}'",
                    f"Policy: {stats.policy.value}",
                    f"Size: {stats.size}",
                    f"Max size: {_format_bound(stats.max_size)}",
                    f"Capacity: {capacity}",
                    f"Oldest touch: {_format_ms(stats.oldest_touch_ms)}",
                    f"Newest touch: {_format_ms(stats.newest_touch_ms)}",
                ]
            )

        return await safe_tool_wrapper(_stats, context={"cache": name or "default"})

    @mcp.tool
    async def flush_cache(name: str) -> str:
        """Remove every entry from a cache.

        Args:
            name: Cache name.
        """

        async def _flush() -> str:
            get_registry().flush(name)
            return f"Flushed cache '{name}'."

        return await safe_tool_wrapper(_flush, context={"cache": name})

    @mcp.tool
    async def resize_cache(name: str, size: int) -> str:
        """Set a cache's maximum size and evict down to it immediately.

        Args:
            name: Cache name.
            size: New maximum size; values of 0 or less are ignored.
        """

        async def _resize() -> str:
            registry = get_registry()
            if size <= 0:
                return f"Ignored: size must be positive (got {size})."
            registry.resize(name, size)
            return f"Resized cache '{name}' to {size}; it now holds {registry.get(name).size()} entries."

        return await safe_tool_wrapper(_resize, context={"cache": name})

    @mcp.tool
    async def set_cache_max_size(name: str, size: int) -> str:
        """Record a new maximum size without evicting anything now.

        Args:
            name: Cache name.
            size: New maximum size; values below 1 are ignored.
        """

        async def _set() -> str:
            registry = get_registry()
            if size < 1:
                return f"Ignored: size must be at least 1 (got {size})."
            registry.set_max_size(name, size)
            return f"Max size of cache '{name}' set to {size}."

        return await safe_tool_wrapper(_set, context={"cache": name})

    @mcp.tool
    async def set_cache_policy(name: str, policy: str) -> str:
        """Change the eviction policy of a cache. Affects future evictions only.

        Args:
            name: Cache name.
            policy: "most_recently_touched", "least_recently_touched" or "random".
        """

        async def _set() -> str:
            registry = get_registry()
            registry.set_policy(name, policy)
            return f"Policy of cache '{name}' set to {registry.get(name).policy.value}."

        return await safe_tool_wrapper(_set, context={"cache": name})

    @mcp.tool
    async def put_cache_entry(name: str, key: str, value: str) -> str:
        """Store a text value in a cache, evicting per policy if it is full.

        Args:
            name: Cache name.
            key: Entry key.
            value: Entry value.
        """

        async def _put() -> str:
            cache = get_registry().get(name)
            cache.put(key, value)
            return f"Stored '{key}' in cache '{name}' ({cache.size()} entries)."

        return await safe_tool_wrapper(_put, context={"cache": name})

    @mcp.tool
    async def get_cache_entry(name: str, key: str) -> str:
        """Read an entry from a cache. Reading counts as a touch.

        Args:
            name: Cache name.
            key: Entry key.
        """

        async def _get() -> str:
            value = get_registry().get(name).get(key, _MISSING)
            if value is _MISSING:
                return f"No entry '{key}' in cache '{name}'."
            return str(value)

        return await safe_tool_wrapper(_get, context={"cache": name})

    @mcp.tool
    async def remove_cache_entry(name: str, key: str) -> str:
        """Remove an entry from a cache. Missing keys are ignored.

        Args:
            name: Cache name.
            key: Entry key.
        """

        async def _remove() -> str:
            get_registry().get(name).remove(key)
            return f"Removed '{key}' from cache '{name}'."

        return await safe_tool_wrapper(_remove, context={"cache": name})

    @mcp.tool
    async def dump_cache(name: str, limit: int = 50) -> str:
        """List a cache's entries, least recently touched first.

        Args:
            name: Cache name.
            limit: Maximum number of entries to show.
        """

        async def _dump() -> str:
            cache = get_registry().get(name)
            contents = cache.to_map()
            if not contents:
                return f"Cache '{name}' is empty."
            lines = [f"- {k!s}: {v!s}" for k, v in list(contents.items())[:limit]]
            if len(contents) > limit:
                lines.append(f"... and {len(contents) - limit} more")
            return "\n".join(lines)

        return await safe_tool_wrapper(_dump, context={"cache": name})

    @mcp.tool
    async def slice_cache(
        name: str,
        from_ms: int = 0,
        to_ms: int | None = None,
        into: str | None = None,
    ) -> str:
        """Select entries last touched within a time window.

        Args:
            name: Source cache name.
            from_ms: Window start, epoch milliseconds (inclusive).
            to_ms: Window end, epoch milliseconds (inclusive); open-ended when omitted.
            into: If given, merge the selected entries into this cache (created
                if needed), keeping their touch times.

        Returns:
            The selected keys, or a confirmation of the merge.
        """

        async def _slice() -> str:
            registry = get_registry()
            source = registry.get(name)
            end = FAR_FUTURE_MS if to_ms is None else to_ms
            if into is None:
                selected = source.slice(from_ms, end)
                if not selected:
                    return f"No entries in cache '{name}' were touched in that window."
                return "\n".join(f"- {k!s}: {v!s}" for k, v in selected.items())

            sliced = source.cache_slice(from_ms, end)
            target = registry.create(into)
            target.merge(sliced)
            return f"Copied {sliced.size()} entries from '{name}' into '{into}'."

        return await safe_tool_wrapper(_slice, context={"cache": name})

    @mcp.tool
    async def merge_caches(source: str, target: str) -> str:
        """Copy every entry of one cache into another, keeping touch times.

        Args:
            source: Cache to copy from.
            target: Cache to copy into.
        """

        async def _merge() -> str:
            registry = get_registry()
            if source not in registry:
                return f"No cache named '{source}'. Use list_caches to see what exists."
            other = registry.get(source)
            registry.merge(target, other)
            return (
                f"Merged '{source}' into '{target}'; "
                f"'{target}' now holds {registry.get(target).size()} entries."
            )

        return await safe_tool_wrapper(_merge, context={"cache": target})
