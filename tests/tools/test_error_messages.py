"""Tests for objcache.tools.error_messages: get_user_message + safe_tool_wrapper."""

from objcache.cache.errors import (
    EmptyCacheError,
    InvalidPolicyError,
    UnknownCacheError,
    UnsupportedOperationError,
)
from objcache.tools.error_messages import get_user_message, safe_tool_wrapper


class TestGetUserMessage:
    def test_invalid_policy_lists_choices(self):
        msg = get_user_message(InvalidPolicyError("Incorrect policy: 'fifo'"))
        assert "Incorrect policy" in msg
        assert "most_recently_touched" in msg
        assert "random" in msg

    def test_empty_cache(self):
        msg = get_user_message(EmptyCacheError("empty"), context={"cache": "sessions"})
        assert msg == "Cache 'sessions' is empty."

    def test_unknown_cache(self):
        msg = get_user_message(UnknownCacheError("x"), context={"cache": "ghost"})
        assert "No cache named 'ghost'" in msg

    def test_unsupported_operation(self):
        msg = get_user_message(UnsupportedOperationError("nope"), context={"cache": "c"})
        assert "not supported" in msg
        assert "nope" in msg

    def test_unknown_error(self):
        msg = get_user_message(ValueError("unexpected"))
        assert "something went wrong" in msg.lower()

    def test_no_context_uses_default(self):
        msg = get_user_message(EmptyCacheError("x"))
        assert "the cache" in msg


class TestSafeToolWrapper:
    async def test_success_passthrough(self):
        async def ok(value: str) -> str:
            return f"ok {value}"

        assert await safe_tool_wrapper(ok, "x") == "ok x"

    async def test_error_returns_message(self):
        async def fail() -> str:
            raise UnknownCacheError("No cache named 'ghost'")

        result = await safe_tool_wrapper(fail, context={"cache": "ghost"})
        assert "No cache named 'ghost'" in result

    async def test_error_is_logged(self, caplog):
        async def fail() -> str:
            raise RuntimeError("boom")

        with caplog.at_level("ERROR"):
            await safe_tool_wrapper(fail)
        assert "Tool error in fail" in caplog.text
