import pytest

import objcache.cache.object_cache as object_cache_mod
from objcache.config import reset_settings
from tests.factories import FakeClock


@pytest.fixture(autouse=True)
def _isolate_settings(monkeypatch: pytest.MonkeyPatch):
    """Keep cache settings from the host environment out of the tests."""
    for name in ("DEFAULT_CACHE", "DEFAULT_POLICY", "DEFAULT_MAX_SIZE", "LOG_LEVEL", "DATA_DIR"):
        monkeypatch.delenv(name, raising=False)
    reset_settings()
    yield
    reset_settings()


@pytest.fixture
def clock(monkeypatch: pytest.MonkeyPatch) -> FakeClock:
    """Pin the cache clock; starts at 1 ms and only moves when told to."""
    fake = FakeClock()
    monkeypatch.setattr(object_cache_mod, "now_ms", fake)
    return fake
