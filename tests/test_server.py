import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path

import pytest

from objcache.cache.manager import CacheRegistry
from objcache.models.enums import EvictionPolicy
from objcache.server import (
    _reset_registry,
    app_lifespan,
    build_registry,
    get_registry,
    initialize,
    mcp,
    setup_logging,
)


def _clear_root_handlers() -> None:
    root = logging.getLogger()
    for handler in root.handlers[:]:
        root.removeHandler(handler)
        handler.close()


class TestSetupLogging:
    """Test setup_logging configuration."""

    def setup_method(self):
        _clear_root_handlers()

    def teardown_method(self):
        _clear_root_handlers()

    def test_sets_root_logger_level(self, tmp_path):
        setup_logging("DEBUG", tmp_path)
        assert logging.getLogger().level == logging.DEBUG

    def test_creates_console_handler(self, tmp_path):
        setup_logging("INFO", tmp_path)
        root = logging.getLogger()
        stream_handlers = [h for h in root.handlers if type(h) is logging.StreamHandler]
        assert len(stream_handlers) == 1

    def test_creates_file_handler(self, tmp_path):
        setup_logging("INFO", tmp_path)
        root = logging.getLogger()
        file_handlers = [h for h in root.handlers if isinstance(h, RotatingFileHandler)]
        assert len(file_handlers) == 1

    def test_log_file_path(self, tmp_path):
        setup_logging("INFO", tmp_path)
        root = logging.getLogger()
        file_handler = next(h for h in root.handlers if isinstance(h, RotatingFileHandler))
        assert Path(file_handler.baseFilename) == tmp_path / "logs" / "server.log"

    def test_no_duplicate_handlers_on_second_call(self, tmp_path):
        setup_logging("INFO", tmp_path)
        setup_logging("INFO", tmp_path)
        root = logging.getLogger()
        assert len([h for h in root.handlers if type(h) is logging.StreamHandler]) == 1
        assert len([h for h in root.handlers if isinstance(h, RotatingFileHandler)]) == 1

    def test_invalid_log_level_falls_back_to_info(self, tmp_path):
        setup_logging("INVALID_LEVEL", tmp_path)
        assert logging.getLogger().level == logging.INFO


class TestRegistryLifecycle:
    def teardown_method(self):
        _reset_registry()

    def test_get_registry_before_startup_raises(self):
        _reset_registry()
        with pytest.raises(RuntimeError, match="not initialized"):
            get_registry()

    def test_build_registry_uses_settings(self, monkeypatch):
        monkeypatch.setenv("DEFAULT_CACHE", "main")
        monkeypatch.setenv("DEFAULT_POLICY", "most_recently_touched")
        monkeypatch.setenv("DEFAULT_MAX_SIZE", "12")
        registry = build_registry()
        assert isinstance(registry, CacheRegistry)
        assert registry.default_name == "main"
        assert registry.default().policy == EvictionPolicy.MOST_RECENTLY_TOUCHED
        assert registry.default().max_size == 12

    async def test_lifespan_owns_registry(self):
        async with app_lifespan(mcp) as state:
            registry = get_registry()
            assert state["registry"] is registry
            registry.default().put("k", "v")
        with pytest.raises(RuntimeError):
            get_registry()
        assert registry.default().is_empty()


class TestInitialize:
    """Test the initialize function."""

    def setup_method(self):
        _clear_root_handlers()

    def teardown_method(self):
        _clear_root_handlers()

    def test_returns_mcp_instance(self, tmp_path, monkeypatch):
        monkeypatch.setenv("DATA_DIR", str(tmp_path))
        assert initialize() is mcp

    def test_creates_data_dir(self, tmp_path, monkeypatch):
        data_dir = tmp_path / "new_data"
        monkeypatch.setenv("DATA_DIR", str(data_dir))
        initialize()
        assert data_dir.exists()
        assert (data_dir / "logs").exists()

    def test_configures_logging(self, tmp_path, monkeypatch):
        monkeypatch.setenv("DATA_DIR", str(tmp_path))
        initialize()
        root = logging.getLogger()
        assert any(isinstance(h, RotatingFileHandler) for h in root.handlers)
