import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from logging.handlers import RotatingFileHandler
from pathlib import Path

from fastmcp import FastMCP

from objcache.cache.manager import CacheRegistry

logger = logging.getLogger(__name__)

_registry: CacheRegistry | None = None


def get_registry() -> CacheRegistry:
    """Get the current CacheRegistry instance. Raises if not initialized."""
    if _registry is None:
        raise RuntimeError("Cache registry not initialized. Server lifespan has not started.")
    return _registry


def _reset_registry() -> None:
    """Clear the module-level registry reference. Used in tests."""
    global _registry  # noqa: PLW0603
    _registry = None


def build_registry() -> CacheRegistry:
    """Construct a registry from the current settings."""
    from objcache.config import get_settings

    settings = get_settings()
    return CacheRegistry(
        settings.default_cache,
        default_policy=settings.default_policy,
        default_max_size=settings.default_max_size,
    )


@asynccontextmanager
async def app_lifespan(server: FastMCP) -> AsyncIterator[dict]:
    """Own the cache registry for the server lifecycle."""
    global _registry  # noqa: PLW0603
    _registry = build_registry()
    logger.info("Cache registry initialized (default cache '%s')", _registry.default_name)
    try:
        yield {"registry": _registry}
    finally:
        for name in _registry.names():
            _registry.flush(name)
        _registry = None
        logger.info("Cache registry released")


mcp = FastMCP("object-cache", lifespan=app_lifespan)


def setup_logging(log_level: str, data_dir: Path) -> None:
    """Configure logging with file rotation and console output.

    Args:
        log_level: Logging level string (DEBUG, INFO, WARNING, ERROR).
        data_dir: Base data directory: logs go to data_dir/logs/server.log.
    """
    level = getattr(logging, log_level.upper(), logging.INFO)
    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    formatter = logging.Formatter(
        "%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    # Console handler: exact type check avoids matching subclasses (FileHandler, etc.)
    if not any(type(h) is logging.StreamHandler for h in root_logger.handlers):
        console = logging.StreamHandler()
        console.setLevel(level)
        console.setFormatter(formatter)
        root_logger.addHandler(console)

    log_dir = data_dir / "logs"
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / "server.log"

    if not any(isinstance(h, RotatingFileHandler) for h in root_logger.handlers):
        file_handler = RotatingFileHandler(
            log_file,
            maxBytes=5 * 1024 * 1024,  # 5 MB
            backupCount=3,
        )
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)


def initialize() -> FastMCP:
    """Set up directories, logging, and register tools. Returns the MCP server."""
    from objcache.config import get_settings

    settings = get_settings()

    settings.data_dir.mkdir(parents=True, exist_ok=True)
    (settings.data_dir / "logs").mkdir(exist_ok=True)

    setup_logging(settings.log_level, settings.data_dir)

    from objcache.tools.cache_admin import register_cache_tools

    register_cache_tools(mcp)

    logger.info("Object cache server initialized")
    return mcp
