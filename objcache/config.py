from pathlib import Path

from pydantic import computed_field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from objcache.models.enums import EvictionPolicy


class Settings(BaseSettings):
    """Server configuration loaded from environment variables and .env file.

    Cache defaults apply to the registry's default cache and to any cache
    created through the management tools without an explicit policy or bound.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Cache defaults
    default_cache: str = "default"
    default_policy: EvictionPolicy = EvictionPolicy.LEAST_RECENTLY_TOUCHED
    default_max_size: int = -1

    # Remote hosting: transport and bind address
    mcp_transport: str = "stdio"
    mcp_host: str = "0.0.0.0"
    mcp_port: int = 8000

    # Paths & logging: default is <project_root>/data so it works
    # regardless of the process working directory.
    data_dir: Path = Path(__file__).resolve().parent.parent / "data"
    log_level: str = "INFO"

    @field_validator("default_policy", mode="before")
    @classmethod
    def _parse_policy(cls, value: object) -> EvictionPolicy:
        return EvictionPolicy.parse(value)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def log_path(self) -> Path:
        return self.data_dir / "logs" / "server.log"


_settings: Settings | None = None


def get_settings() -> Settings:
    """Return the cached Settings singleton. Created on first call."""
    global _settings  # noqa: PLW0603
    if _settings is None:
        _settings = Settings()
    return _settings


def reset_settings() -> None:
    """Clear the cached settings. Used in tests."""
    global _settings  # noqa: PLW0603
    _settings = None
