"""Configuration models for bqs."""

from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from bqs.utils.xdg import get_cache_dir


class CacheTTLConfig(BaseModel):
    """Cache lifetimes per data kind, in seconds.

    Table lists change infrequently, metadata (rows, size) moderately and
    schemas rarely.
    """

    table_list: float = Field(default=300.0, gt=0)
    metadata: float = Field(default=900.0, gt=0)
    schema_: float = Field(default=1800.0, gt=0, alias="schema")
    default: float = Field(default=900.0, gt=0)

    model_config = ConfigDict(populate_by_name=True)


class BqsSettings(BaseSettings):
    """bqs settings with automatic environment variable support.

    Precedence order (highest to lowest):
    1. Environment variables (``BQS_*``)
    2. Constructor arguments
    3. .env file
    4. Default values
    """

    model_config = SettingsConfigDict(
        env_prefix="BQS_",
        env_nested_delimiter="__",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: Any,
        env_settings: Any,
        dotenv_settings: Any,
        file_secret_settings: Any,
    ) -> tuple[Any, ...]:
        """Environment first, then constructor arguments."""
        return (
            env_settings,
            init_settings,
            dotenv_settings,
            file_secret_settings,
        )

    cache_dir: Path | None = Field(
        default=None,
        description="Cache directory override (defaults to $XDG_CACHE_HOME/bqs or ~/.cache/bqs)",
    )
    cache_timeout: float = Field(
        default=60.0, gt=0, description="SQLite busy timeout for the cache database"
    )
    cache_ttls: CacheTTLConfig = Field(default_factory=CacheTTLConfig)

    bq_path: str = Field(default="bq", description="bq executable to invoke")
    bq_timeout: float | None = Field(
        default=None, description="Timeout in seconds for a single bq invocation"
    )
    max_results: int = Field(default=1000, gt=0, description="Page size for bq ls")

    log_level: str = "WARNING"

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is a recognized value."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        upper_v = v.strip().upper()
        if upper_v not in valid_levels:
            raise ValueError(f"Log level must be one of {valid_levels}")
        return upper_v

    @property
    def resolved_cache_dir(self) -> Path:
        """Directory holding the cache, created if needed."""
        if self.cache_dir is not None:
            path = self.cache_dir.expanduser()
            path.mkdir(parents=True, exist_ok=True)
            return path
        return get_cache_dir()

    @property
    def cache_db_path(self) -> Path:
        """Directory handed to the durable cache store."""
        return self.resolved_cache_dir / "metadata"
