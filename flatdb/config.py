"""Configuration for FlatDB, read from FLATDB_* environment variables."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from flatdb.types import CommitMode, RowFormat


class StorageConfig(BaseModel):
    """Where databases live."""

    data_dir: Path = Field(default=Path("./data"), description="Root directory of all databases")


class EngineConfig(BaseModel):
    """Query engine behaviour."""

    row_format: RowFormat = Field(default=RowFormat.PLAIN, description="Data file row encoding")
    commit_mode: CommitMode = Field(
        default=CommitMode.BEST_EFFORT, description="Replay policy for COMMIT"
    )
    strict_keywords: bool = Field(
        default=False, description="Require TABLE/INTO/FROM/VALUES in their token slots"
    )


class ServerConfig(BaseModel):
    """HTTP API configuration."""

    host: str = Field(default="127.0.0.1", description="Server host")
    port: int = Field(default=5000, ge=1, le=65535, description="Server port")
    debug: bool = Field(default=False, description="Flask debug mode")


class ObservabilityConfig(BaseModel):
    """Logging configuration."""

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO", description="Log level"
    )


class Settings(BaseSettings):
    """Main configuration for FlatDB."""

    model_config = SettingsConfigDict(
        env_prefix="FLATDB_",
        env_nested_delimiter="__",
        case_sensitive=False,
    )

    storage: StorageConfig = Field(default_factory=StorageConfig)
    engine: EngineConfig = Field(default_factory=EngineConfig)
    server: ServerConfig = Field(default_factory=ServerConfig)
    observability: ObservabilityConfig = Field(default_factory=ObservabilityConfig)

    def ensure_directories(self) -> None:
        self.storage.data_dir.mkdir(parents=True, exist_ok=True)


@lru_cache
def get_settings() -> Settings:
    """Get the process-wide settings (cached)."""
    return Settings()
