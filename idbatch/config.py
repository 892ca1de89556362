"""
Configuration settings for idbatch.

Uses Pydantic Settings to load environment variables for logging, batch
execution defaults, and export behaviour. Per-job options live on
`GenerationSettings` (see `idbatch.domain.models`); this module only covers
process-wide defaults.
"""
from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Application
    app_env: str = Field("development", alias="APP_ENV")
    log_level: str = Field("INFO", alias="LOG_LEVEL")
    log_json: bool = Field(False, alias="LOG_JSON")

    # Batch defaults
    max_count: int = Field(100_000, alias="IDBATCH_MAX_COUNT")
    default_chunk_size: int = Field(50, alias="IDBATCH_CHUNK_SIZE")
    yield_seconds: float = Field(0.0, alias="IDBATCH_YIELD_SECONDS")
    failure_policy: Literal["tolerant", "strict"] = Field("tolerant", alias="IDBATCH_FAILURE_POLICY")

    # Export
    export_dir: str = Field("exports", alias="IDBATCH_EXPORT_DIR")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Retrieve a cached instance of Settings to avoid repeated env parsing.
    """
    return Settings()


__all__ = ["Settings", "get_settings"]
