"""Configuration settings for the music direct-link server."""

from pathlib import Path
from typing import Literal

from pydantic import Field, computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Server binding, media location, cache and logging knobs."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    #  Server
    host: str = Field(default="0.0.0.0", description="Bind address")
    port: int = Field(default=5000, description="Listening port")
    music_dir: Path = Field(
        default=Path("music"),
        description="Media root; relative paths resolve against the cwd",
    )

    #  Metadata cache
    cache_ttl_seconds: float = Field(default=3600, gt=0)
    cache_max_entries: int = Field(default=100, gt=0)

    #  Streaming
    chunk_size: int = Field(default=64 * 1024, gt=0, description="Bytes per read")
    cache_control_max_age: int = Field(default=3600, ge=0)

    #  Logging
    log_level: Literal["TRACE", "DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = (
        "INFO"
    )
    log_to_file: bool = True
    log_dir: Path = Path("logs")

    @computed_field
    @property
    def media_root(self) -> Path:
        """Absolute, symlink-resolved media directory."""
        return self.music_dir.expanduser().resolve()


settings = Settings()
