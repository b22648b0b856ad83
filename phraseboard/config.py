from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import PositiveInt, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime configuration for the phrase board stores.

    Values are loaded from environment variables by default and may be
    overridden via CLI flags by the application entrypoint.
    """

    # Storage
    storage_backend: Literal["file", "memory"] = "file"
    storage_dir: Path = Path.home() / ".local" / "share" / "phraseboard"
    # Roughly what a browser grants local storage per origin.
    storage_capacity_bytes: PositiveInt = 5_000_000

    # One backend key per store
    config_key: str = "phraseboard-config"
    recents_key: str = "phraseboard-recents"
    favorites_key: str = "phraseboard-favorites"

    # Logging
    log_level: str | None = None

    # pydantic-settings v2 configuration
    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", case_sensitive=False
    )

    @model_validator(mode="after")
    def _distinct_keys(self) -> Settings:
        keys = [self.config_key, self.recents_key, self.favorites_key]
        if len(set(keys)) != len(keys):
            raise ValueError("config_key, recents_key and favorites_key must differ")
        return self


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
