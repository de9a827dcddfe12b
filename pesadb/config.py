"""
PesaDB Configuration
====================
Settings loaded from environment variables (prefix PESADB_) or a .env file
via pydantic-settings.

  PESADB_STORAGE          memory | directory     (default: memory)
  PESADB_DATA_DIR         directory store path   (default: ./pesadb_data)
  PESADB_KEY_PREFIX       storage key namespace  (default: pesadb_v1_)
  PESADB_LOG_LEVEL        logging level          (default: WARNING)
  PESADB_JSON_LOGS        JSON log lines         (default: false)
  PESADB_LATENCY_MIN_MS   query_async delay low  (default: 50)
  PESADB_LATENCY_MAX_MS   query_async delay high (default: 150)
  PESADB_SEED_DEMO        seed demo tables       (default: false)
"""

import os
from functools import lru_cache
from typing import Literal

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from pesadb.storage.kv import DirectoryStore, KeyValueStore, MemoryStore


class Settings(BaseSettings):
    # Storage
    storage: Literal["memory", "directory"] = Field("memory", alias="PESADB_STORAGE")
    data_dir: str = Field(
        default_factory=lambda: os.path.join(os.getcwd(), "pesadb_data"),
        alias="PESADB_DATA_DIR",
    )
    key_prefix: str = Field("pesadb_v1_", alias="PESADB_KEY_PREFIX")

    # Logging
    log_level: str = Field("WARNING", alias="PESADB_LOG_LEVEL")
    json_logs: bool = Field(False, alias="PESADB_JSON_LOGS")

    # Facade
    latency_min_ms: float = Field(50.0, ge=0, alias="PESADB_LATENCY_MIN_MS")
    latency_max_ms: float = Field(150.0, ge=0, alias="PESADB_LATENCY_MAX_MS")
    seed_demo: bool = Field(False, alias="PESADB_SEED_DEMO")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    @model_validator(mode="after")
    def _check_latency_range(self) -> "Settings":
        if self.latency_max_ms < self.latency_min_ms:
            raise ValueError("PESADB_LATENCY_MAX_MS must be >= PESADB_LATENCY_MIN_MS")
        return self

    def build_store(self) -> KeyValueStore:
        """Create the key-value store selected by these settings."""
        if self.storage == "directory":
            return DirectoryStore(self.data_dir)
        return MemoryStore()


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Cached Settings instance to avoid repeated env parsing."""
    return Settings()


__all__ = ["Settings", "get_settings"]
