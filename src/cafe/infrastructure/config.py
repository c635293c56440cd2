"""Configuration management using pydantic-settings.

Every setting can be overridden with a ``CAFE_``-prefixed environment
variable or a ``.env`` file, e.g. ``CAFE_DATA_DIR=/var/lib/cafe``.
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Project root when installed in editable mode.
DEFAULT_DATA_DIR = Path(__file__).resolve().parents[3] / "data"


class Settings(BaseSettings):
    """Application settings from environment variables."""

    # Storage
    data_dir: Path = Field(default=DEFAULT_DATA_DIR, description="Directory holding the store")
    db_name: str = Field(default="cafe_parisien_db", description="Store name (sub-directory)")

    # Business defaults
    currency: str = Field(default="EUR", description="ISO currency code for all amounts")
    default_stock_alert: int = Field(default=5, ge=0, description="Default reorder threshold")
    actor: str = Field(default="Admin", description="Name recorded on stock movements")

    # Application
    environment: str = Field(default="development", description="development or production")
    log_level: str = Field(default="INFO", description="Log level of the cafe logger")
    log_file: Optional[str] = Field(default=None, description="Optional rotating log file")
    log_format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    log_max_bytes: int = 10485760  # 10MB
    log_backup_count: int = 5

    model_config = SettingsConfigDict(
        env_prefix="CAFE_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @property
    def is_production(self) -> bool:
        return self.environment.lower() == "production"


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
