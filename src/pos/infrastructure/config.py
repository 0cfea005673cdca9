"""Runtime settings, read from ``POS_*`` environment variables or ``.env``."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from pos.domain.model.sale import DEFAULT_SALE_PREFIX

# Resolve data directory relative to the project root.
# When installed in editable mode the project root is the repo root.
_DATA_DIR = Path(__file__).resolve().parents[3] / "data"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="POS_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )

    # Database
    database_url: str = f"sqlite:///{_DATA_DIR / 'pos.db'}"
    store_timeout_seconds: float = Field(default=5.0, gt=0)
    pool_size: int = Field(default=10, ge=1)
    max_overflow: int = Field(default=5, ge=0)
    echo_sql: bool = False

    # Sales
    sale_number_prefix: str = DEFAULT_SALE_PREFIX
    low_stock_threshold: int = Field(default=10, ge=0)

    # Logging
    log_level: str = "WARNING"
    log_json: bool = False


@lru_cache
def get_settings() -> Settings:
    return Settings()
