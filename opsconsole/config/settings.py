# opsconsole/config/settings.py

from functools import lru_cache
from pathlib import Path
from typing import Literal, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class AppSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # --- Application ---
    app_name: str = "ops-console"
    environment: Literal["dev", "test", "prod"] = "dev"
    debug: bool = False
    version: str = "0.1.0"

    # --- Database ---
    database_url: str = "sqlite+aiosqlite:///./opsconsole.db"
    create_tables_on_startup: bool = True

    # --- Access control ---
    principal_header: str = "X-Principal-ID"
    permissions_file: Optional[Path] = None
    conceal_out_of_scope_resources: bool = False

    # --- Pagination ---
    default_page_size: int = Field(20, ge=1)
    max_page_size: int = Field(100, ge=1)

    # --- Observability ---
    enable_metrics: bool = True
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"


@lru_cache
def get_settings() -> AppSettings:
    return AppSettings()
