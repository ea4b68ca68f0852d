"""
Centralized configuration for the reconciliation API.

All environment variables and settings should be defined here
to avoid duplication across modules.
"""
import os
from functools import lru_cache
from typing import Optional

from pedidos.reconcile.config import Config, default_config, load_config


class Settings:
    """Application settings loaded from environment variables."""

    # CORS - comma-separated list of allowed origins
    ALLOWED_ORIGINS: list = os.environ.get(
        "ALLOWED_ORIGINS",
        "http://localhost:4200,http://127.0.0.1:4200"
    ).split(",")

    # Per-file upload limit
    MAX_UPLOAD_MB: int = int(os.environ.get("PEDIDOS_MAX_UPLOAD_MB", "25"))

    # Optional override of the packaged reconcile_config.json
    RECONCILE_CONFIG_PATH: str = os.environ.get("PEDIDOS_RECONCILE_CONFIG", "")

    LOG_LEVEL: str = os.environ.get("PEDIDOS_LOG_LEVEL", "INFO")

    @property
    def max_upload_bytes(self) -> int:
        return self.MAX_UPLOAD_MB * 1024 * 1024


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


@lru_cache
def get_reconcile_config(path: Optional[str] = None) -> Config:
    """Reconcile config from PEDIDOS_RECONCILE_CONFIG, or the packaged default."""
    path = path or get_settings().RECONCILE_CONFIG_PATH
    if path:
        return load_config(path)
    return default_config()


# Singleton instance for easy import
settings = get_settings()
