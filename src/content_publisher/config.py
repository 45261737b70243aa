"""Configuration loading for the content publisher."""

from __future__ import annotations

import os
from typing import Optional

from dotenv import load_dotenv

from .models import (DEFAULT_DB_CONNECT_TIMEOUT, DEFAULT_SITE_ORIGIN,
                     DEFAULT_WIX_API_BACKOFF_FACTOR,
                     DEFAULT_WIX_API_BACKOFF_MAX, DEFAULT_WIX_API_MAX_RETRIES,
                     DEFAULT_WIX_API_TIMEOUT, DEFAULT_WIX_API_URL,
                     STORE_BACKENDS, AppConfig, DatabaseConfig,
                     PublisherSettings, WixConfig)


class ConfigError(RuntimeError):
    """Raised when the environment does not describe a usable configuration."""


def _int(value: Optional[str], default: int) -> int:
    try:
        return int(value) if value is not None else default
    except ValueError:
        return default


def _float(value: Optional[str], default: float) -> float:
    try:
        return float(value) if value is not None else default
    except ValueError:
        return default


def _flag(value: Optional[str]) -> bool:
    return (value or "").strip().lower() in {"1", "true", "yes", "on"}


def load_wix_config() -> WixConfig:
    api_key = os.getenv("WIX_API_KEY", "").strip()
    site_id = os.getenv("WIX_SITE_ID", "").strip()
    if not (api_key and site_id):
        raise ConfigError(
            "WIX_API_KEY and WIX_SITE_ID environment variables are required for the wix backend"
        )
    return WixConfig(
        url=os.getenv("WIX_API_URL", DEFAULT_WIX_API_URL).rstrip("/"),
        api_key=api_key,
        site_id=site_id,
        timeout=_float(os.getenv("WIX_API_TIMEOUT"), DEFAULT_WIX_API_TIMEOUT),
        max_retries=max(
            0, _int(os.getenv("WIX_API_MAX_RETRIES"), DEFAULT_WIX_API_MAX_RETRIES)
        ),
        backoff_factor=_float(
            os.getenv("WIX_API_BACKOFF_FACTOR"), DEFAULT_WIX_API_BACKOFF_FACTOR
        ),
        backoff_max=_float(
            os.getenv("WIX_API_BACKOFF_MAX"), DEFAULT_WIX_API_BACKOFF_MAX
        ),
    )


def load_database_config() -> DatabaseConfig:
    url = os.getenv("DATABASE_URL", "").strip()
    if not url:
        raise ConfigError("DATABASE_URL environment variable is required for the sql backend")
    return DatabaseConfig(
        url=url,
        connect_timeout=_float(
            os.getenv("DATABASE_CONNECT_TIMEOUT"), DEFAULT_DB_CONNECT_TIMEOUT
        ),
        apply_schema=_flag(os.getenv("DATABASE_APPLY_SCHEMA")),
    )


def load_config() -> AppConfig:
    """Load publisher configuration from the environment (and ``.env``)."""
    load_dotenv()

    backend = os.getenv("STORE_BACKEND", "wix").strip().lower()
    if backend not in STORE_BACKENDS:
        raise ConfigError(
            f"STORE_BACKEND must be one of {', '.join(STORE_BACKENDS)}, got {backend!r}"
        )

    publisher = PublisherSettings(
        site_origin=os.getenv("SITE_ORIGIN", DEFAULT_SITE_ORIGIN).rstrip("/"),
    )

    if backend == "wix":
        return AppConfig(backend=backend, publisher=publisher, wix=load_wix_config())
    return AppConfig(
        backend=backend, publisher=publisher, database=load_database_config()
    )
