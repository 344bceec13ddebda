"""
app/config.py

Application-level configuration helpers.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache

from db.config import load_env_files

_DEFAULT_MAX_UPLOAD_BYTES = 10 * 1024 * 1024


@lru_cache(maxsize=1)
def _load_env_once() -> None:
    """
    Ensure project `.env` files are loaded once before reading app settings.
    """

    load_env_files()


def _get_int_env(name: str, default: int) -> int:
    """
    Read an integer from environment variables with safe fallback.
    """

    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    try:
        return int(raw_value)
    except ValueError:
        return default


def _get_float_env(name: str, default: float) -> float:
    """
    Read a float from environment variables with safe fallback.
    """

    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    try:
        return float(raw_value)
    except ValueError:
        return default


def _get_str_env(name: str, default: str) -> str:
    """
    Read a string from environment variables with fallback.
    """

    _load_env_once()
    value = os.getenv(name)
    if value is None:
        return default
    stripped = value.strip()
    return stripped if stripped else default


def _get_optional_str_env(name: str) -> str | None:
    """
    Read an optional string value from environment variables.
    """

    _load_env_once()
    value = os.getenv(name)
    if value is None:
        return None
    stripped = value.strip()
    return stripped if stripped else None


@dataclass(frozen=True)
class IngestionSettings:
    """
    Runtime settings for sales file ingestion.
    """

    batch_size: int = 1000
    max_upload_bytes: int = _DEFAULT_MAX_UPLOAD_BYTES
    preview_rows: int = 10


@dataclass(frozen=True)
class AuthSettings:
    """
    Hosted auth provider settings.
    """

    supabase_url: str | None = None
    anon_key: str | None = None
    timeout_seconds: float = 10.0


@dataclass(frozen=True)
class ReportSettings:
    brand_name: str = "SalesVision"
    currency_symbol: str = "$"


@lru_cache(maxsize=1)
def get_ingestion_settings() -> IngestionSettings:
    """
    Return cached ingestion settings.
    """

    return IngestionSettings(
        batch_size=max(1, _get_int_env("SALES_INGEST_BATCH_SIZE", 1000)),
        max_upload_bytes=max(
            1,
            _get_int_env("SALES_INGEST_MAX_UPLOAD_BYTES", _DEFAULT_MAX_UPLOAD_BYTES),
        ),
        preview_rows=max(0, _get_int_env("SALES_INGEST_PREVIEW_ROWS", 10)),
    )


@lru_cache(maxsize=1)
def get_auth_settings() -> AuthSettings:
    """
    Return cached auth provider settings.
    """

    url = _get_optional_str_env("SUPABASE_URL")
    return AuthSettings(
        supabase_url=url.rstrip("/") if url else None,
        anon_key=_get_optional_str_env("SUPABASE_ANON_KEY"),
        timeout_seconds=max(0.1, _get_float_env("SUPABASE_AUTH_TIMEOUT_SECONDS", 10.0)),
    )


@lru_cache(maxsize=1)
def get_report_settings() -> ReportSettings:
    return ReportSettings(
        brand_name=_get_str_env("REPORT_BRAND_NAME", "SalesVision"),
        currency_symbol=_get_str_env("REPORT_CURRENCY_SYMBOL", "$"),
    )
