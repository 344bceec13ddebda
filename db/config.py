"""
Shared environment-driven database configuration helpers.
"""

from __future__ import annotations

import os
from pathlib import Path

_DATABASE_URL_VARIABLES: tuple[str, ...] = ("DATABASE_URL", "SUPABASE_DB_URL")


def load_env_files() -> None:
    """
    Load simple KEY=VALUE pairs from `.env` and `.env.local` (if present).
    Existing process environment variables are not overwritten.
    """

    project_root = Path(__file__).resolve().parents[1]
    for filename in (".env", ".env.local"):
        env_path = project_root / filename
        if not env_path.exists():
            continue

        for raw_line in env_path.read_text(encoding="utf-8").splitlines():
            line = raw_line.strip()
            if not line or line.startswith("#") or "=" not in line:
                continue

            key, value = line.split("=", 1)
            key = key.strip()
            value = value.strip().strip('"').strip("'")
            if key and key not in os.environ:
                os.environ[key] = value


def normalize_postgres_url(url: str) -> str:
    """
    Normalize postgres URLs to SQLAlchemy's recommended psycopg driver form.

    The hosted backend hands out ``postgres://`` connection strings.
    """

    if url.startswith("postgres://"):
        return url.replace("postgres://", "postgresql+psycopg://", 1)
    if url.startswith("postgresql://"):
        return url.replace("postgresql://", "postgresql+psycopg://", 1)
    return url


def find_database_url() -> str | None:
    """
    Return the first configured database URL, or None when nothing is set.
    """

    load_env_files()
    for variable in _DATABASE_URL_VARIABLES:
        value = (os.getenv(variable) or "").strip()
        if value:
            return normalize_postgres_url(value)
    return None


def resolve_database_url() -> str:
    """
    Resolve the database URL of the hosted sales store.

    Priority:
    1) DATABASE_URL
    2) SUPABASE_DB_URL
    """

    url = find_database_url()
    if url is None:
        raise RuntimeError(
            "No database URL configured. Set DATABASE_URL or SUPABASE_DB_URL."
        )
    return url
