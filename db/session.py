"""
db/session.py

Engine and session factory for the hosted sales database.

The hosted backend exposes the same PostgreSQL database directly (port
5432) and through its transaction-mode connection pooler (port 6543). The
pooler cannot keep server-side prepared statements across transactions, so
psycopg's automatic statement preparation is switched off for it.
"""

from __future__ import annotations

import os
from collections.abc import Generator
from typing import Any

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import Session, sessionmaker

from db.config import resolve_database_url

APPLICATION_NAME = "salesvision-api"
TRANSACTION_POOLER_PORT = 6543


def _get_int_env(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        return default


def engine_options(database_url: str) -> dict[str, Any]:
    """
    Build ``create_engine`` keyword arguments for *database_url*.

    Raises:
        RuntimeError: the URL is not a PostgreSQL URL.
    """

    url = make_url(database_url)
    if url.get_backend_name() != "postgresql":
        raise RuntimeError("Only PostgreSQL URLs are supported.")

    connect_args: dict[str, Any] = {"application_name": APPLICATION_NAME}
    if url.port == TRANSACTION_POOLER_PORT:
        connect_args["prepare_threshold"] = None

    return {
        "echo": os.getenv("SQL_ECHO", "").strip().lower() in {"1", "true", "yes", "on"},
        "pool_pre_ping": True,
        "pool_recycle": _get_int_env("DB_POOL_RECYCLE", 1800),
        "pool_size": _get_int_env("DB_POOL_SIZE", 5),
        "max_overflow": _get_int_env("DB_MAX_OVERFLOW", 10),
        "connect_args": connect_args,
    }


_engine: Engine | None = None
_session_factory: sessionmaker | None = None


def get_engine() -> Engine:
    """Return the shared engine, creating it on first call."""
    global _engine
    if _engine is None:
        database_url = resolve_database_url()
        _engine = create_engine(database_url, **engine_options(database_url))
    return _engine


def SessionLocal() -> Session:
    global _session_factory
    if _session_factory is None:
        _session_factory = sessionmaker(bind=get_engine(), autoflush=False, expire_on_commit=False)
    return _session_factory()


def get_db() -> Generator[Session, None, None]:
    """FastAPI dependency: one session per request."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
