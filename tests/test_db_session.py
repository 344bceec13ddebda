"""
tests/test_db_session.py

Engine options and database URL resolution; no connection is opened.
"""

from __future__ import annotations

import pytest

from db.config import find_database_url, normalize_postgres_url
from db.session import APPLICATION_NAME, engine_options


def test_direct_connection_keeps_prepared_statements() -> None:
    options = engine_options("postgresql+psycopg://u:p@db.example.supabase.co:5432/postgres")

    assert options["connect_args"] == {"application_name": APPLICATION_NAME}
    assert options["pool_pre_ping"] is True


def test_transaction_pooler_disables_prepared_statements() -> None:
    options = engine_options("postgresql+psycopg://u:p@pooler.example.com:6543/postgres")

    assert options["connect_args"]["prepare_threshold"] is None


def test_pool_sizes_read_from_environment(monkeypatch) -> None:
    monkeypatch.setenv("DB_POOL_SIZE", "12")
    monkeypatch.setenv("DB_MAX_OVERFLOW", "not-a-number")

    options = engine_options("postgresql+psycopg://u:p@localhost/sales")

    assert options["pool_size"] == 12
    assert options["max_overflow"] == 10


def test_non_postgres_url_is_rejected() -> None:
    with pytest.raises(RuntimeError):
        engine_options("sqlite:///sales.db")


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("postgres://u:p@h/db", "postgresql+psycopg://u:p@h/db"),
        ("postgresql://u:p@h/db", "postgresql+psycopg://u:p@h/db"),
        ("postgresql+psycopg://u:p@h/db", "postgresql+psycopg://u:p@h/db"),
    ],
)
def test_normalize_postgres_url(raw, expected) -> None:
    assert normalize_postgres_url(raw) == expected


def test_supabase_db_url_is_the_fallback(monkeypatch) -> None:
    monkeypatch.delenv("DATABASE_URL", raising=False)
    monkeypatch.setenv("SUPABASE_DB_URL", "postgres://u:p@h:6543/postgres")

    assert find_database_url() == "postgresql+psycopg://u:p@h:6543/postgres"
