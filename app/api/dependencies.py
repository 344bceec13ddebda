"""
app/api/dependencies.py

Shared FastAPI dependencies for request validation, auth and storage.
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache

from fastapi import Depends, File, Header, HTTPException, Query, UploadFile, status
from sqlalchemy.orm import Session

from app.config import get_auth_settings, get_ingestion_settings
from app.connectors.supabase_auth import AuthenticationError, AuthProviderError, SupabaseAuthClient
from app.domain.sales import ALL_CATEGORIES, AuthenticatedUser, DateRange, FilterSpec, SaleRecord
from app.parsing.sales_file_reader import UnsupportedFileTypeError, detect_file_type
from app.repositories.sales_repository import SalesRepository, SalesStore, SalesStoreError
from db.session import get_db

_BEARER_PREFIX = "bearer "


@dataclass(frozen=True)
class SalesUpload:
    """
    Size- and type-checked upload content.
    """

    filename: str
    content_type: str | None
    content: bytes


def get_sales_upload(file: UploadFile = File(...)) -> SalesUpload:
    """
    Validate that the uploaded file is a CSV or spreadsheet within the size limit.
    """

    try:
        detect_file_type(file.filename, file.content_type)
    except UnsupportedFileTypeError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(exc),
        ) from exc

    max_bytes = get_ingestion_settings().max_upload_bytes
    try:
        content = file.file.read(max_bytes + 1)
    finally:
        file.file.close()

    if len(content) > max_bytes:
        raise HTTPException(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            detail=f"File exceeds the {max_bytes} byte upload limit.",
        )

    return SalesUpload(
        filename=(file.filename or "").strip(),
        content_type=file.content_type,
        content=content,
    )


@lru_cache(maxsize=1)
def get_auth_client() -> SupabaseAuthClient:
    return SupabaseAuthClient(settings=get_auth_settings())


def get_current_user(
    authorization: str | None = Header(default=None),
    auth_client: SupabaseAuthClient = Depends(get_auth_client),
) -> AuthenticatedUser:
    """
    Resolve the ``Authorization: Bearer <token>`` header to the signed-in user.
    """

    if not authorization or not authorization.lower().startswith(_BEARER_PREFIX):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated.",
            headers={"WWW-Authenticate": "Bearer"},
        )

    token = authorization[len(_BEARER_PREFIX) :]
    try:
        return auth_client.get_user(token)
    except AuthenticationError as exc:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=str(exc),
            headers={"WWW-Authenticate": "Bearer"},
        ) from exc
    except AuthProviderError as exc:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Authentication service unavailable.",
        ) from exc


def get_sales_store(db: Session = Depends(get_db)) -> SalesStore:
    return SalesRepository(db, batch_size=get_ingestion_settings().batch_size)


def get_filter_spec(
    date_range: DateRange = Query(default=DateRange.ALL, description="Relative date window."),
    category: str = Query(default=ALL_CATEGORIES, description='Exact category or "all".'),
) -> FilterSpec:
    return FilterSpec(date_range=date_range, category=category)


def fetch_sales(
    store: SalesStore,
    *,
    order_by: str = "created_at",
    direction: str = "desc",
) -> list[SaleRecord]:
    """
    Retrieve every stored sale, mapping store failures to HTTP 500.
    """

    try:
        return store.query_sales(order_by=order_by, direction=direction)
    except SalesStoreError as exc:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Unable to load sales data.",
        ) from exc
