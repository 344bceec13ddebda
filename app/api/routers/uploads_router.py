"""
app/api/routers/uploads_router.py

Sales file upload endpoints.

POST /uploads/preview : parse only; headers, row count and leading rows.
POST /uploads         : parse, normalize and persist every row.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status

from app.api.dependencies import SalesUpload, get_current_user, get_sales_store, get_sales_upload
from app.domain.sales import AuthenticatedUser
from app.parsing.sales_file_reader import SalesFileError
from app.repositories.sales_repository import SalesStore
from app.schemas.sales import UploadPreviewResponse, UploadSummaryResponse
from app.services.sales_ingestion_service import (
    SalesIngestionService,
    SalesPersistenceError,
    get_sales_ingestion_service,
)

router = APIRouter(prefix="/uploads", tags=["uploads"])


@router.post("/preview", response_model=UploadPreviewResponse)
def preview_upload(
    user: AuthenticatedUser = Depends(get_current_user),
    upload: SalesUpload = Depends(get_sales_upload),
    ingestion_service: SalesIngestionService = Depends(get_sales_ingestion_service),
) -> UploadPreviewResponse:
    """
    Show what a file contains before it is ingested.
    """

    try:
        preview = ingestion_service.preview(
            content=upload.content,
            filename=upload.filename,
            content_type=upload.content_type,
        )
    except SalesFileError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(exc),
        ) from exc

    return UploadPreviewResponse(
        filename=preview.filename,
        headers=list(preview.headers),
        total_rows=preview.total_rows,
        rows=preview.rows,
    )


@router.post("", response_model=UploadSummaryResponse, status_code=status.HTTP_201_CREATED)
def upload_sales(
    user: AuthenticatedUser = Depends(get_current_user),
    upload: SalesUpload = Depends(get_sales_upload),
    store: SalesStore = Depends(get_sales_store),
    ingestion_service: SalesIngestionService = Depends(get_sales_ingestion_service),
) -> UploadSummaryResponse:
    """
    Ingest one CSV or spreadsheet file into the sales table.
    """

    try:
        summary = ingestion_service.ingest(
            content=upload.content,
            filename=upload.filename,
            content_type=upload.content_type,
            uploaded_by=user.id,
            store=store,
        )
    except SalesFileError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(exc),
        ) from exc
    except SalesPersistenceError as exc:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Unable to persist uploaded sales.",
        ) from exc

    return UploadSummaryResponse(
        rows_processed=summary.rows_processed,
        filename=summary.filename,
        upload_id=summary.upload_id,
    )
