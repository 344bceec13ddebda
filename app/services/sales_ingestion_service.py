"""
app/services/sales_ingestion_service.py

Service layer for the sales upload workflow.

    read file  →  normalize rows  →  bulk insert sales  →  write upload audit

File-level problems (wrong type, unreadable, no rows) surface as
``SalesFileError`` before any normalization or write happens. A rejected
bulk insert is reported as one failure for the whole batch. The audit row
is best-effort: a failure there is logged at WARNING level and does not
change the ingestion result.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from functools import lru_cache
from typing import Any

from app.config import get_ingestion_settings
from app.domain.sales import IngestionSummary, UploadAuditInput
from app.mappers.sales_normalizer import SalesNormalizer
from app.parsing.sales_file_reader import ParsedSalesFile, read_sales_file
from app.repositories.sales_repository import SalesStore, SalesStoreError
from db.models.upload import UploadStatus

logger = logging.getLogger(__name__)

UPLOAD_PATH_PREFIX = "uploads"


class SalesPersistenceError(RuntimeError):
    """
    Raised when normalized sales cannot be persisted.
    """


@dataclass(frozen=True)
class UploadPreview:
    """
    Headers, row count and leading raw rows of a not-yet-ingested file.
    """

    filename: str
    headers: tuple[str, ...]
    total_rows: int
    rows: list[dict[str, Any]]


class SalesIngestionService:
    """
    Coordinates file reading, normalization and persistence of one upload.
    """

    def __init__(
        self,
        *,
        preview_rows: int = 10,
        normalizer: SalesNormalizer | None = None,
    ) -> None:
        self._preview_rows = max(0, preview_rows)
        self._normalizer = normalizer or SalesNormalizer()

    def preview(
        self,
        *,
        content: bytes,
        filename: str | None,
        content_type: str | None = None,
    ) -> UploadPreview:
        parsed = read_sales_file(content, filename=filename, content_type=content_type)
        return UploadPreview(
            filename=parsed.filename,
            headers=parsed.headers,
            total_rows=parsed.row_count,
            rows=[dict(row) for row in parsed.rows[: self._preview_rows]],
        )

    def ingest(
        self,
        *,
        content: bytes,
        filename: str | None,
        content_type: str | None,
        uploaded_by: str,
        store: SalesStore,
    ) -> IngestionSummary:
        """
        Read, normalize and persist every row of one uploaded file.

        Args:
            content:      Raw upload bytes.
            filename:     Client-supplied file name; drives type detection.
            content_type: Client-supplied MIME type, used when the extension
                          is not conclusive.
            uploaded_by:  Authenticated user id stamped on every sale.
            store:        Record store receiving the batch.

        Raises:
            SalesFileError:        file rejected before normalization.
            SalesPersistenceError: the store rejected the bulk insert.
        """

        parsed = read_sales_file(content, filename=filename, content_type=content_type)
        sales = self._normalizer.normalize_rows(parsed.rows, uploaded_by=uploaded_by)

        try:
            rows_processed = store.insert_sales(sales)
        except SalesStoreError as exc:
            logger.error(
                "Sales insert failed filename=%r rows=%d uploaded_by=%s: %s",
                parsed.filename,
                len(sales),
                uploaded_by,
                exc,
            )
            raise SalesPersistenceError("Failed to save the uploaded sales.") from exc

        logger.info(
            "Sales batch ingested filename=%r rows=%d uploaded_by=%s",
            parsed.filename,
            rows_processed,
            uploaded_by,
        )
        upload_id = self._record_upload(
            parsed=parsed,
            rows_processed=rows_processed,
            uploaded_by=uploaded_by,
            store=store,
        )
        return IngestionSummary(
            filename=parsed.filename,
            rows_processed=rows_processed,
            upload_id=upload_id,
        )

    @staticmethod
    def _record_upload(
        *,
        parsed: ParsedSalesFile,
        rows_processed: int,
        uploaded_by: str,
        store: SalesStore,
    ) -> str | None:
        audit = UploadAuditInput(
            filename=parsed.filename,
            file_path=f"{UPLOAD_PATH_PREFIX}/{parsed.filename}",
            rows_processed=rows_processed,
            status=UploadStatus.COMPLETED,
            uploaded_by=uploaded_by,
        )
        try:
            return store.insert_upload_audit(audit).id
        except SalesStoreError as exc:
            logger.warning(
                "Upload audit record failed filename=%r uploaded_by=%s: %s",
                parsed.filename,
                uploaded_by,
                exc,
            )
            return None


# ---------------------------------------------------------------------------
# Factory
# ---------------------------------------------------------------------------


@lru_cache(maxsize=1)
def get_sales_ingestion_service() -> SalesIngestionService:
    """
    Build and cache the ingestion service with env-driven settings.
    """
    settings = get_ingestion_settings()
    return SalesIngestionService(preview_rows=settings.preview_rows)
