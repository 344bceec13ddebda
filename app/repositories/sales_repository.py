"""
app/repositories/sales_repository.py

Record store adapter for sales and upload audit rows.
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Protocol

from sqlalchemy import insert, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.domain.sales import SaleInput, SaleRecord, UploadAudit, UploadAuditInput
from db.models.sale import Sale
from db.models.upload import Upload

_DEFAULT_BATCH_SIZE = 1000
_ORDERABLE_COLUMNS = {
    "date": Sale.date,
    "created_at": Sale.created_at,
}
_DIRECTIONS = frozenset({"asc", "desc"})


class SalesStoreError(RuntimeError):
    """
    Raised when the store rejects an insert or query.
    """


class SalesStore(Protocol):
    """
    Query/insert interface the ingestion and analytics flows depend on.
    """

    def insert_sales(self, records: Sequence[SaleInput]) -> int:
        ...

    def insert_upload_audit(self, record: UploadAuditInput) -> UploadAudit:
        ...

    def query_sales(
        self,
        order_by: str = "created_at",
        direction: str = "desc",
    ) -> list[SaleRecord]:
        ...


class SalesRepository:
    """
    SQLAlchemy implementation of :class:`SalesStore`.

    Every write runs in one transaction: either the whole batch lands or
    nothing does.
    """

    def __init__(self, session: Session, *, batch_size: int = _DEFAULT_BATCH_SIZE) -> None:
        self._session = session
        self._batch_size = max(1, batch_size)

    def insert_sales(self, records: Sequence[SaleInput]) -> int:
        """
        Bulk insert canonical sales in chunks of ``batch_size``.
        """

        if not records:
            return 0

        payloads = [self._to_payload(record) for record in records]
        try:
            for start in range(0, len(payloads), self._batch_size):
                chunk = payloads[start : start + self._batch_size]
                self._session.execute(insert(Sale), chunk)
            self._session.commit()
        except SQLAlchemyError as exc:
            self._session.rollback()
            raise SalesStoreError("Failed to insert sales records.") from exc
        return len(payloads)

    def insert_upload_audit(self, record: UploadAuditInput) -> UploadAudit:
        upload = Upload(
            filename=record.filename,
            file_path=record.file_path,
            rows_processed=record.rows_processed,
            status=record.status,
            uploaded_by=record.uploaded_by,
        )
        try:
            self._session.add(upload)
            self._session.commit()
            self._session.refresh(upload)
        except SQLAlchemyError as exc:
            self._session.rollback()
            raise SalesStoreError("Failed to insert upload audit record.") from exc

        return UploadAudit(
            id=str(upload.id),
            filename=upload.filename,
            file_path=upload.file_path,
            rows_processed=upload.rows_processed,
            status=upload.status,
            uploaded_by=upload.uploaded_by,
            created_at=_as_utc(upload.created_at),
        )

    def query_sales(
        self,
        order_by: str = "created_at",
        direction: str = "desc",
    ) -> list[SaleRecord]:
        """
        Return every stored sale ordered by ``date`` or ``created_at``.
        """

        column = _ORDERABLE_COLUMNS.get(order_by)
        if column is None:
            raise ValueError(
                f"Unknown order_by {order_by!r}. Valid: {sorted(_ORDERABLE_COLUMNS)}"
            )
        if direction not in _DIRECTIONS:
            raise ValueError(f"Unknown direction {direction!r}. Valid: {sorted(_DIRECTIONS)}")

        ordering = column.desc() if direction == "desc" else column.asc()
        stmt = select(Sale).order_by(ordering, Sale.id)
        try:
            rows = self._session.scalars(stmt).all()
        except SQLAlchemyError as exc:
            raise SalesStoreError("Failed to query sales records.") from exc
        return [self._to_record(row) for row in rows]

    @staticmethod
    def _to_payload(record: SaleInput) -> dict[str, Any]:
        if record.uploaded_by is None:
            raise ValueError("Sales must be stamped with an uploader before persistence.")
        return {
            "date": record.date,
            "product_name": record.product_name,
            "category": record.category,
            "quantity": record.quantity,
            "unit_price": record.unit_price,
            "total_amount": record.total_amount,
            "region": record.region,
            "salesperson": record.salesperson,
            "uploaded_by": record.uploaded_by,
        }

    @staticmethod
    def _to_record(row: Sale) -> SaleRecord:
        return SaleRecord(
            id=str(row.id),
            date=row.date,
            product_name=row.product_name,
            category=row.category,
            quantity=row.quantity,
            unit_price=_as_float(row.unit_price),
            total_amount=_as_float(row.total_amount),
            region=row.region,
            salesperson=row.salesperson,
            uploaded_by=row.uploaded_by,
            created_at=_as_utc(row.created_at),
        )


def _as_float(value: Decimal | float | None) -> float | None:
    return float(value) if value is not None else None


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value
