"""
app/domain/sales.py

Domain models shared by ingestion, aggregation, and report export.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime
from enum import Enum
from typing import Mapping

# One cell read from an uploaded file. Only the normalizer looks at these.
RawValue = str | int | float | None
RawRow = Mapping[str, RawValue]

ALL_CATEGORIES = "all"


@dataclass(frozen=True)
class SaleInput:
    """
    Canonical sale prepared for persistence (no id / created_at yet).
    """

    date: str
    product_name: str
    category: str | None
    quantity: int
    unit_price: float
    total_amount: float
    region: str | None
    salesperson: str | None
    uploaded_by: str | None = None

    def with_uploader(self, user_id: str) -> SaleInput:
        return replace(self, uploaded_by=user_id)


@dataclass(frozen=True)
class SaleRecord:
    """
    Sale as retrieved from the store.

    ``date`` may be None for rows written without one; consumers fall back
    to ``created_at``.
    """

    id: str
    date: str | None
    product_name: str | None
    category: str | None
    quantity: int | None
    unit_price: float | None
    total_amount: float | None
    region: str | None
    salesperson: str | None
    uploaded_by: str | None
    created_at: datetime


@dataclass(frozen=True)
class UploadAuditInput:
    """
    Audit entry describing one ingestion batch.
    """

    filename: str
    file_path: str
    rows_processed: int
    status: str
    uploaded_by: str


@dataclass(frozen=True)
class UploadAudit:
    id: str
    filename: str
    file_path: str
    rows_processed: int | None
    status: str
    uploaded_by: str
    created_at: datetime


@dataclass(frozen=True)
class IngestionSummary:
    """
    End-of-run ingestion summary.
    """

    filename: str
    rows_processed: int
    upload_id: str | None = None


@dataclass(frozen=True)
class AuthenticatedUser:
    id: str
    email: str | None = None


class DateRange(str, Enum):
    """
    Relative date windows offered by the dashboard and report filters.
    """

    ALL = "all"
    LAST_7_DAYS = "last-7-days"
    LAST_30_DAYS = "last-30-days"
    LAST_90_DAYS = "last-90-days"

    @property
    def days(self) -> int | None:
        return _DATE_RANGE_DAYS.get(self)


_DATE_RANGE_DAYS: dict[DateRange, int] = {
    DateRange.LAST_7_DAYS: 7,
    DateRange.LAST_30_DAYS: 30,
    DateRange.LAST_90_DAYS: 90,
}


@dataclass(frozen=True)
class FilterSpec:
    """
    Immutable filter snapshot. Both parts default to the no-op "all".
    """

    date_range: DateRange = DateRange.ALL
    category: str = ALL_CATEGORIES
