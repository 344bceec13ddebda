"""
app/domain package marker.
"""

from app.domain.sales import (
    AuthenticatedUser,
    DateRange,
    FilterSpec,
    IngestionSummary,
    SaleInput,
    SaleRecord,
    UploadAudit,
    UploadAuditInput,
)

__all__ = [
    "AuthenticatedUser",
    "DateRange",
    "FilterSpec",
    "IngestionSummary",
    "SaleInput",
    "SaleRecord",
    "UploadAudit",
    "UploadAuditInput",
]
