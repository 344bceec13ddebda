"""
app/services package marker.
"""

from app.services.report_export_service import (
    EmptyExportError,
    ReportExportError,
    ReportExportService,
    get_report_export_service,
)
from app.services.sales_ingestion_service import (
    SalesIngestionService,
    SalesPersistenceError,
    get_sales_ingestion_service,
)

__all__ = [
    "EmptyExportError",
    "ReportExportError",
    "ReportExportService",
    "get_report_export_service",
    "SalesIngestionService",
    "SalesPersistenceError",
    "get_sales_ingestion_service",
]
