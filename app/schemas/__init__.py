"""
app/schemas package marker.
"""

from app.schemas.sales import (
    BreakdownEntryResponse,
    DailyTotalResponse,
    DashboardFiltersResponse,
    DashboardResponse,
    RecentSaleResponse,
    ReportSummaryResponse,
    SalesSummaryResponse,
    UploadPreviewResponse,
    UploadSummaryResponse,
)

__all__ = [
    "BreakdownEntryResponse",
    "DailyTotalResponse",
    "DashboardFiltersResponse",
    "DashboardResponse",
    "RecentSaleResponse",
    "ReportSummaryResponse",
    "SalesSummaryResponse",
    "UploadPreviewResponse",
    "UploadSummaryResponse",
]
