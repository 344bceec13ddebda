"""
app/schemas/sales.py

Response schemas for upload, dashboard and report endpoints.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class UploadPreviewResponse(BaseModel):
    """
    Leading rows of an upload, shown before the user confirms ingestion.
    """

    filename: str
    headers: list[str] = Field(default_factory=list)
    total_rows: int = Field(..., ge=0)
    rows: list[dict[str, Any]] = Field(default_factory=list)


class UploadSummaryResponse(BaseModel):
    rows_processed: int = Field(..., ge=0)
    filename: str
    upload_id: str | None = None


class SalesSummaryResponse(BaseModel):
    total_sales: float
    total_orders: int = Field(..., ge=0)
    avg_order_value: float
    total_products: int = Field(..., ge=0)


class BreakdownEntryResponse(BaseModel):
    name: str
    total: float
    color: str | None = None


class DailyTotalResponse(BaseModel):
    date: str
    total: float


class RecentSaleResponse(BaseModel):
    id: str
    product_name: str | None = None
    amount: float
    date: str


class DashboardFiltersResponse(BaseModel):
    date_range: str
    category: str


class DashboardResponse(BaseModel):
    """
    Every derived dashboard view for one filter selection.
    """

    filters: DashboardFiltersResponse
    summary: SalesSummaryResponse
    by_category: list[BreakdownEntryResponse] = Field(default_factory=list)
    by_region: list[BreakdownEntryResponse] = Field(default_factory=list)
    top_products: list[BreakdownEntryResponse] = Field(default_factory=list)
    by_date: list[DailyTotalResponse] = Field(default_factory=list)
    recent_sales: list[RecentSaleResponse] = Field(default_factory=list)
    categories: list[str] = Field(default_factory=list)


class ReportSummaryResponse(BaseModel):
    filters: DashboardFiltersResponse
    record_count: int = Field(..., ge=0)
    summary: SalesSummaryResponse
