"""
app/api/routers/dashboard_router.py

GET /dashboard?date_range=&category=

Loads every stored sale (newest first) and returns the derived dashboard
views for the requested filters. All computation lives in
``app.services.aggregation_service``.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from app.api.dependencies import fetch_sales, get_current_user, get_filter_spec, get_sales_store
from app.domain.sales import FilterSpec
from app.repositories.sales_repository import SalesStore
from app.schemas.sales import (
    BreakdownEntryResponse,
    DailyTotalResponse,
    DashboardFiltersResponse,
    DashboardResponse,
    RecentSaleResponse,
    SalesSummaryResponse,
)
from app.services.aggregation_service import BreakdownEntry, SalesSummary, build_dashboard_view

router = APIRouter(tags=["dashboard"], dependencies=[Depends(get_current_user)])


def filters_response(filters: FilterSpec) -> DashboardFiltersResponse:
    return DashboardFiltersResponse(
        date_range=filters.date_range.value,
        category=filters.category,
    )


def summary_response(summary: SalesSummary) -> SalesSummaryResponse:
    return SalesSummaryResponse(
        total_sales=summary.total_sales,
        total_orders=summary.total_orders,
        avg_order_value=summary.avg_order_value,
        total_products=summary.total_products,
    )


def _entries(entries: list[BreakdownEntry]) -> list[BreakdownEntryResponse]:
    return [
        BreakdownEntryResponse(name=entry.name, total=entry.total, color=entry.color)
        for entry in entries
    ]


@router.get("/dashboard", response_model=DashboardResponse)
def get_dashboard(
    filters: FilterSpec = Depends(get_filter_spec),
    store: SalesStore = Depends(get_sales_store),
) -> DashboardResponse:
    view = build_dashboard_view(fetch_sales(store), filters)
    return DashboardResponse(
        filters=filters_response(view.filters),
        summary=summary_response(view.summary),
        by_category=_entries(view.by_category),
        by_region=_entries(view.by_region),
        top_products=_entries(view.top_products),
        by_date=[DailyTotalResponse(date=day.date, total=day.total) for day in view.by_date],
        recent_sales=[
            RecentSaleResponse(
                id=sale.id,
                product_name=sale.product_name,
                amount=sale.amount,
                date=sale.date,
            )
            for sale in view.recent_sales
        ],
        categories=view.categories,
    )
