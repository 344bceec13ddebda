"""
app/api/routers/reports_router.py

Report endpoints over the filtered sales set.

GET /reports/summary : record count and headline metrics (JSON)
GET /reports/pdf     : paginated PDF download
GET /reports/xlsx    : six-sheet workbook download

All accept ``date_range`` and ``category`` query parameters. An empty
filtered set answers 422 with no file body.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import Response

from app.api.dependencies import fetch_sales, get_current_user, get_filter_spec, get_sales_store
from app.api.routers.dashboard_router import filters_response, summary_response
from app.domain.sales import FilterSpec, SaleRecord
from app.repositories.sales_repository import SalesStore
from app.schemas.sales import ReportSummaryResponse
from app.services.aggregation_service import compute_summary, filter_sales
from app.services.report_export_service import (
    EmptyExportError,
    ReportArtifact,
    ReportExportError,
    ReportExportService,
    get_report_export_service,
)

router = APIRouter(prefix="/reports", tags=["reports"], dependencies=[Depends(get_current_user)])


def _filtered_sales(store: SalesStore, filters: FilterSpec) -> tuple[SaleRecord, ...]:
    return filter_sales(fetch_sales(store, order_by="date", direction="desc"), filters)


def _download(
    build: Callable[[Sequence[SaleRecord]], ReportArtifact],
    sales: Sequence[SaleRecord],
) -> Response:
    try:
        artifact = build(sales)
    except EmptyExportError as exc:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=str(exc),
        ) from exc
    except ReportExportError as exc:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=str(exc),
        ) from exc

    return Response(
        content=artifact.content,
        media_type=artifact.media_type,
        headers={
            "Content-Disposition": f'attachment; filename="{artifact.filename}"',
            "X-Row-Count": str(len(sales)),
        },
    )


@router.get("/summary", response_model=ReportSummaryResponse)
def get_report_summary(
    filters: FilterSpec = Depends(get_filter_spec),
    store: SalesStore = Depends(get_sales_store),
) -> ReportSummaryResponse:
    sales = _filtered_sales(store, filters)
    return ReportSummaryResponse(
        filters=filters_response(filters),
        record_count=len(sales),
        summary=summary_response(compute_summary(sales)),
    )


@router.get("/pdf", summary="Download the sales report as PDF")
def download_pdf_report(
    filters: FilterSpec = Depends(get_filter_spec),
    store: SalesStore = Depends(get_sales_store),
    export_service: ReportExportService = Depends(get_report_export_service),
) -> Response:
    return _download(export_service.export_pdf, _filtered_sales(store, filters))


@router.get("/xlsx", summary="Download the sales report as a workbook")
def download_workbook_report(
    filters: FilterSpec = Depends(get_filter_spec),
    store: SalesStore = Depends(get_sales_store),
    export_service: ReportExportService = Depends(get_report_export_service),
) -> Response:
    return _download(export_service.export_workbook, _filtered_sales(store, filters))
