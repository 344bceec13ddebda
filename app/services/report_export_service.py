"""
app/services/report_export_service.py

Builds the downloadable sales reports from one filtered record set.

Two independent artifacts:

    pdf:       title block, executive summary, top-5 products table and
               by-category table (reportlab platypus, striped rows).
    workbook:  six sheets in fixed order (openpyxl):
               Summary, Data, Salespeople, Regions, Temporal, Products.

Both artifacts reuse the aggregation layer for their headline numbers, so
their totals agree with the dashboard to the cent. An empty record set is
refused with :class:`EmptyExportError` before anything is built.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from datetime import date, datetime, timezone
from io import BytesIO
from typing import Any
from xml.sax.saxutils import escape

from openpyxl import Workbook
from openpyxl.styles import Font
from openpyxl.utils import get_column_letter
from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.enums import TA_CENTER
from reportlab.lib.units import mm
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from app.config import ReportSettings, get_report_settings
from app.domain.sales import SaleRecord
from app.services.aggregation_service import (
    UNNAMED_LABEL,
    breakdown_by_category,
    compute_summary,
    effective_date,
    to_amount,
)
from app.services.aggregation_service import top_products as rank_top_products

logger = logging.getLogger(__name__)

PDF_MEDIA_TYPE = "application/pdf"
WORKBOOK_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"

UNASSIGNED_LABEL = "unassigned"
MISSING_CELL = "-"

SHEET_ORDER: tuple[str, ...] = (
    "Summary",
    "Data",
    "Salespeople",
    "Regions",
    "Temporal",
    "Products",
)

_COLUMN_WIDTHS: dict[str, tuple[int, ...]] = {
    "Summary": (35, 25),
    "Data": (12, 30, 15, 10, 12, 12, 12, 20),
    "Salespeople": (25, 12, 15, 15),
    "Regions": (20, 12, 15, 12),
    "Temporal": (20, 15, 15, 12),
    "Products": (30, 15, 10, 12, 12, 8),
}

_TOP_PRODUCTS_HEADER = colors.Color(139 / 255, 92 / 255, 246 / 255)
_CATEGORY_HEADER = colors.Color(16 / 255, 185 / 255, 129 / 255)
_STRIPE = colors.HexColor("#f3f4f6")
_PERCENT_FORMAT = "0.0%"


class EmptyExportError(ValueError):
    """
    Raised when there are no records to export.
    """


class ReportExportError(RuntimeError):
    """
    Raised when a report document cannot be constructed.
    """


@dataclass(frozen=True)
class ReportArtifact:
    """
    One generated report file.
    """

    filename: str
    media_type: str
    content: bytes


@dataclass(frozen=True)
class GroupStats:
    name: str
    count: int
    total: float


@dataclass(frozen=True)
class ProductStats:
    name: str
    category: str
    units: int
    total: float

    @property
    def average_price(self) -> float:
        return self.total / self.units if self.units > 0 else 0.0


# ---------------------------------------------------------------------------
# Grouping helpers
# ---------------------------------------------------------------------------


def group_stats(
    sales: Sequence[SaleRecord],
    key: Callable[[SaleRecord], str],
) -> list[GroupStats]:
    """
    Count and sum ``total_amount`` per key, in first-seen order.
    """

    counts: dict[str, int] = {}
    totals: dict[str, float] = {}
    for sale in sales:
        group = key(sale)
        counts[group] = counts.get(group, 0) + 1
        totals[group] = totals.get(group, 0.0) + to_amount(sale.total_amount)
    return [GroupStats(name=name, count=counts[name], total=totals[name]) for name in counts]


def product_stats(sales: Sequence[SaleRecord]) -> list[ProductStats]:
    """
    Per-product catalogue sorted by total descending.

    Each product keeps the category of its first occurrence. Units count a
    missing or zero quantity as one.
    """

    categories: dict[str, str] = {}
    units: dict[str, int] = {}
    totals: dict[str, float] = {}
    for sale in sales:
        name = sale.product_name or UNNAMED_LABEL
        if name not in categories:
            categories[name] = sale.category or MISSING_CELL
            units[name] = 0
            totals[name] = 0.0
        units[name] += sale.quantity or 1
        totals[name] += to_amount(sale.total_amount)

    stats = [
        ProductStats(name=name, category=categories[name], units=units[name], total=totals[name])
        for name in categories
    ]
    return sorted(stats, key=lambda item: item.total, reverse=True)


def _append_row(sheet: Any, values: list[Any]) -> None:
    """
    Append one row, keeping text that starts with ``=`` as a literal string.

    openpyxl stores any such string as a formula; uploaded product, category,
    region and salesperson values must never be evaluated by the reader.
    """

    sheet.append(values)
    for cell in sheet[sheet.max_row]:
        if isinstance(cell.value, str) and cell.data_type == "f":
            cell.data_type = "s"


def _share(part: float, whole: float) -> float:
    return part / whole if whole else 0.0


def report_filename(prefix: str, extension: str, today: date) -> str:
    return f"{prefix}_{today.isoformat()}.{extension}"


# ---------------------------------------------------------------------------
# Service
# ---------------------------------------------------------------------------


class ReportExportService:
    """
    Renders PDF and workbook reports for an already-filtered record set.
    """

    def __init__(
        self,
        settings: ReportSettings | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._settings = settings or ReportSettings()
        self._clock = clock or (lambda: datetime.now(tz=timezone.utc))

    def export_pdf(self, sales: Sequence[SaleRecord]) -> ReportArtifact:
        self._require_records(sales)
        generated_at = self._clock()
        try:
            content = self._render_pdf(sales, generated_at)
        except Exception as exc:  # noqa: BLE001
            logger.exception("PDF report construction failed for %d records", len(sales))
            raise ReportExportError("Failed to generate the PDF report.") from exc

        filename = report_filename(
            f"{self._settings.brand_name.lower()}_report", "pdf", generated_at.date()
        )
        logger.info("PDF report generated: %s (%d records)", filename, len(sales))
        return ReportArtifact(filename=filename, media_type=PDF_MEDIA_TYPE, content=content)

    def export_workbook(self, sales: Sequence[SaleRecord]) -> ReportArtifact:
        self._require_records(sales)
        generated_at = self._clock()
        try:
            content = self._render_workbook(sales, generated_at)
        except Exception as exc:  # noqa: BLE001
            logger.exception("Workbook report construction failed for %d records", len(sales))
            raise ReportExportError("Failed to generate the workbook report.") from exc

        filename = report_filename(
            f"{self._settings.brand_name}_Report", "xlsx", generated_at.date()
        )
        logger.info("Workbook report generated: %s (%d records)", filename, len(sales))
        return ReportArtifact(filename=filename, media_type=WORKBOOK_MEDIA_TYPE, content=content)

    @staticmethod
    def _require_records(sales: Sequence[SaleRecord]) -> None:
        if not sales:
            raise EmptyExportError("There is no data to export for the selected filters.")

    def _money(self, value: float) -> str:
        return f"{self._settings.currency_symbol}{value:,.2f}"

    @property
    def _money_format(self) -> str:
        return f'"{self._settings.currency_symbol}"#,##0.00'

    # ------------------------------------------------------------------
    # PDF
    # ------------------------------------------------------------------

    def _render_pdf(self, sales: Sequence[SaleRecord], generated_at: datetime) -> bytes:
        summary = compute_summary(sales)
        styles = getSampleStyleSheet()
        title_style = ParagraphStyle(
            "ReportTitle",
            parent=styles["Heading1"],
            fontSize=20,
            textColor=_TOP_PRODUCTS_HEADER,
            alignment=TA_CENTER,
            spaceAfter=6,
        )
        subtitle_style = ParagraphStyle(
            "ReportSubtitle",
            parent=styles["Normal"],
            fontSize=10,
            textColor=colors.grey,
            alignment=TA_CENTER,
        )
        heading_style = ParagraphStyle(
            "ReportHeading",
            parent=styles["Heading2"],
            fontSize=14,
            spaceBefore=12,
            spaceAfter=8,
        )
        body_style = ParagraphStyle("ReportBody", parent=styles["Normal"], fontSize=11, leftIndent=6)

        story: list[Any] = [
            Paragraph(escape(f"{self._settings.brand_name} - Sales Report"), title_style),
            Paragraph(f"Generated: {generated_at.date().isoformat()}", subtitle_style),
            Spacer(1, 12),
            Paragraph("Executive Summary", heading_style),
            Paragraph(f"Total sales: {escape(self._money(summary.total_sales))}", body_style),
            Paragraph(f"Total records: {summary.total_orders}", body_style),
            Paragraph(f"Average per sale: {escape(self._money(summary.avg_order_value))}", body_style),
            Spacer(1, 12),
            Paragraph("Top 5 Products", heading_style),
            self._striped_table(
                ["Product", "Sales"],
                [[entry.name, self._money(entry.total)] for entry in rank_top_products(sales)],
                _TOP_PRODUCTS_HEADER,
            ),
            Spacer(1, 12),
            Paragraph("Sales by Category", heading_style),
            self._striped_table(
                ["Category", "Sales"],
                [[entry.name, self._money(entry.total)] for entry in breakdown_by_category(sales)],
                _CATEGORY_HEADER,
            ),
        ]

        buffer = BytesIO()
        doc = SimpleDocTemplate(
            buffer,
            pagesize=A4,
            leftMargin=14 * mm,
            rightMargin=14 * mm,
            topMargin=14 * mm,
            bottomMargin=14 * mm,
            title=f"{self._settings.brand_name} Sales Report",
        )
        doc.build(story)
        return buffer.getvalue()

    @staticmethod
    def _striped_table(
        header: list[str],
        body: list[list[str]],
        header_color: colors.Color,
    ) -> Table:
        table = Table([header, *body], colWidths=[127 * mm, 55 * mm], repeatRows=1)
        table.setStyle(
            TableStyle(
                [
                    ("BACKGROUND", (0, 0), (-1, 0), header_color),
                    ("TEXTCOLOR", (0, 0), (-1, 0), colors.white),
                    ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
                    ("FONTSIZE", (0, 0), (-1, -1), 10),
                    ("ALIGN", (1, 0), (1, -1), "RIGHT"),
                    ("BOTTOMPADDING", (0, 0), (-1, 0), 8),
                    ("ROWBACKGROUNDS", (0, 1), (-1, -1), [colors.white, _STRIPE]),
                ]
            )
        )
        return table

    # ------------------------------------------------------------------
    # Workbook
    # ------------------------------------------------------------------

    def _render_workbook(self, sales: Sequence[SaleRecord], generated_at: datetime) -> bytes:
        workbook = Workbook()
        builders: dict[str, Callable[[Any, Sequence[SaleRecord], datetime], None]] = {
            "Summary": self._fill_summary,
            "Data": self._fill_data,
            "Salespeople": self._fill_salespeople,
            "Regions": self._fill_regions,
            "Temporal": self._fill_temporal,
            "Products": self._fill_products,
        }
        for index, title in enumerate(SHEET_ORDER):
            sheet = workbook.active if index == 0 else workbook.create_sheet()
            sheet.title = title
            builders[title](sheet, sales, generated_at)
            for column, width in enumerate(_COLUMN_WIDTHS[title], start=1):
                sheet.column_dimensions[get_column_letter(column)].width = width

        buffer = BytesIO()
        workbook.save(buffer)
        return buffer.getvalue()

    def _append_money_row(self, sheet: Any, values: list[Any], money_columns: tuple[int, ...]) -> None:
        _append_row(sheet, values)
        for column in money_columns:
            sheet.cell(row=sheet.max_row, column=column).number_format = self._money_format

    @staticmethod
    def _append_heading(sheet: Any, values: list[Any]) -> None:
        _append_row(sheet, values)
        for cell in sheet[sheet.max_row]:
            cell.font = Font(bold=True)

    def _fill_summary(self, sheet: Any, sales: Sequence[SaleRecord], generated_at: datetime) -> None:
        summary = compute_summary(sales)
        _append_row(sheet, [])
        self._append_heading(sheet, [f"{self._settings.brand_name.upper()} - SALES REPORT"])
        _append_row(sheet, [])
        _append_row(sheet, ["Generated:", generated_at.strftime("%A, %d %B %Y %H:%M UTC")])
        _append_row(sheet, [])
        self._append_heading(sheet, ["EXECUTIVE SUMMARY"])
        _append_row(sheet, [])
        self._append_heading(sheet, ["Metric", "Value"])
        self._append_money_row(sheet, ["Total sales", round(summary.total_sales, 2)], (2,))
        _append_row(sheet, ["Total records", summary.total_orders])
        self._append_money_row(sheet, ["Average per sale", round(summary.avg_order_value, 2)], (2,))
        _append_row(sheet, [])
        self._append_heading(sheet, ["TOP 5 PRODUCTS"])
        _append_row(sheet, [])
        self._append_heading(sheet, ["Product", "Total sales"])
        for entry in rank_top_products(sales):
            self._append_money_row(sheet, [entry.name, round(entry.total, 2)], (2,))
        _append_row(sheet, [])
        self._append_heading(sheet, ["SALES BY CATEGORY"])
        _append_row(sheet, [])
        self._append_heading(sheet, ["Category", "Total sales"])
        for entry in breakdown_by_category(sales):
            self._append_money_row(sheet, [entry.name, round(entry.total, 2)], (2,))

    def _fill_data(self, sheet: Any, sales: Sequence[SaleRecord], generated_at: datetime) -> None:
        summary = compute_summary(sales)
        self._append_heading(sheet, ["SALES DETAIL"])
        _append_row(sheet, [])
        self._append_heading(
            sheet,
            ["Date", "Product", "Category", "Quantity", "Price", "Total", "Region", "Salesperson"],
        )
        for sale in sales:
            self._append_money_row(
                sheet,
                [
                    sale.date or MISSING_CELL,
                    sale.product_name or MISSING_CELL,
                    sale.category or MISSING_CELL,
                    sale.quantity or 0,
                    round(to_amount(sale.unit_price), 2),
                    round(to_amount(sale.total_amount), 2),
                    sale.region or MISSING_CELL,
                    sale.salesperson or MISSING_CELL,
                ],
                (5, 6),
            )
        _append_row(sheet, [])
        self._append_money_row(
            sheet,
            [
                "TOTAL",
                f"{len(sales)} records",
                "",
                sum(sale.quantity or 0 for sale in sales),
                "",
                round(summary.total_sales, 2),
                "",
                "",
            ],
            (6,),
        )
        for cell in sheet[sheet.max_row]:
            cell.font = Font(bold=True)

    def _fill_salespeople(self, sheet: Any, sales: Sequence[SaleRecord], generated_at: datetime) -> None:
        self._append_heading(sheet, ["SALES BY SALESPERSON"])
        _append_row(sheet, [])
        self._append_heading(sheet, ["Salesperson", "Sales", "Total", "Average"])
        groups = group_stats(sales, lambda sale: sale.salesperson or UNASSIGNED_LABEL)
        for group in sorted(groups, key=lambda item: item.total, reverse=True):
            self._append_money_row(
                sheet,
                [group.name, group.count, round(group.total, 2), round(group.total / group.count, 2)],
                (3, 4),
            )

    def _fill_regions(self, sheet: Any, sales: Sequence[SaleRecord], generated_at: datetime) -> None:
        grand_total = compute_summary(sales).total_sales
        self._append_heading(sheet, ["SALES BY REGION"])
        _append_row(sheet, [])
        self._append_heading(sheet, ["Region", "Sales", "Total", "% of total"])
        groups = group_stats(sales, lambda sale: sale.region or UNASSIGNED_LABEL)
        for group in sorted(groups, key=lambda item: item.total, reverse=True):
            self._append_money_row(
                sheet,
                [group.name, group.count, round(group.total, 2), _share(group.total, grand_total)],
                (3,),
            )
            sheet.cell(row=sheet.max_row, column=4).number_format = _PERCENT_FORMAT

    def _fill_temporal(self, sheet: Any, sales: Sequence[SaleRecord], generated_at: datetime) -> None:
        grand_total = compute_summary(sales).total_sales
        days = sorted(group_stats(sales, effective_date), key=lambda item: item.name)

        best = GroupStats(name="", count=0, total=0.0)
        worst = GroupStats(name="", count=0, total=float("inf"))
        for day in days:
            if day.total > best.total:
                best = day
            if day.total < worst.total:
                worst = day

        self._append_heading(sheet, ["SALES OVER TIME"])
        _append_row(sheet, [])
        self._append_money_row(sheet, ["Best day:", best.name, round(best.total, 2)], (3,))
        self._append_money_row(sheet, ["Worst day:", worst.name, round(worst.total, 2)], (3,))
        _append_row(sheet, ["Days with sales:", len(days)])
        self._append_money_row(
            sheet,
            ["Average per day:", "", round(grand_total / (len(days) or 1), 2)],
            (3,),
        )
        _append_row(sheet, [])
        self._append_heading(sheet, ["Date", "Transactions", "Total", "% of total"])
        for day in days:
            self._append_money_row(
                sheet,
                [day.name, day.count, round(day.total, 2), _share(day.total, grand_total)],
                (3,),
            )
            sheet.cell(row=sheet.max_row, column=4).number_format = _PERCENT_FORMAT

    def _fill_products(self, sheet: Any, sales: Sequence[SaleRecord], generated_at: datetime) -> None:
        products = product_stats(sales)
        self._append_heading(sheet, ["PRODUCT CATALOGUE"])
        _append_row(sheet, [])
        _append_row(sheet, ["Unique products:", len(products)])
        _append_row(sheet, [])
        self._append_heading(
            sheet,
            ["Product", "Category", "Units", "Total sales", "Avg. price", "Rank"],
        )
        for rank, product in enumerate(products, start=1):
            self._append_money_row(
                sheet,
                [
                    product.name,
                    product.category,
                    product.units,
                    round(product.total, 2),
                    round(product.average_price, 2),
                    f"#{rank}",
                ],
                (4, 5),
            )


_service: ReportExportService | None = None


def get_report_export_service() -> ReportExportService:
    global _service
    if _service is None:
        _service = ReportExportService(settings=get_report_settings())
    return _service
