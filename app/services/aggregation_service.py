"""
app/services/aggregation_service.py

Pure aggregation layer behind the dashboard and report views.

Every function takes an already-retrieved sequence of sales plus an
immutable :class:`FilterSpec` snapshot and returns new values; nothing here
touches the store or mutates its inputs. A filter change is handled by
calling :func:`build_dashboard_view` again over the same records.

Missing-value policy
--------------------
- category:     missing values are grouped under ``"uncategorized"``.
- region:       missing values are left out of the region breakdown.
- product_name: missing values are grouped under ``"unnamed"``.

Breakdowns keep first-seen key order; the top-products ranking uses a
stable sort, so ties resolve to the product seen first.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Final

from app.domain.sales import ALL_CATEGORIES, DateRange, FilterSpec, SaleRecord
from app.mappers.sales_normalizer import parse_number

PALETTE: Final[tuple[str, ...]] = (
    "#8b5cf6",
    "#10b981",
    "#f59e0b",
    "#ef4444",
    "#3b82f6",
    "#ec4899",
)
UNCATEGORIZED_LABEL: Final[str] = "uncategorized"
UNNAMED_LABEL: Final[str] = "unnamed"
TOP_PRODUCTS_LIMIT: Final[int] = 5
RECENT_SALES_LIMIT: Final[int] = 5

_TIMESTAMP_FORMATS: tuple[str, ...] = (
    "%Y/%m/%d",
    "%m/%d/%Y",
    "%Y/%m/%d %H:%M:%S",
)


# ---------------------------------------------------------------------------
# Result types
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class SalesSummary:
    total_sales: float
    total_orders: int
    avg_order_value: float
    total_products: int


@dataclass(frozen=True)
class BreakdownEntry:
    """
    Summed ``total_amount`` for one group key. ``color`` is set for
    category and region breakdowns only.
    """

    name: str
    total: float
    color: str | None = None


@dataclass(frozen=True)
class DailyTotal:
    date: str
    total: float


@dataclass(frozen=True)
class RecentSale:
    id: str
    product_name: str | None
    amount: float
    date: str


@dataclass(frozen=True)
class DashboardView:
    """
    Every derived view the dashboard renders for one filter snapshot.
    """

    filters: FilterSpec
    summary: SalesSummary
    by_category: list[BreakdownEntry] = field(default_factory=list)
    by_region: list[BreakdownEntry] = field(default_factory=list)
    top_products: list[BreakdownEntry] = field(default_factory=list)
    by_date: list[DailyTotal] = field(default_factory=list)
    recent_sales: list[RecentSale] = field(default_factory=list)
    categories: list[str] = field(default_factory=list)


# ---------------------------------------------------------------------------
# Value helpers
# ---------------------------------------------------------------------------


def to_amount(value: object) -> float:
    """
    Coerce a stored amount to float at summation time; non-numeric is 0.
    """

    number = parse_number(value)  # type: ignore[arg-type]
    return number if number is not None else 0.0


def parse_sale_timestamp(value: str | None) -> datetime | None:
    """
    Parse a stored ``date`` string into an aware UTC datetime.

    Date-only values resolve to midnight UTC. Returns None when the string
    is not a recognisable date.
    """

    if value is None:
        return None
    text = value.strip()
    if not text:
        return None
    if text.endswith("Z"):
        text = f"{text[:-1]}+00:00"

    parsed: datetime | None = None
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        for fmt in _TIMESTAMP_FORMATS:
            try:
                parsed = datetime.strptime(text, fmt)
                break
            except ValueError:
                continue
    if parsed is None:
        return None
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def effective_timestamp(sale: SaleRecord) -> datetime | None:
    """
    ``date`` parsed as a timestamp, else ``created_at`` when ``date`` is absent.

    A present but malformed ``date`` yields None rather than ``created_at``.
    """

    if sale.date:
        return parse_sale_timestamp(sale.date)
    return sale.created_at


def effective_date(sale: SaleRecord) -> str:
    """
    Group key for time series: the stored ``date`` string, else the
    ``created_at`` calendar day in ``YYYY-MM-DD`` form.
    """

    if sale.date:
        return sale.date
    created_at = sale.created_at
    if created_at.tzinfo is not None:
        created_at = created_at.astimezone(timezone.utc)
    return created_at.date().isoformat()


# ---------------------------------------------------------------------------
# Filtering
# ---------------------------------------------------------------------------


def filter_sales(
    sales: Iterable[SaleRecord],
    filters: FilterSpec | None = None,
    *,
    now: datetime | None = None,
) -> tuple[SaleRecord, ...]:
    """
    Apply the date-range AND category predicates, preserving input order.
    """

    selected = filters or FilterSpec()
    predicates: list[Callable[[SaleRecord], bool]] = []

    days = DateRange(selected.date_range).days
    if days is not None:
        reference = now or datetime.now(tz=timezone.utc)
        if reference.tzinfo is None:
            reference = reference.replace(tzinfo=timezone.utc)
        cutoff = reference - timedelta(days=days)

        def _in_range(sale: SaleRecord) -> bool:
            timestamp = effective_timestamp(sale)
            return timestamp is not None and timestamp >= cutoff

        predicates.append(_in_range)

    if selected.category != ALL_CATEGORIES:
        predicates.append(lambda sale: sale.category == selected.category)

    return tuple(sale for sale in sales if all(check(sale) for check in predicates))


# ---------------------------------------------------------------------------
# Metrics
# ---------------------------------------------------------------------------


def compute_summary(sales: Sequence[SaleRecord]) -> SalesSummary:
    total_sales = sum((to_amount(sale.total_amount) for sale in sales), 0.0)
    total_orders = len(sales)
    return SalesSummary(
        total_sales=total_sales,
        total_orders=total_orders,
        avg_order_value=total_sales / total_orders if total_orders > 0 else 0.0,
        total_products=len({sale.product_name for sale in sales}),
    )


def group_totals(
    sales: Iterable[SaleRecord],
    key: Callable[[SaleRecord], str | None],
) -> dict[str, float]:
    """
    Sum ``total_amount`` per key in one pass. Sales whose key is None are skipped.
    """

    totals: dict[str, float] = {}
    for sale in sales:
        group = key(sale)
        if group is None:
            continue
        totals[group] = totals.get(group, 0.0) + to_amount(sale.total_amount)
    return totals


def _with_colors(totals: dict[str, float]) -> list[BreakdownEntry]:
    return [
        BreakdownEntry(name=name, total=total, color=PALETTE[index % len(PALETTE)])
        for index, (name, total) in enumerate(totals.items())
    ]


def breakdown_by_category(sales: Iterable[SaleRecord]) -> list[BreakdownEntry]:
    return _with_colors(group_totals(sales, lambda sale: sale.category or UNCATEGORIZED_LABEL))


def breakdown_by_region(sales: Iterable[SaleRecord]) -> list[BreakdownEntry]:
    return _with_colors(group_totals(sales, lambda sale: sale.region or None))


def breakdown_by_product(sales: Iterable[SaleRecord]) -> list[BreakdownEntry]:
    totals = group_totals(sales, lambda sale: sale.product_name or UNNAMED_LABEL)
    return [BreakdownEntry(name=name, total=total) for name, total in totals.items()]


def top_products(
    sales: Iterable[SaleRecord],
    limit: int = TOP_PRODUCTS_LIMIT,
) -> list[BreakdownEntry]:
    ranked = sorted(breakdown_by_product(sales), key=lambda entry: entry.total, reverse=True)
    return ranked[: max(0, limit)]


def sales_by_date(sales: Iterable[SaleRecord]) -> list[DailyTotal]:
    """
    Daily totals sorted ascending by date string.

    The sort is lexicographic, which is chronological only for
    ``YYYY-MM-DD`` dates.
    """

    totals = group_totals(sales, effective_date)
    return [DailyTotal(date=day, total=totals[day]) for day in sorted(totals)]


def distinct_categories(sales: Iterable[SaleRecord]) -> list[str]:
    """
    Non-empty categories in first-seen order, for the filter selector.
    """

    seen: dict[str, None] = {}
    for sale in sales:
        if sale.category:
            seen.setdefault(sale.category, None)
    return list(seen)


def recent_sales(
    sales: Sequence[SaleRecord],
    limit: int = RECENT_SALES_LIMIT,
) -> list[RecentSale]:
    return [
        RecentSale(
            id=sale.id,
            product_name=sale.product_name,
            amount=to_amount(sale.total_amount),
            date=effective_date(sale),
        )
        for sale in sales[: max(0, limit)]
    ]


def build_dashboard_view(
    sales: Sequence[SaleRecord],
    filters: FilterSpec | None = None,
    *,
    now: datetime | None = None,
) -> DashboardView:
    """
    Derive the full dashboard for one filter snapshot.

    ``categories`` is computed over the unfiltered set so the selector keeps
    offering every category.
    """

    selected = filters or FilterSpec()
    filtered = filter_sales(sales, selected, now=now)
    return DashboardView(
        filters=selected,
        summary=compute_summary(filtered),
        by_category=breakdown_by_category(filtered),
        by_region=breakdown_by_region(filtered),
        top_products=top_products(filtered),
        by_date=sales_by_date(filtered),
        recent_sales=recent_sales(filtered),
        categories=distinct_categories(sales),
    )
