"""
app/mappers/sales_normalizer.py

Maps raw spreadsheet/CSV rows onto the canonical sale record.

Every canonical field owns an ordered list of accepted column headers
(English first, then the Spanish spelling used by the original exports).
The first header present in the row wins, even when its value is empty or
falsy. Missing or unparseable values fall back to per-field defaults, so a
row never fails normalization.
"""

from __future__ import annotations

import math
import re
from collections.abc import Callable, Iterable, Mapping, Sequence
from datetime import date, datetime, timezone

from app.domain.sales import RawRow, RawValue, SaleInput

CANONICAL_FIELDS: tuple[str, ...] = (
    "date",
    "product_name",
    "category",
    "quantity",
    "unit_price",
    "total_amount",
    "region",
    "salesperson",
)

FIELD_ALIASES: dict[str, tuple[str, ...]] = {
    "date": ("date", "fecha", "Date", "Fecha"),
    "product_name": ("product_name", "producto", "Producto", "product", "Product"),
    "category": ("category", "categoria", "Categoria", "Category"),
    "quantity": ("quantity", "cantidad", "Cantidad", "Quantity"),
    "unit_price": ("unit_price", "precio", "Precio", "price", "Price"),
    "total_amount": ("total_amount", "total", "Total", "amount", "Amount"),
    "region": ("region", "Region"),
    "salesperson": ("salesperson", "vendedor", "Vendedor", "seller", "Seller"),
}

UNNAMED_PRODUCT = "unnamed"
DEFAULT_QUANTITY = 1
# Largest value the BIGINT quantity column holds.
MAX_QUANTITY = 2**63 - 1
DEFAULT_AMOUNT = 0.0

# Currency symbols and whitespace are dropped before parsing.
_NUMERIC_NOISE = re.compile(r"[$€\s]")
# 1,234 or 12,345,678: comma only groups thousands.
_COMMA_THOUSANDS = re.compile(r"^[+-]?\d{1,3}(,\d{3})+$")


def _canonical_number_text(text: str) -> str | None:
    """
    Rewrite *text* with ``.`` as the only decimal mark, or None if ambiguous.

    When both separators appear the right-most one is the decimal mark
    (``1.234,56`` and ``1,234.56``). A lone comma is a decimal mark unless it
    groups thousands.
    """

    if "," in text and "." in text:
        if text.rfind(",") > text.rfind("."):
            return text.replace(".", "").replace(",", ".")
        return text.replace(",", "")
    if "," in text:
        if _COMMA_THOUSANDS.match(text):
            return text.replace(",", "")
        if text.count(",") == 1:
            return text.replace(",", ".")
        return None
    return text


def parse_number(value: RawValue) -> float | None:
    """
    Best-effort conversion of a raw cell to a finite float.

    Returns None for blanks, booleans, and anything that does not parse.
    """

    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    else:
        text = _canonical_number_text(_NUMERIC_NOISE.sub("", str(value)))
        if not text:
            return None
        try:
            number = float(text)
        except ValueError:
            return None
    return number if math.isfinite(number) else None


def _utc_today() -> date:
    return datetime.now(tz=timezone.utc).date()


class SalesNormalizer:
    """
    Converts raw rows into :class:`SaleInput` values.
    """

    def __init__(
        self,
        *,
        aliases: Mapping[str, Sequence[str]] | None = None,
        today: Callable[[], date] | None = None,
    ) -> None:
        self._aliases: dict[str, tuple[str, ...]] = {
            canonical: tuple(values)
            for canonical, values in (aliases or FIELD_ALIASES).items()
        }
        self._today = today or _utc_today

    def resolve_field(self, raw_row: RawRow, canonical_field: str) -> tuple[bool, RawValue]:
        """
        Return ``(found, value)`` for the first alias of *canonical_field* present in the row.
        """

        for alias in self._aliases.get(canonical_field, (canonical_field,)):
            if alias in raw_row:
                return True, raw_row[alias]
        return False, None

    def normalize_row(self, raw_row: RawRow) -> SaleInput:
        """
        Produce exactly one canonical sale from one raw row.
        """

        return SaleInput(
            date=self._resolve_date(raw_row),
            product_name=self._resolve_text(raw_row, "product_name") or UNNAMED_PRODUCT,
            category=self._resolve_text(raw_row, "category"),
            quantity=self._resolve_quantity(raw_row),
            unit_price=self._resolve_amount(raw_row, "unit_price"),
            total_amount=self._resolve_amount(raw_row, "total_amount"),
            region=self._resolve_text(raw_row, "region"),
            salesperson=self._resolve_text(raw_row, "salesperson"),
        )

    def normalize_rows(
        self,
        raw_rows: Iterable[RawRow],
        *,
        uploaded_by: str | None = None,
    ) -> list[SaleInput]:
        """
        Normalize rows in file order, stamping the uploader when given.
        """

        normalized = [self.normalize_row(raw_row) for raw_row in raw_rows]
        if uploaded_by is None:
            return normalized
        return [sale.with_uploader(uploaded_by) for sale in normalized]

    # ------------------------------------------------------------------
    # Field resolution
    # ------------------------------------------------------------------

    def _resolve_date(self, raw_row: RawRow) -> str:
        # Passed through unvalidated; only a missing or blank value gets today's date.
        text = self._resolve_text(raw_row, "date")
        if text is None:
            return self._today().isoformat()
        return text

    def _resolve_text(self, raw_row: RawRow, canonical_field: str) -> str | None:
        found, value = self.resolve_field(raw_row, canonical_field)
        if not found or value is None or isinstance(value, bool):
            return None
        text = str(value).strip()
        return text or None

    def _resolve_quantity(self, raw_row: RawRow) -> int:
        _, value = self.resolve_field(raw_row, "quantity")
        number = parse_number(value)
        if number is None or not 0 <= number <= MAX_QUANTITY:
            return DEFAULT_QUANTITY
        return int(number)

    def _resolve_amount(self, raw_row: RawRow, canonical_field: str) -> float:
        _, value = self.resolve_field(raw_row, canonical_field)
        number = parse_number(value)
        if number is None or number < 0:
            return DEFAULT_AMOUNT
        return number
