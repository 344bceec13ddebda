"""
app/parsing/sales_file_reader.py

Reads an uploaded CSV or spreadsheet into an ordered list of raw rows.

The first row of either format is the header row. CSV handling is a plain
comma split with literal ``"`` characters stripped from every field; quoted
commas and escaped quotes are not supported. Workbooks are read with
openpyxl from the first worksheet only.
"""

from __future__ import annotations

import io
import logging
from dataclasses import dataclass, field
from datetime import date, datetime, time
from decimal import Decimal
from enum import Enum
from typing import Any
from zipfile import BadZipFile

from openpyxl import load_workbook
from openpyxl.utils.exceptions import InvalidFileException

from app.domain.sales import RawValue

logger = logging.getLogger(__name__)

CSV_EXTENSIONS: tuple[str, ...] = (".csv",)
WORKBOOK_EXTENSIONS: tuple[str, ...] = (".xlsx", ".xls")
CSV_CONTENT_TYPES = {"text/csv"}
WORKBOOK_CONTENT_TYPES = {
    "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    "application/vnd.ms-excel",
}


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class SalesFileError(ValueError):
    """
    Base class for batch-level input-format failures.
    """


class UnsupportedFileTypeError(SalesFileError):
    """
    Raised when the upload is neither CSV nor a spreadsheet.
    """


class FileReadError(SalesFileError):
    """
    Raised when the file content cannot be decoded or opened.
    """


class EmptyFileError(SalesFileError):
    """
    Raised when the file parses but yields zero data rows.
    """


# ---------------------------------------------------------------------------
# Types
# ---------------------------------------------------------------------------


class SalesFileType(str, Enum):
    CSV = "csv"
    WORKBOOK = "workbook"


@dataclass(frozen=True)
class ParsedSalesFile:
    """
    Tabular content of one upload, rows in file order.
    """

    filename: str
    file_type: SalesFileType
    headers: tuple[str, ...]
    rows: list[dict[str, RawValue]] = field(default_factory=list)

    @property
    def row_count(self) -> int:
        return len(self.rows)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def detect_file_type(filename: str | None, content_type: str | None) -> SalesFileType:
    """
    Classify an upload by extension or MIME type. CSV wins when both match.
    """

    name = (filename or "").strip().lower()
    mime = (content_type or "").split(";", 1)[0].strip().lower()

    if name.endswith(CSV_EXTENSIONS) or mime in CSV_CONTENT_TYPES:
        return SalesFileType.CSV
    if name.endswith(WORKBOOK_EXTENSIONS) or mime in WORKBOOK_CONTENT_TYPES:
        return SalesFileType.WORKBOOK
    raise UnsupportedFileTypeError("Please upload a spreadsheet (.xlsx) or CSV file.")


def read_sales_file(
    content: bytes,
    *,
    filename: str | None,
    content_type: str | None = None,
) -> ParsedSalesFile:
    """
    Parse raw upload bytes into header + row mappings.

    Raises
    ------
    UnsupportedFileTypeError: wrong extension / MIME type.
    FileReadError:            undecodable text or unreadable workbook.
    EmptyFileError:           no data rows below the header.
    """

    file_type = detect_file_type(filename, content_type)
    if file_type is SalesFileType.CSV:
        try:
            text = content.decode("utf-8-sig")
        except UnicodeDecodeError as exc:
            raise FileReadError("CSV must be UTF-8 encoded.") from exc
        headers, rows = parse_csv_text(text)
    else:
        headers, rows = _read_workbook(content)

    if not rows:
        raise EmptyFileError("The file does not contain any data rows.")

    logger.debug(
        "Parsed sales file filename=%r type=%s rows=%d",
        filename,
        file_type.value,
        len(rows),
    )
    return ParsedSalesFile(
        filename=filename or "",
        file_type=file_type,
        headers=tuple(headers),
        rows=rows,
    )


def parse_csv_text(text: str) -> tuple[list[str], list[dict[str, RawValue]]]:
    """
    Split CSV text into a header list and one dict per data line.

    Blank lines are dropped. Missing trailing fields become ``""`` and
    surplus fields are ignored.
    """

    lines = [line for line in text.split("\n") if line.strip()]
    if len(lines) < 2:
        return [], []

    headers = [_clean_csv_field(value) for value in lines[0].split(",")]
    rows: list[dict[str, RawValue]] = []
    for line in lines[1:]:
        values = [_clean_csv_field(value) for value in line.split(",")]
        rows.append(
            {
                header: values[index] if index < len(values) else ""
                for index, header in enumerate(headers)
            }
        )
    return headers, rows


# ---------------------------------------------------------------------------
# Internals
# ---------------------------------------------------------------------------


def _clean_csv_field(value: str) -> str:
    return value.strip().replace('"', "")


def _read_workbook(content: bytes) -> tuple[list[str], list[dict[str, RawValue]]]:
    try:
        workbook = load_workbook(io.BytesIO(content), read_only=True, data_only=True)
    except (InvalidFileException, BadZipFile, KeyError, OSError, ValueError) as exc:
        raise FileReadError("The spreadsheet could not be read.") from exc

    try:
        if not workbook.worksheets:
            raise FileReadError("The workbook does not contain any worksheets.")
        worksheet = workbook.worksheets[0]

        headers: list[str] = []
        rows: list[dict[str, RawValue]] = []
        for row_index, values in enumerate(worksheet.iter_rows(values_only=True)):
            if row_index == 0:
                headers = [
                    str(value).strip() if value is not None else f"col{position}"
                    for position, value in enumerate(values, start=1)
                ]
                continue

            row: dict[str, RawValue] = {}
            for position, value in enumerate(values, start=1):
                # Empty cells are left out so the normalizer sees them as absent.
                if value is None:
                    continue
                header = headers[position - 1] if position <= len(headers) else f"col{position}"
                row[header] = _to_raw_value(value)
            if row:
                rows.append(row)
        return headers, rows
    finally:
        workbook.close()


def _to_raw_value(value: Any) -> RawValue:
    if isinstance(value, datetime):
        if value.time() == time.min:
            return value.date().isoformat()
        return value.isoformat(sep=" ")
    if isinstance(value, (date, time)):
        return value.isoformat()
    if isinstance(value, Decimal):
        return float(value)
    if isinstance(value, (str, int, float)):
        return value
    return str(value)
