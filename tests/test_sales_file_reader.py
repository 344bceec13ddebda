"""
tests/test_sales_file_reader.py

Pytest unit tests for the upload file reader.

Coverage
--------
- File type detection by extension and MIME type
- CSV header/row splitting, quote stripping, blank lines, BOM
- Workbook reading through openpyxl (first sheet, empty cells, dates)
- Batch-level failures: unsupported type, unreadable content, zero rows
"""

from __future__ import annotations

from datetime import datetime
from io import BytesIO

import pytest
from openpyxl import Workbook

from app.parsing.sales_file_reader import (
    EmptyFileError,
    FileReadError,
    SalesFileError,
    SalesFileType,
    UnsupportedFileTypeError,
    detect_file_type,
    parse_csv_text,
    read_sales_file,
)


def _workbook_bytes(rows: list[list[object]]) -> bytes:
    workbook = Workbook()
    sheet = workbook.active
    for row in rows:
        sheet.append(row)
    workbook.create_sheet("Ignored").append(["date", "total"])
    buffer = BytesIO()
    workbook.save(buffer)
    return buffer.getvalue()


class TestDetectFileType:
    @pytest.mark.parametrize(
        ("filename", "content_type", "expected"),
        [
            ("sales.csv", None, SalesFileType.CSV),
            ("SALES.CSV", "application/octet-stream", SalesFileType.CSV),
            ("export", "text/csv; charset=utf-8", SalesFileType.CSV),
            ("sales.xlsx", None, SalesFileType.WORKBOOK),
            ("legacy.xls", None, SalesFileType.WORKBOOK),
            ("blob", "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet", SalesFileType.WORKBOOK),
        ],
    )
    def test_accepts_csv_and_workbooks(self, filename, content_type, expected) -> None:
        assert detect_file_type(filename, content_type) is expected

    def test_rejects_other_types(self) -> None:
        with pytest.raises(UnsupportedFileTypeError):
            detect_file_type("notes.txt", "text/plain")

    def test_file_errors_are_value_errors(self) -> None:
        assert issubclass(SalesFileError, ValueError)
        assert issubclass(EmptyFileError, SalesFileError)


class TestParseCSVText:
    def test_splits_header_and_rows(self) -> None:
        headers, rows = parse_csv_text("fecha,producto,total\n2024-01-01,Widget,100\n")

        assert headers == ["fecha", "producto", "total"]
        assert rows == [{"fecha": "2024-01-01", "producto": "Widget", "total": "100"}]

    def test_strips_quotes_and_whitespace_and_skips_blank_lines(self) -> None:
        text = '"date", "product"\r\n\n"2024-01-02" , "Gadget"\r\n   \n'

        headers, rows = parse_csv_text(text)

        assert headers == ["date", "product"]
        assert rows == [{"date": "2024-01-02", "product": "Gadget"}]

    def test_short_rows_fill_missing_fields_with_empty_strings(self) -> None:
        _, rows = parse_csv_text("date,product,total\n2024-01-03\n")
        assert rows == [{"date": "2024-01-03", "product": "", "total": ""}]

    def test_header_only_yields_no_rows(self) -> None:
        assert parse_csv_text("date,product\n") == ([], [])


class TestReadSalesFile:
    def test_reads_csv_with_bom(self) -> None:
        content = "\ufeffdate,total\n2024-01-01,10\n2024-01-02,20\n".encode("utf-8")

        parsed = read_sales_file(content, filename="sales.csv")

        assert parsed.file_type is SalesFileType.CSV
        assert parsed.headers == ("date", "total")
        assert parsed.row_count == 2
        assert parsed.rows[1] == {"date": "2024-01-02", "total": "20"}

    def test_reads_first_worksheet(self) -> None:
        content = _workbook_bytes(
            [
                ["Fecha", "Producto", "Total", "Region"],
                [datetime(2024, 1, 5), "Widget", 100.5, None],
                ["2024-01-06", "Gadget", 20, "Sur"],
            ]
        )

        parsed = read_sales_file(content, filename="ventas.xlsx")

        assert parsed.file_type is SalesFileType.WORKBOOK
        assert parsed.headers == ("Fecha", "Producto", "Total", "Region")
        assert parsed.rows[0] == {"Fecha": "2024-01-05", "Producto": "Widget", "Total": 100.5}
        assert parsed.rows[1]["Region"] == "Sur"
        assert parsed.row_count == 2

    def test_unsupported_type_is_rejected_before_reading(self) -> None:
        with pytest.raises(UnsupportedFileTypeError):
            read_sales_file(b"date,total\n2024-01-01,1\n", filename="sales.json", content_type="application/json")

    def test_unreadable_workbook(self) -> None:
        with pytest.raises(FileReadError):
            read_sales_file(b"definitely not a zip", filename="sales.xlsx")

    def test_non_utf8_csv(self) -> None:
        with pytest.raises(FileReadError):
            read_sales_file(b"date,total\n\xff\xfe\xfa,1\n", filename="sales.csv")

    @pytest.mark.parametrize("content", [b"", b"date,total\n", b"\n\n"])
    def test_zero_rows_is_an_empty_file(self, content: bytes) -> None:
        with pytest.raises(EmptyFileError):
            read_sales_file(content, filename="sales.csv")

    def test_workbook_with_only_header_is_empty(self) -> None:
        with pytest.raises(EmptyFileError):
            read_sales_file(_workbook_bytes([["date", "total"]]), filename="sales.xlsx")
