"""
app/parsing package marker.
"""

from app.parsing.sales_file_reader import (
    EmptyFileError,
    FileReadError,
    ParsedSalesFile,
    SalesFileError,
    SalesFileType,
    UnsupportedFileTypeError,
    detect_file_type,
    parse_csv_text,
    read_sales_file,
)

__all__ = [
    "EmptyFileError",
    "FileReadError",
    "ParsedSalesFile",
    "SalesFileError",
    "SalesFileType",
    "UnsupportedFileTypeError",
    "detect_file_type",
    "parse_csv_text",
    "read_sales_file",
]
