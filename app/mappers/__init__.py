"""
app/mappers package marker.
"""

from app.mappers.sales_normalizer import (
    CANONICAL_FIELDS,
    FIELD_ALIASES,
    SalesNormalizer,
    parse_number,
)

__all__ = [
    "CANONICAL_FIELDS",
    "FIELD_ALIASES",
    "SalesNormalizer",
    "parse_number",
]
