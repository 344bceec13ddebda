"""
app/repositories package marker.
"""

from app.repositories.sales_repository import SalesRepository, SalesStore, SalesStoreError

__all__ = [
    "SalesRepository",
    "SalesStore",
    "SalesStoreError",
]
