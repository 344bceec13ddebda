"""
Model package exports.

Import all SQLAlchemy models here so metadata registration and Alembic
autogeneration work without extra imports.
"""

from db.models.sale import Sale
from db.models.upload import Upload, UploadStatus

__all__ = [
    "Sale",
    "Upload",
    "UploadStatus",
]
