"""
db/models/upload.py

Audit trail of upload batches. Written once per ingestion, never read back
by the analytics flow.
"""

from __future__ import annotations

import uuid

from sqlalchemy import Index, Integer, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from db.base import Base, CreatedAtMixin


class UploadStatus:
    """Valid upload statuses."""

    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    ERROR = "error"


class Upload(Base, CreatedAtMixin):
    __tablename__ = "uploads"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )
    filename: Mapped[str] = mapped_column(Text, nullable=False)
    file_path: Mapped[str] = mapped_column(Text, nullable=False)
    rows_processed: Mapped[int | None] = mapped_column(Integer, nullable=True)
    status: Mapped[str] = mapped_column(
        String(32),
        nullable=False,
        default=UploadStatus.PENDING,
        comment="pending, processing, completed, error",
    )
    uploaded_by: Mapped[str] = mapped_column(String(64), nullable=False)

    __table_args__ = (
        Index("ix_uploads_uploaded_by", "uploaded_by"),
        Index("ix_uploads_status", "status"),
    )
