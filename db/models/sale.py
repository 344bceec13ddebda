"""
db/models/sale.py

Canonical sale record, one row per ingested spreadsheet/CSV line.
"""

from __future__ import annotations

import uuid
from decimal import Decimal

from sqlalchemy import BigInteger, Index, Numeric, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from db.base import Base, CreatedAtMixin


class Sale(Base, CreatedAtMixin):
    """
    One sales transaction as normalized at upload time.

    Rows are never updated after insert. ``date`` is kept as the string the
    source file supplied (canonically ``YYYY-MM-DD``) and is not validated.
    Free-text and amount columns are unbounded: any value the normalizer
    accepts must be storable.
    """

    __tablename__ = "sales"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )
    date: Mapped[str | None] = mapped_column(
        Text,
        nullable=True,
        comment="Transaction date as supplied by the source file",
    )
    product_name: Mapped[str] = mapped_column(Text, nullable=False)
    category: Mapped[str | None] = mapped_column(Text, nullable=True)
    quantity: Mapped[int] = mapped_column(BigInteger, nullable=False, default=1)
    unit_price: Mapped[Decimal] = mapped_column(Numeric, nullable=False, default=0)
    total_amount: Mapped[Decimal] = mapped_column(
        Numeric,
        nullable=False,
        default=0,
        comment="Supplied by the source file, never derived from quantity x unit_price",
    )
    region: Mapped[str | None] = mapped_column(Text, nullable=True)
    salesperson: Mapped[str | None] = mapped_column(Text, nullable=True)
    uploaded_by: Mapped[str] = mapped_column(
        String(64),
        nullable=False,
        comment="Auth provider user id of the uploader",
    )

    __table_args__ = (
        Index("ix_sales_date", "date"),
        Index("ix_sales_category", "category"),
        Index("ix_sales_created_at", "created_at"),
        Index("ix_sales_uploaded_by", "uploaded_by"),
    )

    def __repr__(self) -> str:
        return (
            f"<Sale id={self.id} date={self.date!r} "
            f"product_name={self.product_name!r} total_amount={self.total_amount}>"
        )
