from datetime import datetime
from decimal import Decimal
from typing import Optional

from sqlalchemy import DateTime, Integer, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from inventory_api.models.base import Base


class InvProductMaster(Base):
    """ORM model for the ``inv_product_master`` table (``prod_id`` from the ``Product`` sequence)."""

    __tablename__ = "inv_product_master"

    prod_id: Mapped[str] = mapped_column(String(32), primary_key=True)
    product_code: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    description: Mapped[str] = mapped_column(String(500), nullable=False)
    brand: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    product_type: Mapped[str] = mapped_column(String(16), nullable=False)  # Rough | Trim
    color: Mapped[str] = mapped_column(String(100), nullable=False)
    series: Mapped[Optional[str]] = mapped_column(String(100), index=True)
    category: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    sub_category: Mapped[str] = mapped_column(String(100), nullable=False)
    mrp: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    gst: Mapped[Decimal] = mapped_column(Numeric(5, 2), nullable=False, default=Decimal("0"))
    opening_stock: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    fresh_stock: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    damage_stock: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    notes: Mapped[Optional[str]] = mapped_column(Text)
    created_by: Mapped[str] = mapped_column(String(64), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=datetime.now)
    updated_by: Mapped[Optional[str]] = mapped_column(String(64))
    updated_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=datetime.now)
