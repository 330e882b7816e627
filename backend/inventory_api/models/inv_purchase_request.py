from datetime import date, datetime
from typing import Optional

from sqlalchemy import Date, DateTime, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from inventory_api.models.base import Base

PR_STATUSES = (
    "pending",
    "approved",
    "rejected",
    "completed",
    "awaiting_payment",
    "awaiting_dispatch",
    "intrasite",
    "partial_payment",
)


class InvPurchaseRequest(Base):
    """Purchase request header; ``pr_number`` comes from the ``PurchaseRequest`` sequence."""

    __tablename__ = "inv_purchase_request"

    pr_number: Mapped[str] = mapped_column(String(32), primary_key=True)
    pr_date: Mapped[date] = mapped_column(Date, nullable=False, index=True)
    pr_vendor: Mapped[str] = mapped_column(String(255), nullable=False)
    status: Mapped[str] = mapped_column(String(32), nullable=False, default="pending", index=True)
    remarks: Mapped[Optional[str]] = mapped_column(Text)
    created_by: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=datetime.now)
    updated_by: Mapped[Optional[str]] = mapped_column(String(64))
    updated_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=datetime.now)
