from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, String
from sqlalchemy.orm import Mapped, mapped_column

from inventory_api.models.base import Base


class InvBrandMaster(Base):
    """ORM model for the ``inv_brand_master`` table.

    ``brand_code`` comes from the ``Brand`` sequence (BRD001...) unless the
    caller supplies one explicitly.
    """

    __tablename__ = "inv_brand_master"

    brand_code: Mapped[str] = mapped_column(String(32), primary_key=True)
    brand_name: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    supplier_name: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    created_by: Mapped[str] = mapped_column(String(64), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=datetime.now)
    updated_by: Mapped[Optional[str]] = mapped_column(String(64))
    updated_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=datetime.now)
