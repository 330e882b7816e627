from datetime import datetime
from typing import Optional

from sqlalchemy import CHAR, DateTime, String, text
from sqlalchemy.orm import Mapped, mapped_column

from inventory_api.models.base import Base


class InvUserMaster(Base):
    __tablename__ = "inv_user_master"

    inv_user_code: Mapped[str] = mapped_column(String(64), primary_key=True)
    inv_user_name: Mapped[str] = mapped_column(String(150), unique=True, nullable=False)
    inv_user_pwd: Mapped[str] = mapped_column(String(255), nullable=False)
    inv_display_name: Mapped[str] = mapped_column(String(255), nullable=False)
    inv_email: Mapped[Optional[str]] = mapped_column(String(255))
    is_super_admin: Mapped[str] = mapped_column(
        CHAR(1), nullable=False, server_default=text("'N'")
    )  # 'Y'/'N'
    created_by: Mapped[str] = mapped_column(String(64), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=datetime.now)
    updated_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=datetime.now)
    last_login_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    active_flag: Mapped[str] = mapped_column(
        CHAR(1), nullable=False, server_default=text("'Y'")
    )  # 'Y'/'N'
