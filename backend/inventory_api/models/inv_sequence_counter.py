"""Sequence counters keyed by entity kind (e.g. Brand -> BRD001, BRD002...)."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import BigInteger, DateTime, Integer, String, text
from sqlalchemy.orm import Mapped, mapped_column

from inventory_api.models.base import Base


class InvSequenceCounter(Base):
    """Stores the last issued value per entity kind.

    ``last_value`` only ever moves forward through a single atomic UPDATE;
    ``prefix`` and ``padding_width`` record the format in force when the row
    was created.
    """

    __tablename__ = "inv_sequence_counter"

    entity_kind: Mapped[str] = mapped_column(String(64), primary_key=True)
    last_value: Mapped[int] = mapped_column(BigInteger, nullable=False, server_default=text("0"))
    prefix: Mapped[str] = mapped_column(String(16), nullable=False)
    padding_width: Mapped[int] = mapped_column(Integer, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=datetime.now
    )
