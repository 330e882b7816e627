"""Shared declarative base for all ORM models.

Every table hangs off ``Base.metadata`` so ``create_all`` (tests, the local
SQLite bootstrap) and the sequence sync script see the same schema.
"""

from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy ORM models."""

    pass
