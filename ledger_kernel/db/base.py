"""
Module: ledger_kernel.db.base
Responsibility: Declarative base for every ORM model in the ledger, its
    column-type conventions, and the TrackedBase mixin that records who
    created and last changed a row.
Architecture position: Kernel > DB.  Imports nothing from the rest of the
    project; every model module imports from here.

Invariants enforced:
    - Primary keys are uuid4 values, stored as 36-character strings so the
      same schema runs on PostgreSQL and SQLite.
    - Mapped[Decimal] columns are Numeric(38, 9); amounts and quantities are
      never floats.
    - Every tracked row has a creator (created_by_id is NOT NULL).
"""

from datetime import datetime
from decimal import Decimal
from typing import ClassVar
from uuid import UUID, uuid4

from sqlalchemy import BigInteger, DateTime, Numeric, String, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from sqlalchemy.types import TypeDecorator


class UUIDString(TypeDecorator):
    """UUID in Python, String(36) in the database."""

    impl = String(36)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        return None if value is None else str(value)

    def process_result_value(self, value, dialect):
        return None if value is None else UUID(value)


class Base(DeclarativeBase):
    type_annotation_map: ClassVar[dict] = {
        Decimal: Numeric(38, 9),
        datetime: DateTime(timezone=True),
        UUID: UUIDString(),
        int: BigInteger,
    }

    id: Mapped[UUID] = mapped_column(UUIDString(), primary_key=True, default=uuid4)


class TrackedBase(Base):
    """
    Abstract base for documents and ledger rows.

    ``created_at`` / ``updated_at`` are maintained by the database;
    ``created_by_id`` / ``updated_by_id`` are the acting user's id, set by
    the service that writes the row.
    """

    __abstract__ = True

    created_at: Mapped[datetime] = mapped_column(server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(
        server_default=func.now(), onupdate=func.now(),
    )
    created_by_id: Mapped[UUID] = mapped_column(UUIDString())
    updated_by_id: Mapped[UUID | None] = mapped_column(UUIDString())
