"""
Module: ledger_kernel.models.journal
Responsibility: ORM persistence for committed postings -- JournalEntry
    (header, one per posted document) and JournalLine (debit/credit lines).
Architecture position: Kernel > Models.  May import from db/base.py only.

Invariants enforced:
    - idempotency_key is unique: a document is posted at most once.
    - line amounts are non-negative; ``side`` carries the direction.

Failure modes:
    - IntegrityError on a duplicate idempotency_key.

Audit relevance:
    JournalEntry.reference_type / reference_id link every posted line back
    to the stock transfer that produced it.
"""

from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from uuid import UUID

from sqlalchemy import (
    Boolean,
    Date,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ledger_kernel.db.base import TrackedBase, UUIDString


class JournalEntryStatus(str, Enum):
    """Lifecycle status of a journal entry."""

    DRAFT = "draft"
    POSTED = "posted"


class JournalEntry(TrackedBase):
    """
    Journal entry header -- the committed form of one LedgerPosting.

    Non-goals:
        - Does NOT enforce balance at the ORM level; LedgerService only
          writes postings that are already balanced.
    """

    __tablename__ = "journal_entries"

    __table_args__ = (
        UniqueConstraint("idempotency_key", name="uq_journal_idempotency"),
        Index("idx_journal_reference", "reference_type", "reference_id"),
        Index("idx_journal_effective_date", "effective_date"),
    )

    reference_type: Mapped[str] = mapped_column(String(50), nullable=False)

    reference_id: Mapped[str] = mapped_column(String(100), nullable=False)

    idempotency_key: Mapped[str] = mapped_column(String(200), nullable=False)

    effective_date: Mapped[date] = mapped_column(Date, nullable=False)

    posted_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True,
    )

    currency: Mapped[str] = mapped_column(String(3), nullable=False)

    status: Mapped[JournalEntryStatus] = mapped_column(
        String(20), default=JournalEntryStatus.DRAFT, nullable=False,
    )

    description: Mapped[str | None] = mapped_column(String(500), nullable=True)

    lines: Mapped[list["JournalLine"]] = relationship(
        back_populates="entry",
        order_by="JournalLine.line_seq",
        cascade="all, delete-orphan",
    )

    @property
    def total_debits(self) -> Decimal:
        return sum(
            (line.amount for line in self.lines if line.side == "debit"),
            Decimal("0"),
        )

    @property
    def total_credits(self) -> Decimal:
        return sum(
            (line.amount for line in self.lines if line.side == "credit"),
            Decimal("0"),
        )

    @property
    def is_balanced(self) -> bool:
        return self.total_debits == self.total_credits

    def __repr__(self) -> str:
        return f"<JournalEntry {self.idempotency_key} status={self.status}>"


class JournalLine(TrackedBase):
    """Individual debit or credit line within a journal entry."""

    __tablename__ = "journal_lines"

    __table_args__ = (
        Index("idx_line_entry", "journal_entry_id"),
        Index("idx_line_account", "account_code"),
    )

    journal_entry_id: Mapped[UUID] = mapped_column(
        UUIDString(),
        ForeignKey("journal_entries.id"),
        nullable=False,
    )

    account_code: Mapped[str] = mapped_column(String(50), nullable=False)

    side: Mapped[str] = mapped_column(String(10), nullable=False)

    amount: Mapped[Decimal] = mapped_column(nullable=False)

    currency: Mapped[str] = mapped_column(String(3), nullable=False)

    is_rounding: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    line_seq: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    entry: Mapped["JournalEntry"] = relationship(back_populates="lines")

    def __repr__(self) -> str:
        return f"<JournalLine {self.side} {self.account_code} {self.amount} {self.currency}>"
