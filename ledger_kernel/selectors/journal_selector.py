"""
Module: ledger_kernel.selectors.journal_selector
Responsibility: Read access to committed journal entries, returned as frozen
    records.  Backs the "view ledger entries" action of a posted document.
"""

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from uuid import UUID

from sqlalchemy import case, func, select
from sqlalchemy.orm import selectinload

from ledger_kernel.models.journal import JournalEntry, JournalLine
from ledger_kernel.selectors.base import BaseSelector


@dataclass(frozen=True)
class JournalLineRecord:
    account_code: str
    side: str
    amount: Decimal
    currency: str
    is_rounding: bool


@dataclass(frozen=True)
class JournalEntryRecord:
    """Read-side snapshot of a JournalEntry and its lines."""

    id: UUID
    reference_type: str
    reference_id: str
    effective_date: date
    status: str
    lines: tuple[JournalLineRecord, ...]

    @property
    def total_debits(self) -> Decimal:
        return sum((l.amount for l in self.lines if l.side == "debit"), Decimal("0"))

    @property
    def total_credits(self) -> Decimal:
        return sum((l.amount for l in self.lines if l.side == "credit"), Decimal("0"))


class JournalSelector(BaseSelector):
    """Queries over ``journal_entries`` / ``journal_lines``."""

    def entries_for_reference(
        self,
        reference_type: str,
        reference_id: str,
    ) -> list[JournalEntryRecord]:
        rows = self.session.execute(
            select(JournalEntry)
            .where(
                JournalEntry.reference_type == reference_type,
                JournalEntry.reference_id == reference_id,
            )
            .options(selectinload(JournalEntry.lines))
            .order_by(JournalEntry.created_at)
        ).scalars().all()
        return [self._to_record(row) for row in rows]

    def account_balance(self, account_code: str) -> Decimal:
        """Debits minus credits posted to an account."""
        signed = case(
            (JournalLine.side == "debit", JournalLine.amount),
            else_=-JournalLine.amount,
        )
        value = self.session.execute(
            select(func.coalesce(func.sum(signed), 0)).where(
                JournalLine.account_code == account_code
            )
        ).scalar_one()
        return Decimal(str(value))

    @staticmethod
    def _to_record(entry: JournalEntry) -> JournalEntryRecord:
        return JournalEntryRecord(
            id=entry.id,
            reference_type=entry.reference_type,
            reference_id=entry.reference_id,
            effective_date=entry.effective_date,
            status=entry.status,
            lines=tuple(
                JournalLineRecord(
                    account_code=line.account_code,
                    side=line.side,
                    amount=line.amount,
                    currency=line.currency,
                    is_rounding=line.is_rounding,
                )
                for line in entry.lines
            ),
        )
