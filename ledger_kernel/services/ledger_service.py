"""
LedgerService -- write a LedgerPosting to the journal.

Responsibility:
    Converts a balanced ``LedgerPosting`` into one ``JournalEntry`` with its
    ``JournalLine`` rows and marks it POSTED, inside the caller's
    transaction.

Architecture position:
    Kernel > Services -- imperative shell.  Flushes, never commits.

Invariants enforced:
    - Only balanced postings are written (UnbalancedEntryError otherwise).
    - Idempotency: a second post of the same document returns the
      existing entry instead of writing a duplicate.

Failure modes:
    - UnbalancedEntryError for an unbalanced posting.
    - SQLAlchemy errors propagate unchanged.
"""

from datetime import date
from uuid import UUID

from sqlalchemy import select

from ledger_kernel.domain.clock import Clock, SystemClock
from ledger_kernel.domain.dtos import LedgerPosting
from ledger_kernel.exceptions import UnbalancedEntryError
from ledger_kernel.logging_config import get_logger
from ledger_kernel.models.journal import (
    JournalEntry,
    JournalEntryStatus,
    JournalLine,
)
from ledger_kernel.services.base import BaseService

logger = get_logger("services.ledger")


class LedgerService(BaseService):
    """Persists postings as journal entries."""

    def __init__(self, session, clock: Clock | None = None):
        super().__init__(session)
        self._clock = clock or SystemClock()

    def post(
        self,
        posting: LedgerPosting,
        actor_id: UUID,
        effective_date: date,
        description: str | None = None,
    ) -> JournalEntry:
        """
        Write ``posting`` as a POSTED journal entry.

        Preconditions:
            - ``posting.is_balanced()``.

        Postconditions:
            - Exactly one JournalEntry exists for ``posting.idempotency_key``.
            - Lines are stored in posting order, rounding entry last.
        """
        if not posting.is_balanced():
            raise UnbalancedEntryError(
                debits=str(posting.total_debits()),
                credits=str(posting.total_credits()),
                currency=posting.currency,
            )

        existing = self.session.execute(
            select(JournalEntry)
            .where(JournalEntry.idempotency_key == posting.idempotency_key)
            .with_for_update()
        ).scalar_one_or_none()
        if existing is not None:
            logger.info(
                "journal_entry_already_posted",
                extra={
                    "idempotency_key": posting.idempotency_key,
                    "journal_entry_id": str(existing.id),
                },
            )
            return existing

        entry = JournalEntry(
            reference_type=posting.reference_type,
            reference_id=posting.reference_id,
            idempotency_key=posting.idempotency_key,
            effective_date=effective_date,
            currency=posting.currency,
            status=JournalEntryStatus.DRAFT.value,
            description=description,
            created_by_id=actor_id,
        )
        self.session.add(entry)

        for seq, entry_line in enumerate(posting.all_entries):
            entry.lines.append(
                JournalLine(
                    account_code=entry_line.account,
                    side=entry_line.side.value,
                    amount=entry_line.amount,
                    currency=entry_line.currency,
                    is_rounding=entry_line.is_rounding,
                    line_seq=seq,
                    created_by_id=actor_id,
                )
            )

        entry.status = JournalEntryStatus.POSTED.value
        entry.posted_at = self._clock.now()
        self.session.flush()

        logger.info(
            "journal_entry_posted",
            extra={
                "journal_entry_id": str(entry.id),
                "idempotency_key": posting.idempotency_key,
                "line_count": len(entry.lines),
                "total_debits": str(posting.total_debits()),
                "currency": posting.currency,
            },
        )
        return entry
