"""
DTOs -- Pure domain data transfer objects for ledger postings.

Responsibility:
    Defines the immutable structures that describe a posting before it is
    written to the journal: ``PostingEntry`` (one debit or credit line) and
    ``LedgerPosting`` (the ordered entries of one document plus an optional
    rounding entry).

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.
    Free of ORM dependencies; ``LedgerService`` converts a LedgerPosting into
    ``JournalEntry`` / ``JournalLine`` rows.

Invariants enforced:
    - Entry amounts are non-negative; the side carries the direction.
    - All entries of a posting share the posting's currency.
    - At most one rounding entry per posting.

Failure modes:
    - ValueError on a negative entry amount or a currency mismatch.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum

from ledger_kernel.domain.values import Money


class LineSide(str, Enum):
    """
    Which side of the posting this entry is on.

    Exactly two values exist in double-entry bookkeeping.
    """

    DEBIT = "debit"
    CREDIT = "credit"

    @property
    def opposite(self) -> LineSide:
        return LineSide.CREDIT if self is LineSide.DEBIT else LineSide.DEBIT


@dataclass(frozen=True)
class PostingEntry:
    """
    A single ledger line: ``{account, amount, side}``.

    Contract:
        ``account`` is an account code from the chart of accounts.  The
        amount is a non-negative Money; ``is_rounding`` marks the balancing
        entry produced by ``PostingDraft.make_round_off_entry``.
    """

    account: str
    side: LineSide
    money: Money
    is_rounding: bool = False

    def __post_init__(self) -> None:
        if self.money.amount < Decimal("0"):
            raise ValueError("Posting entry amount must be non-negative")

    @property
    def amount(self) -> Decimal:
        return self.money.amount

    @property
    def currency(self) -> str:
        return self.money.currency.code


@dataclass(frozen=True)
class LedgerPosting:
    """
    The balanced financial effect of one document.

    Contract:
        ``entries`` holds the primary debit/credit lines in the order they
        were added.  ``rounding_entry`` is present only when rounding the
        primary lines left a sub-unit difference.

    Guarantees:
        - Immutable (frozen dataclass)
        - ``is_balanced()`` reports whether total debits equal total credits
          including the rounding entry.

    Non-goals:
        - Does NOT persist -- LedgerService handles persistence.
    """

    reference_type: str
    reference_id: str
    currency: str
    entries: tuple[PostingEntry, ...]
    rounding_entry: PostingEntry | None = None

    def __post_init__(self) -> None:
        for entry in self.all_entries:
            if entry.currency != self.currency:
                raise ValueError(
                    f"Entry for {entry.account} is in {entry.currency}, "
                    f"posting is in {self.currency}"
                )

    @property
    def idempotency_key(self) -> str:
        return f"{self.reference_type}:{self.reference_id}"

    @property
    def all_entries(self) -> tuple[PostingEntry, ...]:
        """Primary entries followed by the rounding entry, if any."""
        if self.rounding_entry is None:
            return self.entries
        return self.entries + (self.rounding_entry,)

    def total_debits(self) -> Decimal:
        return sum(
            (e.amount for e in self.all_entries if e.side == LineSide.DEBIT),
            Decimal("0"),
        )

    def total_credits(self) -> Decimal:
        return sum(
            (e.amount for e in self.all_entries if e.side == LineSide.CREDIT),
            Decimal("0"),
        )

    def is_balanced(self) -> bool:
        return self.total_debits() == self.total_credits()

    def imbalance(self) -> Decimal:
        """Debits minus credits."""
        return self.total_debits() - self.total_credits()

    def entries_for(self, account: str) -> tuple[PostingEntry, ...]:
        return tuple(e for e in self.all_entries if e.account == account)
