"""
PostingDraft -- accumulate debits/credits and close them into a LedgerPosting.

Responsibility:
    Collects the debit and credit lines of one document, rounds them to the
    currency's precision and appends the single balancing rounding entry
    that makes total debits equal total credits exactly.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.  Account existence is
    checked by the caller before a draft is started.

Invariants enforced:
    - Every LedgerPosting returned by ``make_round_off_entry`` is balanced.
    - At most one rounding entry per posting, only this module creates it.
    - A rounding difference larger than one minor unit per primary entry is
      not rounding; it is rejected as unbalanced.

Failure modes:
    - UnbalancedEntryError when the difference exceeds the rounding tolerance.
    - RoundingAccountNotFoundError when a rounding entry is required but no
      round-off account was supplied.
"""

from decimal import Decimal

from ledger_kernel.domain.dtos import LedgerPosting, LineSide, PostingEntry
from ledger_kernel.domain.values import Currency, Money
from ledger_kernel.exceptions import (
    RoundingAccountNotFoundError,
    UnbalancedEntryError,
)
from ledger_kernel.logging_config import get_logger

logger = get_logger("domain.posting")


class PostingDraft:
    """
    Mutable accumulator for the entries of one posting.

    Repeated debits (or credits) to the same account are merged into one
    entry, keeping the position of the first.  The draft is closed with
    ``make_round_off_entry`` which returns the immutable LedgerPosting.
    """

    def __init__(self, reference_type: str, reference_id: str, currency: str | Currency):
        self.reference_type = reference_type
        self.reference_id = reference_id
        self.currency = currency if isinstance(currency, Currency) else Currency(currency)
        self._amounts: dict[tuple[str, LineSide], Money] = {}

    def debit(self, account: str, amount: Money) -> None:
        self._add(account, LineSide.DEBIT, amount)

    def credit(self, account: str, amount: Money) -> None:
        self._add(account, LineSide.CREDIT, amount)

    def _add(self, account: str, side: LineSide, amount: Money) -> None:
        if amount.currency != self.currency:
            raise ValueError(
                f"Cannot post {amount.currency} to a {self.currency} posting"
            )
        if amount.is_negative:
            # A negative debit is a credit.
            side = side.opposite
            amount = -amount
        key = (account, side)
        current = self._amounts.get(key, Money.zero(self.currency))
        self._amounts[key] = current + amount

    def make_round_off_entry(self, round_off_account: str | None) -> LedgerPosting:
        """
        Round every entry and append the balancing rounding entry.

        Postconditions:
            - The returned posting satisfies ``is_balanced()``.
            - ``rounding_entry`` is None when no difference remained.

        Raises:
            UnbalancedEntryError: difference larger than the rounding tolerance.
            RoundingAccountNotFoundError: difference present, no account given.
        """
        entries = tuple(
            PostingEntry(account=account, side=side, money=money.round())
            for (account, side), money in self._amounts.items()
        )
        posting = LedgerPosting(
            reference_type=self.reference_type,
            reference_id=self.reference_id,
            currency=self.currency.code,
            entries=entries,
        )

        imbalance = posting.imbalance()
        if imbalance == Decimal("0"):
            return posting

        tolerance = self.currency.rounding_tolerance * max(len(entries), 1)
        if abs(imbalance) > tolerance:
            logger.warning(
                "posting_unbalanced",
                extra={
                    "reference_type": self.reference_type,
                    "reference_id": self.reference_id,
                    "debits": str(posting.total_debits()),
                    "credits": str(posting.total_credits()),
                },
            )
            raise UnbalancedEntryError(
                debits=str(posting.total_debits()),
                credits=str(posting.total_credits()),
                currency=self.currency.code,
            )

        if not round_off_account:
            raise RoundingAccountNotFoundError(self.currency.code)

        rounding_side = LineSide.CREDIT if imbalance > 0 else LineSide.DEBIT
        rounding_entry = PostingEntry(
            account=round_off_account,
            side=rounding_side,
            money=Money(amount=abs(imbalance), currency=self.currency),
            is_rounding=True,
        )
        logger.info(
            "rounding_entry_added",
            extra={
                "reference_id": self.reference_id,
                "account": round_off_account,
                "side": rounding_side.value,
                "amount": str(abs(imbalance)),
            },
        )
        return LedgerPosting(
            reference_type=self.reference_type,
            reference_id=self.reference_id,
            currency=self.currency.code,
            entries=entries,
            rounding_entry=rounding_entry,
        )
