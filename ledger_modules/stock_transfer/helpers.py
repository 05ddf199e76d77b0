"""
Stock Transfer Pure Functions (``ledger_modules.stock_transfer.helpers``).

Responsibility
--------------
Stateless calculations behind a stock transfer: deriving per-line stock
movements, aggregating transferred quantities per item, and folding those
quantities into the "stock not transferred" counters of the originating
invoice's lines.

Architecture
------------
Layer: **Modules** -- pure helper functions.  No I/O, no session, no clock,
no database access.  Called from the reconciler, the service, and tests.

Invariants
----------
- ``build_transfer_map`` values are non-negative whenever the input
  quantities are.
- ``reconcile_lines`` never produces a counter below zero; when cancelling
  it never produces a counter above the line quantity.
- Quantities are ``Decimal``; ``None`` counters are read as zero.

Failure Modes
-------------
None raised.  Lines that cannot be reconciled (malformed counters or
quantities) are returned unchanged and listed in ``skipped_line_ids`` so
that the caller can report them.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from decimal import Decimal
from typing import Mapping, Sequence
from uuid import UUID

from ledger_modules.stock_transfer.models import (
    InvoiceLine,
    StockTransfer,
    TransferDetail,
    is_quantity,
)

ZERO = Decimal("0")


def get_transfer_details(transfer: StockTransfer) -> list[TransferDetail]:
    """
    One movement record per transfer line, in line order.

    Outbound lines populate ``from_location``; inbound lines populate
    ``to_location``.  The other location is always None.
    """
    location_field = transfer.direction.rule.location_field
    return [
        TransferDetail(
            item=row.item,
            rate=row.rate,
            quantity=row.quantity,
            **{location_field: row.location},
        )
        for row in transfer.items
    ]


def build_transfer_map(transfer: StockTransfer) -> dict[str, Decimal]:
    """
    Total transferred quantity per item.

    Lines without an item, or without a numeric quantity, are ignored.  A
    zero quantity still creates an entry.
    """
    totals: dict[str, Decimal] = {}
    for row in transfer.items:
        if not row.item or not is_quantity(row.quantity):
            continue
        totals[row.item] = totals.get(row.item, ZERO) + Decimal(row.quantity)
    return totals


@dataclass(frozen=True)
class ReconciliationResult:
    """Output of ``reconcile_lines``."""
    lines: tuple[InvoiceLine, ...]
    transfer_map: dict[str, Decimal]
    skipped_line_ids: tuple[UUID, ...] = ()


def reconcile_lines(
    transfer_map: Mapping[str, Decimal],
    lines: Sequence[InvoiceLine],
    cancelling: bool,
) -> ReconciliationResult:
    """
    Fold transferred quantities into invoice line counters, first come first
    served.

    Each line draws on the residual quantity left by the lines before it, so
    when an item appears on several invoice lines the earlier lines are
    satisfied first.

    On submit (``cancelling=False``), with ``t`` the residual, ``n`` the
    counter and ``q`` the line quantity::

        n' = max(n - t, 0)          residual' = max(t - n, 0)

    On cancel::

        n' = min(n + t, q)          residual' = max(t + n - q, 0)

    Preconditions:
        - ``transfer_map`` values are non-negative.

    Postconditions:
        - Lines whose item is not in the map come back unchanged.
        - Lines with a non-numeric counter, or (when cancelling) a
          non-numeric quantity, come back unchanged and are listed in
          ``skipped_line_ids``.
        - The input map is not modified; the residual map is returned.
    """
    residual = dict(transfer_map)
    updated: list[InvoiceLine] = []
    skipped: list[UUID] = []

    for line in lines:
        if line.item is None or line.item not in residual:
            updated.append(line)
            continue

        transferred = residual[line.item]
        not_transferred = (
            ZERO if line.stock_not_transferred is None
            else line.stock_not_transferred
        )
        malformed = not is_quantity(transferred) or not is_quantity(not_transferred)
        if cancelling and not is_quantity(line.quantity):
            malformed = True
        if malformed:
            skipped.append(line.id)
            updated.append(line)
            continue

        if cancelling:
            new_value = min(not_transferred + transferred, Decimal(line.quantity))
            residual[line.item] = max(transferred + not_transferred - line.quantity, ZERO)
        else:
            new_value = max(not_transferred - transferred, ZERO)
            residual[line.item] = max(transferred - not_transferred, ZERO)

        updated.append(replace(line, stock_not_transferred=new_value))

    return ReconciliationResult(
        lines=tuple(updated),
        transfer_map=residual,
        skipped_line_ids=tuple(skipped),
    )
