"""
Back-reference reconciliation (``ledger_modules.stock_transfer.reconciler``).

Responsibility
--------------
Keeps an invoice's per-line "stock not transferred" counters in step with
the transfers made against it.  Submitting a transfer decrements the
counters; cancelling it restores them.  The invoice aggregate is
recomputed from the lines afterwards.

Architecture
------------
Layer: **Modules** -- orchestration over the pure ``reconcile_lines`` fold.
Invoice I/O goes through an injected ``InvoiceStore``; the reconciler never
opens or commits a transaction.

Failure Modes
-------------
- ``DocumentNotFoundError`` from the store when the invoice is missing.
- ``OptimisticLockError`` from the store when the invoice changed since it
  was loaded.
- Lines that cannot be reconciled are skipped and logged, not raised.
"""

from __future__ import annotations

from typing import Protocol

from ledger_kernel.logging_config import get_logger
from ledger_modules.stock_transfer.helpers import build_transfer_map, reconcile_lines
from ledger_modules.stock_transfer.models import (
    DocumentStatus,
    Invoice,
    InvoiceType,
    StockTransfer,
)

logger = get_logger("modules.stock_transfer.reconciler")

_RECONCILED_STATUSES = (DocumentStatus.SUBMITTED, DocumentStatus.CANCELLED)


class InvoiceStore(Protocol):
    """Load and save invoices for reconciliation."""

    def load_invoice(self, invoice_type: InvoiceType, name: str) -> Invoice: ...

    def save_invoice(self, invoice: Invoice) -> None: ...


def is_reconcilable(transfer: StockTransfer) -> bool:
    """Submitted or cancelled, and made against an invoice."""
    return transfer.status in _RECONCILED_STATUSES and bool(transfer.back_reference)


class BackReferenceReconciler:
    """Applies a transfer's quantities to the invoice it references."""

    def __init__(self, store: InvoiceStore):
        self._store = store

    def reconcile(self, transfer: StockTransfer, invoice: Invoice) -> Invoice:
        """
        Return ``invoice`` with counters updated for ``transfer``.

        A draft transfer, or one without a back reference, leaves the
        invoice unchanged.
        """
        if not is_reconcilable(transfer):
            return invoice

        result = reconcile_lines(
            build_transfer_map(transfer),
            invoice.items,
            cancelling=transfer.is_cancelled,
        )
        for line_id in result.skipped_line_ids:
            logger.warning(
                "reconciliation_line_skipped",
                extra={
                    "transfer_id": str(transfer.id),
                    "invoice": invoice.name,
                    "line_id": str(line_id),
                },
            )
        return invoice.with_lines(result.lines)

    def update_back_reference(self, transfer: StockTransfer) -> Invoice | None:
        """
        Load the referenced invoice, reconcile it and save it back.

        Returns the saved invoice, or None when there was nothing to do.
        """
        if not is_reconcilable(transfer):
            logger.debug(
                "reconciliation_not_applicable",
                extra={
                    "transfer_id": str(transfer.id),
                    "status": transfer.status.value,
                },
            )
            return None

        invoice_type = transfer.direction.rule.invoice_type
        invoice = self._store.load_invoice(invoice_type, transfer.back_reference)
        updated = self.reconcile(transfer, invoice)
        self._store.save_invoice(updated)

        logger.info(
            "back_reference_reconciled",
            extra={
                "transfer_id": str(transfer.id),
                "invoice_type": invoice_type.value,
                "invoice": invoice.name,
                "cancelling": transfer.is_cancelled,
                "stock_not_transferred_before": str(invoice.stock_not_transferred),
                "stock_not_transferred_after": str(updated.stock_not_transferred),
            },
        )
        return updated
