"""
Stock Transfer Module (``ledger_modules.stock_transfer``).

Responsibility
--------------
Shipments (outbound) and purchase receipts (inbound): the double-entry
posting of their value, and the "stock not transferred" bookkeeping on the
sales or purchase invoice a transfer was made against.

Architecture
------------
Layer: **Modules** -- domain models, pure helpers, a workflow and a thin
orchestration service.  Imports from ``ledger_kernel`` and
``ledger_config`` but never the reverse.

Invariants
----------
- Every submitted transfer has exactly one balanced journal entry.
- Invoice line counters stay within ``[0, quantity]``.
- Each service method owns its transaction boundary (commit / rollback).
"""

from ledger_modules.stock_transfer.accounts import AccountValidator
from ledger_modules.stock_transfer.helpers import (
    build_transfer_map,
    get_transfer_details,
    reconcile_lines,
)
from ledger_modules.stock_transfer.models import (
    DirectionRule,
    DocumentStatus,
    Invoice,
    InvoiceLine,
    InvoiceType,
    StockTransfer,
    StockTransferItem,
    TransferDetail,
    TransferDirection,
)
from ledger_modules.stock_transfer.posting import LedgerPostingBuilder
from ledger_modules.stock_transfer.reconciler import BackReferenceReconciler
from ledger_modules.stock_transfer.service import StockTransferService
from ledger_modules.stock_transfer.workflows import TRANSFER_WORKFLOW

__all__ = [
    "AccountValidator",
    "BackReferenceReconciler",
    "DirectionRule",
    "DocumentStatus",
    "Invoice",
    "InvoiceLine",
    "InvoiceType",
    "LedgerPostingBuilder",
    "StockTransfer",
    "StockTransferItem",
    "StockTransferService",
    "TRANSFER_WORKFLOW",
    "TransferDetail",
    "TransferDirection",
    "build_transfer_map",
    "get_transfer_details",
    "reconcile_lines",
]
