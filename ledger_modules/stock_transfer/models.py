"""
Stock Transfer Domain Models (``ledger_modules.stock_transfer.models``).

Responsibility
--------------
Frozen value objects for the documents a stock transfer touches: the
transfer itself (shipment or purchase receipt) with its lines, the
direction-aware movement records derived from it, and the originating
invoice whose per-line "stock not transferred" counters it reconciles.

Architecture
------------
Layer: **Modules** -- pure domain data structures.  All dataclasses are
``frozen=True``; lifecycle changes produce new instances
(``with_status``, ``with_lines``, ``duplicate``).  These models carry NO
database identity beyond their ids and NO I/O.

Invariants
----------
- ``StockTransferItem`` rejects negative ``quantity`` and ``rate``.
- ``StockTransfer.grand_total`` is derived from the lines on every access,
  so it always equals the sum of ``rate * quantity``.
- ``Invoice.stock_not_transferred`` is the sum of its lines' counters
  whenever the invoice is produced by ``with_lines``.
- Quantities and amounts are ``Decimal`` -- never ``float``.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import date
from decimal import Decimal
from enum import Enum
from uuid import UUID, uuid4

from ledger_kernel.logging_config import get_logger

logger = get_logger("modules.stock_transfer.models")


def is_quantity(value: object) -> bool:
    """True for a finite Decimal or int (bool excluded)."""
    if isinstance(value, bool):
        return False
    if isinstance(value, int):
        return True
    return isinstance(value, Decimal) and value.is_finite()


class DocumentStatus(str, Enum):
    """Transfer lifecycle states."""
    DRAFT = "draft"
    SUBMITTED = "submitted"
    CANCELLED = "cancelled"


class InvoiceType(str, Enum):
    """Invoice schemas a transfer can point back to."""
    SALES_INVOICE = "SalesInvoice"
    PURCHASE_INVOICE = "PurchaseInvoice"


@dataclass(frozen=True)
class DirectionRule:
    """
    Everything that differs between a shipment and a purchase receipt.

    ``debit_setting`` / ``credit_setting`` name inventory settings, not
    account codes; the codes are resolved from the settings provider.
    """
    schema_name: str
    debit_setting: str
    credit_setting: str
    invoice_type: InvoiceType
    location_field: str  # "from_location" or "to_location"
    terms_setting: str

    @property
    def required_settings(self) -> tuple[str, ...]:
        """``stock_in_hand`` first, then the direction-specific account."""
        others = tuple(
            s for s in (self.debit_setting, self.credit_setting)
            if s != "stock_in_hand"
        )
        return ("stock_in_hand",) + others


class TransferDirection(str, Enum):
    """
    Direction of a stock transfer.

    ``OUTBOUND`` is a shipment against a sale, ``INBOUND`` a receipt against
    a purchase.  ``rule`` carries the direction-specific data.
    """
    OUTBOUND = "outbound"
    INBOUND = "inbound"

    @property
    def rule(self) -> DirectionRule:
        return _DIRECTION_RULES[self]


_DIRECTION_RULES: dict[TransferDirection, DirectionRule] = {
    TransferDirection.OUTBOUND: DirectionRule(
        schema_name="Shipment",
        debit_setting="cost_of_goods_sold",
        credit_setting="stock_in_hand",
        invoice_type=InvoiceType.SALES_INVOICE,
        location_field="from_location",
        terms_setting="shipment_terms",
    ),
    TransferDirection.INBOUND: DirectionRule(
        schema_name="PurchaseReceipt",
        debit_setting="stock_in_hand",
        credit_setting="stock_received_but_not_billed",
        invoice_type=InvoiceType.PURCHASE_INVOICE,
        location_field="to_location",
        terms_setting="purchase_receipt_terms",
    ),
}


@dataclass(frozen=True)
class StockTransferItem:
    """
    One line of a stock transfer.

    Contract: Immutable.  ``item``, ``quantity`` and ``rate`` may be unset
    while the transfer is a draft; ``amount`` is None until both
    ``quantity`` and ``rate`` are known.
    """
    item: str | None
    quantity: Decimal | None
    rate: Decimal | None = None
    location: str | None = None
    id: UUID = field(default_factory=uuid4)

    def __post_init__(self):
        for name in ("quantity", "rate"):
            value = getattr(self, name)
            if is_quantity(value) and value < 0:
                raise ValueError(f"{name} cannot be negative (got {value})")

    @property
    def amount(self) -> Decimal | None:
        if not is_quantity(self.quantity) or not is_quantity(self.rate):
            return None
        return Decimal(self.rate) * Decimal(self.quantity)


@dataclass(frozen=True)
class StockTransfer:
    """
    A shipment (outbound) or purchase receipt (inbound).

    Contract: Immutable.  ``back_reference`` is the name of the invoice the
    transfer was made against; a duplicate never inherits it.
    """
    id: UUID
    direction: TransferDirection
    items: tuple[StockTransferItem, ...] = ()
    status: DocumentStatus = DocumentStatus.DRAFT
    back_reference: str | None = None
    transfer_date: date | None = None
    party: str | None = None
    terms: str = ""
    currency: str = "USD"

    @property
    def grand_total(self) -> Decimal | None:
        """Sum of line amounts, or None while any line lacks rate or quantity."""
        total = Decimal("0")
        for row in self.items:
            amount = row.amount
            if amount is None:
                return None
            total += amount
        return total

    @property
    def is_submitted(self) -> bool:
        return self.status == DocumentStatus.SUBMITTED

    @property
    def is_cancelled(self) -> bool:
        return self.status == DocumentStatus.CANCELLED

    def with_status(self, status: DocumentStatus) -> StockTransfer:
        return replace(self, status=status)

    def with_items(self, items: tuple[StockTransferItem, ...]) -> StockTransfer:
        return replace(self, items=tuple(items))

    def duplicate(self) -> StockTransfer:
        """New draft with the same lines, not linked to any invoice."""
        copy = replace(
            self,
            id=uuid4(),
            status=DocumentStatus.DRAFT,
            back_reference=None,
            items=tuple(replace(row, id=uuid4()) for row in self.items),
        )
        logger.debug(
            "stock_transfer_duplicated",
            extra={"source_id": str(self.id), "duplicate_id": str(copy.id)},
        )
        return copy


@dataclass(frozen=True)
class TransferDetail:
    """
    A single stock movement derived from a transfer line.

    Exactly one of ``from_location`` / ``to_location`` is populated.
    """
    item: str | None
    rate: Decimal | None
    quantity: Decimal | None
    from_location: str | None = None
    to_location: str | None = None


@dataclass(frozen=True)
class InvoiceLine:
    """
    An invoice line as seen by reconciliation.

    ``stock_not_transferred`` is the quantity still owed in physical stock
    movement; None is read as zero.
    """
    id: UUID
    item: str | None
    quantity: Decimal | None
    stock_not_transferred: Decimal | None = None


@dataclass(frozen=True)
class Invoice:
    """
    The originating sales or purchase invoice of a transfer.

    ``version`` is the optimistic-lock version read from storage; stores
    reject a save whose version no longer matches.
    """
    id: UUID
    name: str
    invoice_type: InvoiceType
    items: tuple[InvoiceLine, ...] = ()
    stock_not_transferred: Decimal = Decimal("0")
    version: int | None = None

    def get_stock_not_transferred(self) -> Decimal:
        """Aggregate not-transferred quantity over all lines."""
        total = Decimal("0")
        for line in self.items:
            if is_quantity(line.stock_not_transferred):
                total += line.stock_not_transferred
        return total

    def with_lines(self, lines: tuple[InvoiceLine, ...]) -> Invoice:
        updated = replace(self, items=tuple(lines))
        return replace(updated, stock_not_transferred=updated.get_stock_not_transferred())
