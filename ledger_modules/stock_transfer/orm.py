"""
Module: ledger_modules.stock_transfer.orm
Responsibility: SQLAlchemy ORM persistence models for stock transfers and
    the invoices they reconcile against.  Maps the frozen dataclass DTOs in
    stock_transfer.models to relational tables.

Architecture position: Modules > Stock transfer > ORM.  Inherits from
    TrackedBase (ledger_kernel.db.base).  Items are referenced by String
    code with NO foreign key; transfer lines and invoice lines belong to
    their header through a FK with delete-orphan cascade.

Invariants enforced:
    - Quantities, rates and totals use Decimal (Numeric(38,9)) -- NEVER float.
    - Enum fields stored as String(50) for portability and readability.
    - InvoiceModel carries a version column used for optimistic locking;
      every UPDATE of an invoice header checks and increments it.
    - (invoice_type, name) is unique.

Failure modes:
    - IntegrityError on a duplicate invoice name within one invoice type.
    - StaleDataError when an invoice header was updated concurrently.
"""

from datetime import date
from decimal import Decimal
from uuid import UUID

from sqlalchemy import Date, ForeignKey, Index, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ledger_kernel.db.base import TrackedBase, UUIDString


# =============================================================================
# StockTransferModel
# =============================================================================

class StockTransferModel(TrackedBase):
    """
    ORM model for shipments and purchase receipts.

    Maps to: ledger_modules.stock_transfer.models.StockTransfer.

    Guarantees:
        - grand_total is a snapshot refreshed whenever the lines are
          replaced; None while any line lacks a rate or quantity.
        - back_reference holds the invoice name (no FK, the invoice may
          live in another schema).
    """

    __tablename__ = "stock_transfers"

    __table_args__ = (
        Index("idx_stock_transfer_status", "status"),
        Index("idx_stock_transfer_back_ref", "direction", "back_reference"),
    )

    direction: Mapped[str] = mapped_column(String(50))
    status: Mapped[str] = mapped_column(String(50), default="draft")
    back_reference: Mapped[str | None] = mapped_column(String(100), nullable=True)
    transfer_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    party: Mapped[str | None] = mapped_column(String(200), nullable=True)
    terms: Mapped[str] = mapped_column(Text, default="")
    currency: Mapped[str] = mapped_column(String(3))
    grand_total: Mapped[Decimal | None] = mapped_column(nullable=True)

    items: Mapped[list["StockTransferItemModel"]] = relationship(
        back_populates="transfer",
        cascade="all, delete-orphan",
        order_by="StockTransferItemModel.line_seq",
    )

    def to_dto(self):
        """Convert ORM model to frozen StockTransfer DTO."""
        from ledger_modules.stock_transfer.models import (
            DocumentStatus,
            StockTransfer,
            TransferDirection,
        )
        return StockTransfer(
            id=self.id,
            direction=TransferDirection(self.direction),
            items=tuple(row.to_dto() for row in self.items),
            status=DocumentStatus(self.status),
            back_reference=self.back_reference,
            transfer_date=self.transfer_date,
            party=self.party,
            terms=self.terms or "",
            currency=self.currency,
        )

    @classmethod
    def from_dto(cls, dto, created_by_id: UUID) -> "StockTransferModel":
        """Create ORM model from frozen StockTransfer DTO."""
        model = cls(
            id=dto.id,
            direction=dto.direction.value,
            status=dto.status.value,
            back_reference=dto.back_reference,
            transfer_date=dto.transfer_date,
            party=dto.party,
            terms=dto.terms,
            currency=dto.currency,
            created_by_id=created_by_id,
        )
        model.replace_items(dto.items, created_by_id)
        return model

    def replace_items(self, items, actor_id: UUID) -> None:
        """Swap in a new set of lines and refresh the grand total snapshot."""
        from ledger_modules.stock_transfer.models import StockTransfer, TransferDirection

        self.items = [
            StockTransferItemModel.from_dto(row, seq, actor_id)
            for seq, row in enumerate(items)
        ]
        snapshot = StockTransfer(
            id=self.id,
            direction=TransferDirection(self.direction),
            items=tuple(items),
        )
        self.grand_total = snapshot.grand_total

    def __repr__(self) -> str:
        return (
            f"<StockTransferModel {self.id} {self.direction} "
            f"{self.status} ref={self.back_reference}>"
        )


class StockTransferItemModel(TrackedBase):
    """
    ORM model for one transfer line.

    Maps to: ledger_modules.stock_transfer.models.StockTransferItem.  Lines
    are replaced wholesale on edit, so each save gets fresh row ids.
    """

    __tablename__ = "stock_transfer_items"

    __table_args__ = (
        Index("idx_stock_transfer_item_transfer", "transfer_id", "line_seq"),
    )

    transfer_id: Mapped[UUID] = mapped_column(
        UUIDString(), ForeignKey("stock_transfers.id"),
    )
    line_seq: Mapped[int] = mapped_column(Integer)
    item: Mapped[str | None] = mapped_column(String(100), nullable=True)
    quantity: Mapped[Decimal | None] = mapped_column(nullable=True)
    rate: Mapped[Decimal | None] = mapped_column(nullable=True)
    location: Mapped[str | None] = mapped_column(String(100), nullable=True)

    transfer: Mapped[StockTransferModel] = relationship(back_populates="items")

    def to_dto(self):
        """Convert ORM model to frozen StockTransferItem DTO."""
        from ledger_modules.stock_transfer.models import StockTransferItem
        return StockTransferItem(
            id=self.id,
            item=self.item,
            quantity=self.quantity,
            rate=self.rate,
            location=self.location,
        )

    @classmethod
    def from_dto(cls, dto, line_seq: int, created_by_id: UUID) -> "StockTransferItemModel":
        """Create ORM model from frozen StockTransferItem DTO."""
        return cls(
            line_seq=line_seq,
            item=dto.item,
            quantity=dto.quantity,
            rate=dto.rate,
            location=dto.location,
            created_by_id=created_by_id,
        )


# =============================================================================
# InvoiceModel
# =============================================================================

class InvoiceModel(TrackedBase):
    """
    ORM model for sales and purchase invoices, as far as stock transfers
    read and write them.

    Maps to: ledger_modules.stock_transfer.models.Invoice.

    Guarantees:
        - stock_not_transferred equals the sum of the line counters after
          every save through SqlInvoiceStore.
        - version is incremented on every header UPDATE.
    """

    __tablename__ = "invoices"

    __table_args__ = (
        UniqueConstraint("invoice_type", "name", name="uq_invoice_type_name"),
    )

    name: Mapped[str] = mapped_column(String(100))
    invoice_type: Mapped[str] = mapped_column(String(50))
    party: Mapped[str | None] = mapped_column(String(200), nullable=True)
    stock_not_transferred: Mapped[Decimal] = mapped_column(default=Decimal("0"))
    version: Mapped[int] = mapped_column(Integer, nullable=False)

    lines: Mapped[list["InvoiceLineModel"]] = relationship(
        back_populates="invoice",
        cascade="all, delete-orphan",
        order_by="InvoiceLineModel.line_seq",
    )

    __mapper_args__ = {"version_id_col": version}

    def to_dto(self):
        """Convert ORM model to frozen Invoice DTO."""
        from ledger_modules.stock_transfer.models import Invoice, InvoiceType
        return Invoice(
            id=self.id,
            name=self.name,
            invoice_type=InvoiceType(self.invoice_type),
            items=tuple(line.to_dto() for line in self.lines),
            stock_not_transferred=self.stock_not_transferred,
            version=self.version,
        )

    def __repr__(self) -> str:
        return f"<InvoiceModel {self.invoice_type} {self.name} v{self.version}>"


class InvoiceLineModel(TrackedBase):
    """
    ORM model for one invoice line.

    Maps to: ledger_modules.stock_transfer.models.InvoiceLine.
    """

    __tablename__ = "invoice_lines"

    __table_args__ = (
        Index("idx_invoice_line_invoice", "invoice_id", "line_seq"),
    )

    invoice_id: Mapped[UUID] = mapped_column(UUIDString(), ForeignKey("invoices.id"))
    line_seq: Mapped[int] = mapped_column(Integer)
    item: Mapped[str | None] = mapped_column(String(100), nullable=True)
    quantity: Mapped[Decimal | None] = mapped_column(nullable=True)
    rate: Mapped[Decimal | None] = mapped_column(nullable=True)
    stock_not_transferred: Mapped[Decimal | None] = mapped_column(nullable=True)

    invoice: Mapped[InvoiceModel] = relationship(back_populates="lines")

    def to_dto(self):
        """Convert ORM model to frozen InvoiceLine DTO."""
        from ledger_modules.stock_transfer.models import InvoiceLine
        return InvoiceLine(
            id=self.id,
            item=self.item,
            quantity=self.quantity,
            stock_not_transferred=self.stock_not_transferred,
        )
