"""
SqlInvoiceStore -- SQLAlchemy-backed InvoiceStore.

Responsibility:
    Loads an invoice by type and name under a row lock and writes the
    reconciled line counters and aggregate back, inside the caller's
    transaction.

Architecture position:
    Modules > Stock transfer -- imperative shell.  Flushes, never commits.

Invariants enforced:
    - A save whose invoice version differs from the stored version is
      rejected, so a concurrent update is never silently overwritten.
    - Any change to the lines bumps the invoice version.

Failure modes:
    - DocumentNotFoundError for an unknown invoice.
    - OptimisticLockError on a version mismatch or a concurrent UPDATE.
"""

from sqlalchemy import select
from sqlalchemy.orm import selectinload
from sqlalchemy.orm.attributes import flag_modified
from sqlalchemy.orm.exc import StaleDataError

from ledger_kernel.exceptions import DocumentNotFoundError, OptimisticLockError
from ledger_kernel.logging_config import get_logger
from ledger_modules.stock_transfer.models import Invoice, InvoiceType
from ledger_modules.stock_transfer.orm import InvoiceModel

logger = get_logger("modules.stock_transfer.store")


class SqlInvoiceStore:
    """Invoice persistence over an open Session."""

    def __init__(self, session):
        self._session = session

    def load_invoice(self, invoice_type: InvoiceType, name: str) -> Invoice:
        model = self._load_model(invoice_type, name)
        return model.to_dto()

    def save_invoice(self, invoice: Invoice) -> None:
        model = self._session.get(InvoiceModel, invoice.id)
        if model is None:
            raise DocumentNotFoundError(invoice.invoice_type.value, invoice.name)
        if invoice.version is not None and model.version != invoice.version:
            logger.warning(
                "invoice_version_mismatch",
                extra={
                    "invoice": invoice.name,
                    "expected_version": invoice.version,
                    "actual_version": model.version,
                },
            )
            raise OptimisticLockError("Invoice", invoice.name)

        counters = {line.id: line.stock_not_transferred for line in invoice.items}
        changed = False
        for line in model.lines:
            if line.id in counters and line.stock_not_transferred != counters[line.id]:
                line.stock_not_transferred = counters[line.id]
                changed = True

        if not changed:
            return

        model.stock_not_transferred = invoice.stock_not_transferred
        # The header row carries the version; force its UPDATE even when
        # the aggregate itself did not move.
        flag_modified(model, "stock_not_transferred")
        try:
            self._session.flush()
        except StaleDataError as exc:
            raise OptimisticLockError("Invoice", invoice.name) from exc

        logger.debug(
            "invoice_saved",
            extra={"invoice": invoice.name, "version": model.version},
        )

    def _load_model(self, invoice_type: InvoiceType, name: str) -> InvoiceModel:
        model = self._session.execute(
            select(InvoiceModel)
            .where(
                InvoiceModel.invoice_type == invoice_type.value,
                InvoiceModel.name == name,
            )
            .options(selectinload(InvoiceModel.lines))
            .with_for_update()
        ).scalar_one_or_none()
        if model is None:
            raise DocumentNotFoundError(invoice_type.value, name)
        return model
