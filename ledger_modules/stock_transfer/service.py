"""
Stock Transfer Service (``ledger_modules.stock_transfer.service``).

Responsibility
--------------
Runs the lifecycle of shipments and purchase receipts: create and edit
drafts, submit (post to the ledger, then reconcile the originating
invoice), cancel (restore the invoice counters), duplicate and discard.

Architecture
------------
Layer: **Modules** -- stateful orchestration wrapper.

1. ``AccountValidator`` and ``LedgerPostingBuilder`` build the posting.
2. ``LedgerService`` writes it to the journal.
3. ``BackReferenceReconciler`` updates the invoice through ``SqlInvoiceStore``.

Invariants
----------
- Each public mutating method owns its transaction boundary: it commits on
  success and rolls back on any failure, so a submit either posts the
  journal entry, moves the transfer to ``submitted`` and updates the
  invoice, or does none of these.
- Lifecycle actions are checked against ``TRANSFER_WORKFLOW``.
- Settings are injected at construction; nothing is read from global state.

Failure Modes
-------------
- ``InvalidTransitionError`` for an action not allowed from the status.
- ``DocumentNotFoundError`` for an unknown transfer or invoice.
- ``MissingAccountsError`` / ``PostingNotComputableError`` on submit.
- ``OptimisticLockError`` when the invoice changed concurrently.

Usage::

    service = StockTransferService(session, get_inventory_settings())
    shipment = service.create_transfer(
        TransferDirection.OUTBOUND,
        [StockTransferItem(item="WIDGET", quantity=Decimal("5"), rate=Decimal("10"))],
        actor_id=actor_id,
        back_reference="SINV-0001",
    )
    service.submit(shipment.id, actor_id)
"""

from __future__ import annotations

from datetime import date
from typing import Sequence
from uuid import UUID, uuid4

from sqlalchemy import select
from sqlalchemy.orm import Session, selectinload

from ledger_config.schema import InventorySettings
from ledger_kernel.domain.clock import Clock, SystemClock
from ledger_kernel.domain.dtos import LedgerPosting
from ledger_kernel.exceptions import (
    DocumentNotFoundError,
    InvalidTransitionError,
    PostingNotComputableError,
)
from ledger_kernel.logging_config import LogContext, get_logger
from ledger_kernel.selectors.account_selector import AccountSelector
from ledger_kernel.selectors.journal_selector import JournalEntryRecord, JournalSelector
from ledger_kernel.services.ledger_service import LedgerService
from ledger_modules.stock_transfer.accounts import AccountLookup, AccountValidator
from ledger_modules.stock_transfer.helpers import get_transfer_details
from ledger_modules.stock_transfer.models import (
    DocumentStatus,
    Invoice,
    StockTransfer,
    StockTransferItem,
    TransferDetail,
    TransferDirection,
)
from ledger_modules.stock_transfer.orm import StockTransferModel
from ledger_modules.stock_transfer.posting import LedgerPostingBuilder
from ledger_modules.stock_transfer.reconciler import BackReferenceReconciler, InvoiceStore
from ledger_modules.stock_transfer.store import SqlInvoiceStore
from ledger_modules.stock_transfer.workflows import TRANSFER_WORKFLOW, find_transition

logger = get_logger("modules.stock_transfer.service")


class StockTransferService:
    """
    Orchestrates stock transfer documents through the ledger and invoices.

    Contract
    --------
    Public methods take and return frozen DTOs.  Mutating methods commit on
    success and roll back on failure; read methods never write.

    Non-goals
    ---------
    - Cancelling does NOT reverse the journal entry; only the invoice
      counters are restored.
    - Stock levels per location are not tracked here.
    """

    def __init__(
        self,
        session: Session,
        settings: InventorySettings,
        clock: Clock | None = None,
        accounts: AccountLookup | None = None,
        invoices: InvoiceStore | None = None,
    ):
        self._session = session
        self._settings = settings
        self._clock = clock or SystemClock()

        self._validator = AccountValidator(settings, accounts or AccountSelector(session))
        self._builder = LedgerPostingBuilder(settings, self._validator)
        self._reconciler = BackReferenceReconciler(invoices or SqlInvoiceStore(session))
        self._ledger = LedgerService(session, self._clock)
        self._journal = JournalSelector(session)

    # =========================================================================
    # Drafts
    # =========================================================================

    def create_transfer(
        self,
        direction: TransferDirection,
        items: Sequence[StockTransferItem],
        actor_id: UUID,
        back_reference: str | None = None,
        party: str | None = None,
        transfer_date: date | None = None,
        terms: str | None = None,
    ) -> StockTransfer:
        """
        Create a draft transfer.

        Postconditions:
            - ``terms`` defaults to the direction's terms from the settings.
            - ``currency`` is the settings currency.
            - Session is committed on success, rolled back on any failure.
        """
        if terms is None:
            terms = getattr(self._settings, direction.rule.terms_setting)
        dto = StockTransfer(
            id=uuid4(),
            direction=direction,
            items=tuple(items),
            back_reference=back_reference,
            transfer_date=transfer_date or self._clock.today(),
            party=party,
            terms=terms,
            currency=self._settings.currency,
        )
        try:
            model = StockTransferModel.from_dto(dto, created_by_id=actor_id)
            self._session.add(model)
            self._session.commit()
        except Exception:
            self._session.rollback()
            raise

        logger.info(
            "stock_transfer_created",
            extra={
                "transfer_id": str(model.id),
                "direction": direction.value,
                "line_count": len(dto.items),
                "back_reference": back_reference,
            },
        )
        return model.to_dto()

    def update_items(
        self,
        transfer_id: UUID,
        items: Sequence[StockTransferItem],
        actor_id: UUID,
    ) -> StockTransfer:
        """Replace the lines of a draft.  The grand total follows the lines."""
        try:
            model = self._load_model(transfer_id, lock=True)
            self._check_transition(model, "edit")
            model.replace_items(tuple(items), actor_id)
            model.updated_by_id = actor_id
            self._session.commit()
        except Exception:
            self._session.rollback()
            raise
        return model.to_dto()

    def discard(self, transfer_id: UUID) -> None:
        """Delete a draft transfer.  Submitted or cancelled ones are kept."""
        try:
            model = self._load_model(transfer_id, lock=True)
            self._check_transition(model, "discard")
            self._session.delete(model)
            self._session.commit()
        except Exception:
            self._session.rollback()
            raise
        logger.info("stock_transfer_discarded", extra={"transfer_id": str(transfer_id)})

    def duplicate(self, transfer_id: UUID, actor_id: UUID) -> StockTransfer:
        """Copy a transfer in any status into a new, unlinked draft."""
        source = self.get_transfer(transfer_id)
        copy = source.duplicate()
        try:
            model = StockTransferModel.from_dto(copy, created_by_id=actor_id)
            self._session.add(model)
            self._session.commit()
        except Exception:
            self._session.rollback()
            raise
        return model.to_dto()

    # =========================================================================
    # Reads
    # =========================================================================

    def get_transfer(self, transfer_id: UUID) -> StockTransfer:
        return self._load_model(transfer_id).to_dto()

    def get_transfer_details(self, transfer_id: UUID) -> list[TransferDetail]:
        return get_transfer_details(self.get_transfer(transfer_id))

    def get_posting(self, transfer: StockTransfer) -> LedgerPosting | None:
        """
        The posting the transfer would make, or None when its grand total
        cannot be computed yet.

        Raises:
            MissingAccountsError: a required account is unset or unknown.
        """
        if transfer.grand_total is None:
            return None
        return self._builder.build_posting(transfer)

    def ledger_entries(self, transfer_id: UUID) -> list[JournalEntryRecord]:
        """Journal entries posted for the transfer."""
        transfer = self.get_transfer(transfer_id)
        return self._journal.entries_for_reference(
            transfer.direction.rule.schema_name, str(transfer.id),
        )

    # =========================================================================
    # Lifecycle
    # =========================================================================

    def submit(self, transfer_id: UUID, actor_id: UUID) -> StockTransfer:
        """
        Post the transfer and reconcile its invoice.

        Preconditions:
            - The transfer is a draft.
            - Every line has a rate and a quantity.

        Postconditions:
            - One journal entry exists for the transfer.
            - Status is ``submitted``.
            - The back-referenced invoice (if any) has its counters reduced.
            - Session is committed on success, rolled back on any failure.
        """
        with LogContext.bind(transfer_id=str(transfer_id), actor_id=str(actor_id)):
            try:
                model = self._load_model(transfer_id, lock=True)
                target = self._check_transition(model, "submit")
                transfer = model.to_dto()

                posting = self.get_posting(transfer)
                if posting is None:
                    raise PostingNotComputableError(str(transfer.id))

                entry = self._ledger.post(
                    posting,
                    actor_id=actor_id,
                    effective_date=transfer.transfer_date or self._clock.today(),
                    description=f"{transfer.direction.rule.schema_name} {transfer.id}",
                )

                model.status = target
                model.updated_by_id = actor_id
                self._session.flush()

                submitted = transfer.with_status(DocumentStatus.SUBMITTED)
                self.after_submit(submitted)
                self._session.commit()
            except Exception:
                self._session.rollback()
                logger.warning("stock_transfer_submit_failed", exc_info=True)
                raise

            logger.info(
                "stock_transfer_submitted",
                extra={
                    "direction": submitted.direction.value,
                    "journal_entry_id": str(entry.id),
                    "grand_total": str(submitted.grand_total),
                },
            )
            return submitted

    def cancel(self, transfer_id: UUID, actor_id: UUID) -> StockTransfer:
        """
        Cancel a submitted transfer and restore its invoice counters.

        Postconditions:
            - Status is ``cancelled``.
            - The back-referenced invoice (if any) has its counters restored,
              capped at each line's quantity.
            - The journal entry is left in place.
        """
        with LogContext.bind(transfer_id=str(transfer_id), actor_id=str(actor_id)):
            try:
                model = self._load_model(transfer_id, lock=True)
                target = self._check_transition(model, "cancel")
                model.status = target
                model.updated_by_id = actor_id
                self._session.flush()

                cancelled = model.to_dto()
                self.after_cancel(cancelled)
                self._session.commit()
            except Exception:
                self._session.rollback()
                logger.warning("stock_transfer_cancel_failed", exc_info=True)
                raise

            logger.info(
                "stock_transfer_cancelled",
                extra={"direction": cancelled.direction.value},
            )
            return cancelled

    def after_submit(self, transfer: StockTransfer) -> Invoice | None:
        """Reconciliation hook run inside the submit transaction."""
        return self._reconciler.update_back_reference(transfer)

    def after_cancel(self, transfer: StockTransfer) -> Invoice | None:
        """Reconciliation hook run inside the cancel transaction."""
        return self._reconciler.update_back_reference(transfer)

    # =========================================================================
    # Internals
    # =========================================================================

    def _load_model(self, transfer_id: UUID, lock: bool = False) -> StockTransferModel:
        stmt = (
            select(StockTransferModel)
            .where(StockTransferModel.id == transfer_id)
            .options(selectinload(StockTransferModel.items))
        )
        if lock:
            stmt = stmt.with_for_update()
        model = self._session.execute(stmt).scalar_one_or_none()
        if model is None:
            raise DocumentNotFoundError("StockTransfer", str(transfer_id))
        return model

    def _check_transition(self, model: StockTransferModel, action: str) -> str:
        transition = find_transition(TRANSFER_WORKFLOW, model.status, action)
        if transition is None:
            raise InvalidTransitionError(str(model.id), model.status, action)
        return transition.to_state
