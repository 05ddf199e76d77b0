"""
Integration tests for StockTransferService.

Drives the full lifecycle against a real session: posting to the journal,
reconciling the referenced invoice, and the transaction boundary that keeps
the two consistent when either fails.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal

import pytest

from ledger_config import InventorySettings
from ledger_kernel.exceptions import (
    DocumentNotFoundError,
    InvalidTransitionError,
    MissingAccountsError,
    PostingNotComputableError,
)
from ledger_kernel.selectors.journal_selector import JournalSelector
from ledger_modules.stock_transfer.models import (
    DocumentStatus,
    InvoiceType,
    StockTransferItem,
    TransferDirection,
)
from ledger_modules.stock_transfer.service import StockTransferService
from ledger_modules.stock_transfer.store import SqlInvoiceStore


def _item(item: str, quantity: str, rate: str | None = "10", location: str | None = None):
    return StockTransferItem(
        item=item,
        quantity=Decimal(quantity),
        rate=None if rate is None else Decimal(rate),
        location=location,
    )


def _counters(session, name, invoice_type=InvoiceType.SALES_INVOICE) -> list[Decimal]:
    invoice = SqlInvoiceStore(session).load_invoice(invoice_type, name)
    return [line.stock_not_transferred for line in invoice.items]


def _aggregate(session, name, invoice_type=InvoiceType.SALES_INVOICE) -> Decimal:
    return SqlInvoiceStore(session).load_invoice(invoice_type, name).stock_not_transferred


# =============================================================================
# Drafts
# =============================================================================


class TestDrafts:

    def test_create_applies_defaults(self, stock_transfer_service, test_actor_id):
        shipment = stock_transfer_service.create_transfer(
            TransferDirection.OUTBOUND, [_item("A", "2")], actor_id=test_actor_id,
        )
        receipt = stock_transfer_service.create_transfer(
            TransferDirection.INBOUND, [_item("A", "2")], actor_id=test_actor_id,
        )

        assert shipment.status == DocumentStatus.DRAFT
        assert shipment.terms == "Deliver to dock 4"
        assert receipt.terms == "Inspect on arrival"
        assert shipment.currency == "USD"
        assert shipment.transfer_date == date(2024, 1, 1)
        assert shipment.grand_total == Decimal("20")

    def test_update_items_recomputes_total(self, stock_transfer_service, test_actor_id):
        transfer = stock_transfer_service.create_transfer(
            TransferDirection.OUTBOUND, [_item("A", "2")], actor_id=test_actor_id,
        )
        updated = stock_transfer_service.update_items(
            transfer.id, [_item("A", "2"), _item("B", "1", "5")], actor_id=test_actor_id,
        )

        assert updated.grand_total == Decimal("25")
        assert [row.item for row in stock_transfer_service.get_transfer(transfer.id).items] == ["A", "B"]

    def test_transfer_details(self, stock_transfer_service, test_actor_id):
        transfer = stock_transfer_service.create_transfer(
            TransferDirection.INBOUND, [_item("A", "2", location="Stores")],
            actor_id=test_actor_id,
        )
        [detail] = stock_transfer_service.get_transfer_details(transfer.id)
        assert detail.to_location == "Stores"
        assert detail.from_location is None

    def test_discard_deletes_draft(self, stock_transfer_service, test_actor_id):
        transfer = stock_transfer_service.create_transfer(
            TransferDirection.OUTBOUND, [_item("A", "2")], actor_id=test_actor_id,
        )
        stock_transfer_service.discard(transfer.id)

        with pytest.raises(DocumentNotFoundError):
            stock_transfer_service.get_transfer(transfer.id)

    def test_duplicate_is_unlinked_draft(
        self, stock_transfer_service, standard_accounts, create_invoice, test_actor_id,
    ):
        create_invoice("SINV-0001", [("A", "10", "10")])
        original = stock_transfer_service.create_transfer(
            TransferDirection.OUTBOUND, [_item("A", "4")],
            actor_id=test_actor_id, back_reference="SINV-0001",
        )
        stock_transfer_service.submit(original.id, test_actor_id)

        copy = stock_transfer_service.duplicate(original.id, test_actor_id)

        assert copy.id != original.id
        assert copy.status == DocumentStatus.DRAFT
        assert copy.back_reference is None
        assert [(r.item, r.quantity) for r in copy.items] == [("A", Decimal("4"))]
        assert stock_transfer_service.get_transfer(original.id).back_reference == "SINV-0001"


# =============================================================================
# Submit
# =============================================================================


class TestSubmit:

    def test_outbound_posts_and_reconciles(
        self, session, stock_transfer_service, standard_accounts, create_invoice, test_actor_id,
    ):
        create_invoice("SINV-0001", [("A", "10", "10")])
        transfer = stock_transfer_service.create_transfer(
            TransferDirection.OUTBOUND, [_item("A", "4", "12.50")],
            actor_id=test_actor_id, back_reference="SINV-0001",
        )

        submitted = stock_transfer_service.submit(transfer.id, test_actor_id)

        assert submitted.status == DocumentStatus.SUBMITTED
        assert submitted.is_submitted
        [entry] = stock_transfer_service.ledger_entries(transfer.id)
        assert entry.reference_type == "Shipment"
        assert [(l.account_code, l.side, l.amount) for l in entry.lines] == [
            ("5000", "debit", Decimal("50.00")),
            ("1400", "credit", Decimal("50.00")),
        ]
        assert entry.total_debits == entry.total_credits
        assert _counters(session, "SINV-0001") == [Decimal("6")]
        assert _aggregate(session, "SINV-0001") == Decimal("6")

    def test_inbound_reconciles_purchase_invoice(
        self, session, stock_transfer_service, standard_accounts, create_invoice, test_actor_id,
    ):
        create_invoice("PINV-0001", [("A", "10", "10")], invoice_type=InvoiceType.PURCHASE_INVOICE)
        transfer = stock_transfer_service.create_transfer(
            TransferDirection.INBOUND, [_item("A", "3")],
            actor_id=test_actor_id, back_reference="PINV-0001",
        )

        stock_transfer_service.submit(transfer.id, test_actor_id)

        [entry] = stock_transfer_service.ledger_entries(transfer.id)
        assert entry.reference_type == "PurchaseReceipt"
        assert [(l.account_code, l.side) for l in entry.lines] == [
            ("1400", "debit"),
            ("2150", "credit"),
        ]
        assert _counters(session, "PINV-0001", InvoiceType.PURCHASE_INVOICE) == [Decimal("7")]

    def test_split_item_depleted_in_line_order(
        self, session, stock_transfer_service, standard_accounts, create_invoice, test_actor_id,
    ):
        create_invoice("SINV-0002", [("B", "5", "5"), ("B", "5", "5")])
        transfer = stock_transfer_service.create_transfer(
            TransferDirection.OUTBOUND, [_item("B", "7")],
            actor_id=test_actor_id, back_reference="SINV-0002",
        )

        stock_transfer_service.submit(transfer.id, test_actor_id)

        assert _counters(session, "SINV-0002") == [Decimal("0"), Decimal("3")]
        assert _aggregate(session, "SINV-0002") == Decimal("3")

    def test_without_back_reference_only_posts(
        self, session, stock_transfer_service, standard_accounts, create_invoice, test_actor_id,
    ):
        create_invoice("SINV-0003", [("A", "10", "10")])
        transfer = stock_transfer_service.create_transfer(
            TransferDirection.OUTBOUND, [_item("A", "4")], actor_id=test_actor_id,
        )

        stock_transfer_service.submit(transfer.id, test_actor_id)

        assert len(stock_transfer_service.ledger_entries(transfer.id)) == 1
        assert _counters(session, "SINV-0003") == [Decimal("10")]

    def test_account_balances(
        self, session, stock_transfer_service, standard_accounts, test_actor_id,
    ):
        transfer = stock_transfer_service.create_transfer(
            TransferDirection.OUTBOUND, [_item("A", "5")], actor_id=test_actor_id,
        )
        stock_transfer_service.submit(transfer.id, test_actor_id)

        selector = JournalSelector(session)
        assert selector.account_balance("5000") == Decimal("50")
        assert selector.account_balance("1400") == Decimal("-50")

    def test_submit_is_logged_with_context(
        self, stock_transfer_service, standard_accounts, test_actor_id, captured_logs,
    ):
        transfer = stock_transfer_service.create_transfer(
            TransferDirection.OUTBOUND, [_item("A", "1")], actor_id=test_actor_id,
        )
        stock_transfer_service.submit(transfer.id, test_actor_id)

        [record] = [r for r in captured_logs() if r["message"] == "stock_transfer_submitted"]
        assert record["transfer_id"] == str(transfer.id)
        assert record["actor_id"] == str(test_actor_id)
        assert record["grand_total"] == "10"


class TestSubmitFailures:

    def test_missing_setting_blocks_submit(
        self, session, standard_accounts, create_invoice, deterministic_clock, test_actor_id,
    ):
        create_invoice("SINV-0004", [("A", "10", "10")])
        service = StockTransferService(
            session,
            InventorySettings(cost_of_goods_sold="5000", round_off_account="5990"),
            clock=deterministic_clock,
        )
        transfer = service.create_transfer(
            TransferDirection.OUTBOUND, [_item("A", "4")],
            actor_id=test_actor_id, back_reference="SINV-0004",
        )

        with pytest.raises(MissingAccountsError, match="Stock In Hand account not set"):
            service.get_posting(service.get_transfer(transfer.id))
        with pytest.raises(MissingAccountsError):
            service.submit(transfer.id, test_actor_id)

        assert service.get_transfer(transfer.id).status == DocumentStatus.DRAFT
        assert service.ledger_entries(transfer.id) == []
        assert _counters(session, "SINV-0004") == [Decimal("10")]

    def test_unknown_accounts_all_reported(self, stock_transfer_service, test_actor_id):
        transfer = stock_transfer_service.create_transfer(
            TransferDirection.INBOUND, [_item("A", "1")], actor_id=test_actor_id,
        )

        with pytest.raises(MissingAccountsError) as exc_info:
            stock_transfer_service.submit(transfer.id, test_actor_id)

        assert exc_info.value.messages == [
            "Account 1400 does not exist.",
            "Account 2150 does not exist.",
        ]

    def test_incomputable_total(self, stock_transfer_service, standard_accounts, test_actor_id):
        transfer = stock_transfer_service.create_transfer(
            TransferDirection.OUTBOUND, [_item("A", "1", rate=None)], actor_id=test_actor_id,
        )

        assert stock_transfer_service.get_posting(transfer) is None
        with pytest.raises(PostingNotComputableError):
            stock_transfer_service.submit(transfer.id, test_actor_id)
        assert stock_transfer_service.get_transfer(transfer.id).status == DocumentStatus.DRAFT

    def test_reconciliation_failure_rolls_back_posting(
        self, stock_transfer_service, standard_accounts, test_actor_id,
    ):
        transfer = stock_transfer_service.create_transfer(
            TransferDirection.OUTBOUND, [_item("A", "4")],
            actor_id=test_actor_id, back_reference="SINV-MISSING",
        )

        with pytest.raises(DocumentNotFoundError):
            stock_transfer_service.submit(transfer.id, test_actor_id)

        assert stock_transfer_service.get_transfer(transfer.id).status == DocumentStatus.DRAFT
        assert stock_transfer_service.ledger_entries(transfer.id) == []

    def test_unknown_transfer(self, stock_transfer_service, test_actor_id):
        from uuid import uuid4

        with pytest.raises(DocumentNotFoundError):
            stock_transfer_service.submit(uuid4(), test_actor_id)


# =============================================================================
# Cancel
# =============================================================================


class TestCancel:

    def test_cancel_restores_invoice(
        self, session, stock_transfer_service, standard_accounts, create_invoice, test_actor_id,
    ):
        create_invoice("SINV-0005", [("A", "10", "10")])
        transfer = stock_transfer_service.create_transfer(
            TransferDirection.OUTBOUND, [_item("A", "4")],
            actor_id=test_actor_id, back_reference="SINV-0005",
        )
        stock_transfer_service.submit(transfer.id, test_actor_id)
        assert _counters(session, "SINV-0005") == [Decimal("6")]

        cancelled = stock_transfer_service.cancel(transfer.id, test_actor_id)

        assert cancelled.status == DocumentStatus.CANCELLED
        assert _counters(session, "SINV-0005") == [Decimal("10")]
        assert _aggregate(session, "SINV-0005") == Decimal("10")
        # The journal entry is not reversed.
        assert len(stock_transfer_service.ledger_entries(transfer.id)) == 1

    def test_cancel_with_other_transfer_in_between(
        self, session, stock_transfer_service, standard_accounts, create_invoice, test_actor_id,
    ):
        create_invoice("SINV-0006", [("A", "10", "10")])
        first = stock_transfer_service.create_transfer(
            TransferDirection.OUTBOUND, [_item("A", "4")],
            actor_id=test_actor_id, back_reference="SINV-0006",
        )
        second = stock_transfer_service.create_transfer(
            TransferDirection.OUTBOUND, [_item("A", "5")],
            actor_id=test_actor_id, back_reference="SINV-0006",
        )
        stock_transfer_service.submit(first.id, test_actor_id)
        stock_transfer_service.submit(second.id, test_actor_id)
        assert _counters(session, "SINV-0006") == [Decimal("1")]

        stock_transfer_service.cancel(first.id, test_actor_id)
        assert _counters(session, "SINV-0006") == [Decimal("5")]


# =============================================================================
# Lifecycle guards
# =============================================================================


class TestTransitions:

    @pytest.fixture
    def submitted(self, stock_transfer_service, standard_accounts, test_actor_id):
        transfer = stock_transfer_service.create_transfer(
            TransferDirection.OUTBOUND, [_item("A", "1")], actor_id=test_actor_id,
        )
        return stock_transfer_service.submit(transfer.id, test_actor_id)

    def test_cancel_draft_rejected(self, stock_transfer_service, test_actor_id):
        transfer = stock_transfer_service.create_transfer(
            TransferDirection.OUTBOUND, [_item("A", "1")], actor_id=test_actor_id,
        )
        with pytest.raises(InvalidTransitionError) as exc_info:
            stock_transfer_service.cancel(transfer.id, test_actor_id)
        assert exc_info.value.from_status == "draft"
        assert exc_info.value.action == "cancel"

    def test_submit_twice_rejected(self, stock_transfer_service, submitted, test_actor_id):
        with pytest.raises(InvalidTransitionError):
            stock_transfer_service.submit(submitted.id, test_actor_id)
        assert len(stock_transfer_service.ledger_entries(submitted.id)) == 1

    def test_submitted_not_editable(self, stock_transfer_service, submitted, test_actor_id):
        with pytest.raises(InvalidTransitionError):
            stock_transfer_service.update_items(submitted.id, [_item("A", "9")], test_actor_id)

    def test_submitted_not_discardable(self, stock_transfer_service, submitted):
        with pytest.raises(InvalidTransitionError):
            stock_transfer_service.discard(submitted.id)

    def test_nothing_leaves_cancelled(self, stock_transfer_service, submitted, test_actor_id):
        stock_transfer_service.cancel(submitted.id, test_actor_id)
        for action in (stock_transfer_service.submit, stock_transfer_service.cancel):
            with pytest.raises(InvalidTransitionError):
                action(submitted.id, test_actor_id)
        with pytest.raises(InvalidTransitionError):
            stock_transfer_service.discard(submitted.id)
