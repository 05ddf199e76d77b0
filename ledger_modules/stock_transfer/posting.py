"""
Ledger posting for stock transfers.

Responsibility:
    Turns a stock transfer into a two-line double-entry posting for its
    grand total.  A shipment moves value out of stock into cost of goods
    sold; a purchase receipt moves value into stock against the
    received-but-not-billed clearing account.

Architecture position:
    Modules > Stock transfer -- functional core.  Reads the inventory
    settings it was given, never global state, and performs no I/O apart
    from the account existence checks of the validator.

Invariants enforced:
    - Accounts are validated before any entry is built.
    - The debit and credit carry the same amount, so the posting balances
      without a rounding line except for sub-unit rounding differences.

Failure modes:
    - MissingAccountsError from the validator.
    - PostingNotComputableError when the grand total cannot be computed.
"""

from ledger_kernel.domain.dtos import LedgerPosting
from ledger_kernel.domain.posting import PostingDraft
from ledger_kernel.domain.values import Money
from ledger_kernel.exceptions import PostingNotComputableError
from ledger_kernel.logging_config import get_logger
from ledger_modules.stock_transfer.accounts import AccountValidator, SettingsProvider
from ledger_modules.stock_transfer.models import StockTransfer

logger = get_logger("modules.stock_transfer.posting")


class LedgerPostingBuilder:
    """Builds the LedgerPosting for a transfer's grand total."""

    def __init__(self, settings: SettingsProvider, validator: AccountValidator):
        self._settings = settings
        self._validator = validator

    def build_posting(self, transfer: StockTransfer) -> LedgerPosting:
        """
        Validate accounts, then debit and credit the grand total.

        Postconditions:
            - Outbound: Dr cost_of_goods_sold, Cr stock_in_hand.
            - Inbound: Dr stock_in_hand, Cr stock_received_but_not_billed.
            - The returned posting is balanced.
        """
        self._validator.validate_accounts(transfer)

        total = transfer.grand_total
        if total is None:
            raise PostingNotComputableError(str(transfer.id))

        rule = transfer.direction.rule
        debit_account = self._settings.setting_value(rule.debit_setting)
        credit_account = self._settings.setting_value(rule.credit_setting)
        amount = Money.of(total, transfer.currency)

        draft = PostingDraft(
            reference_type=rule.schema_name,
            reference_id=str(transfer.id),
            currency=transfer.currency,
        )
        draft.debit(debit_account, amount)
        draft.credit(credit_account, amount)
        posting = draft.make_round_off_entry(
            self._settings.setting_value("round_off_account"),
        )

        logger.info(
            "transfer_posting_built",
            extra={
                "transfer_id": str(transfer.id),
                "direction": transfer.direction.value,
                "debit_account": debit_account,
                "credit_account": credit_account,
                "amount": str(posting.total_debits()),
                "currency": posting.currency,
            },
        )
        return posting
