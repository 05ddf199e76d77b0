"""
Account validation for stock transfers.

Before a transfer posts, every inventory setting its direction needs must
name an account, and that account must exist in the chart of accounts.
All problems are collected and reported in one ``MissingAccountsError`` so
the user can fix the settings in a single pass.
"""

from __future__ import annotations

from typing import Protocol

from ledger_kernel.exceptions import MissingAccountsError
from ledger_kernel.logging_config import get_logger
from ledger_modules.stock_transfer.models import StockTransfer

logger = get_logger("modules.stock_transfer.accounts")


class SettingsProvider(Protocol):
    """Read access to inventory settings."""

    def setting_value(self, name: str) -> str | None: ...

    def setting_label(self, name: str) -> str: ...


class AccountLookup(Protocol):
    """Existence check against the chart of accounts."""

    def account_exists(self, code: str) -> bool: ...


class AccountValidator:
    """Checks the accounts a transfer's direction requires."""

    def __init__(self, settings: SettingsProvider, accounts: AccountLookup):
        self._settings = settings
        self._accounts = accounts

    def validate_accounts(self, transfer: StockTransfer) -> None:
        """
        Raise ``MissingAccountsError`` listing every unset or unknown account.

        Settings are checked in the order the direction lists them, so the
        messages come out ``stock_in_hand`` first.
        """
        messages: list[str] = []
        for name in transfer.direction.rule.required_settings:
            value = self._settings.setting_value(name)
            if not value:
                label = self._settings.setting_label(name)
                messages.append(f"{label} account not set in Inventory Settings.")
            elif not self._accounts.account_exists(value):
                messages.append(f"Account {value} does not exist.")

        if messages:
            logger.warning(
                "transfer_accounts_invalid",
                extra={
                    "transfer_id": str(transfer.id),
                    "direction": transfer.direction.value,
                    "messages": messages,
                },
            )
            raise MissingAccountsError(messages)
