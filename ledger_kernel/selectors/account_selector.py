"""
Module: ledger_kernel.selectors.account_selector
Responsibility: Read access to the chart of accounts.  Implements the
    account-existence lookup consumed by the stock transfer AccountValidator.
"""

from sqlalchemy import exists, select

from ledger_kernel.models.account import Account
from ledger_kernel.selectors.base import BaseSelector


class AccountSelector(BaseSelector):
    """Queries over the ``accounts`` table."""

    def account_exists(self, code: str) -> bool:
        """True if an account with this code exists (active or not)."""
        return bool(
            self.session.execute(
                select(exists().where(Account.code == code))
            ).scalar()
        )

