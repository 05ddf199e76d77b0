"""Read-only query selectors."""

from ledger_kernel.selectors.account_selector import AccountSelector
from ledger_kernel.selectors.journal_selector import (
    JournalEntryRecord,
    JournalLineRecord,
    JournalSelector,
)

__all__ = [
    "AccountSelector",
    "JournalEntryRecord",
    "JournalLineRecord",
    "JournalSelector",
]
