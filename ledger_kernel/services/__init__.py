"""Kernel services (write side)."""

from ledger_kernel.services.ledger_service import LedgerService

__all__ = ["LedgerService"]
