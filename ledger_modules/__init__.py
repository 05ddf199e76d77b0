"""
Ledger Modules.

Document-level orchestration over the ledger kernel.  Each module contains:
- Domain models (the nouns)
- Pure helpers (calculations with no I/O)
- Workflows (state machines)
- ORM models and a service owning the transaction boundary

Modules:
- Stock transfer: shipments and purchase receipts, their ledger postings
  and the reconciliation of the invoices they were made against
"""
