"""
Ledger Kernel

Double-entry posting core shared by the ledger modules:
- Typed errors with machine-readable codes
- Structured JSON logging
- Money values and balanced postings with an explicit rounding entry
- SQLAlchemy persistence for the chart of accounts and the journal
"""

__version__ = "0.1.0"
