"""
Module ORM Registry (``ledger_modules._orm_registry``).

Responsibility
--------------
Ensure the kernel and module SQLAlchemy ORM models are imported so that
``Base.metadata`` contains their table definitions before tables are
created, and provide ``create_all_tables()`` as the single entry point
that does both.

Architecture position
---------------------
**Modules layer** -- utility.  Imports from ``ledger_modules`` packages and
from ``ledger_kernel.db.engine`` (allowed: modules -> kernel).  MUST NOT be
imported by ``ledger_kernel``.
"""


def import_all_orm_models() -> None:
    """Import kernel models and every module ``orm`` to register their tables.

    This function is idempotent -- repeated calls are harmless.
    """
    import ledger_kernel.models  # noqa: F401
    import ledger_modules.stock_transfer.orm  # noqa: F401


def create_all_tables() -> None:
    """Create kernel and module tables.

    Preconditions:
        Engine must be initialized via ``init_engine_from_url()``.
    """
    from ledger_kernel.db.engine import create_tables

    import_all_orm_models()
    create_tables()
