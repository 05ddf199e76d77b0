"""
Typed Exception Hierarchy for the Ledger Kernel.

===============================================================================
WHY TYPED EXCEPTIONS
===============================================================================

Callers must be able to tell a missing ledger account from a stale invoice
without parsing message strings.  Every error therefore has:
  1. A TYPED exception class (catch by type, not message)
  2. A CODE class attribute (machine-readable, API-safe)
  3. Structured DATA attributes (not just a message string)

Example - WRONG way to handle errors:
    try:
        service.submit(transfer_id, actor_id)
    except Exception as e:
        if "account not set" in str(e):  # FRAGILE
            open_inventory_settings()

Example - RIGHT way:
    try:
        service.submit(transfer_id, actor_id)
    except MissingAccountsError as e:
        show_settings_dialog(e.messages)

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

    LedgerKernelError (base)
    |
    +-- ConfigurationError
    |   +-- MissingAccountsError
    |
    +-- PostingError
    |   +-- UnbalancedEntryError
    |   +-- RoundingAccountNotFoundError
    |   +-- PostingNotComputableError
    |
    +-- DocumentError
    |   +-- DocumentNotFoundError
    |
    +-- LifecycleError
    |   +-- InvalidTransitionError
    |
    +-- ConcurrencyError
        +-- OptimisticLockError

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Category        | Code                        | When Raised
----------------|-----------------------------|-----------------------------------------
Configuration   | MISSING_ACCOUNTS            | Required ledger accounts unset/unknown
----------------|-----------------------------|-----------------------------------------
Posting         | UNBALANCED_ENTRY            | Debits != Credits beyond tolerance
                | ROUNDING_ACCOUNT_NOT_FOUND  | Rounding needed, no round-off account
                | POSTING_NOT_COMPUTABLE      | Submit with an incomputable total
----------------|-----------------------------|-----------------------------------------
Document        | DOCUMENT_NOT_FOUND          | Transfer/invoice id doesn't exist
----------------|-----------------------------|-----------------------------------------
Lifecycle       | INVALID_TRANSITION          | e.g. cancel a Draft, submit twice
----------------|-----------------------------|-----------------------------------------
Concurrency     | OPTIMISTIC_LOCK_CONFLICT    | Invoice modified by another transaction

Persistence failures raised by SQLAlchemy are NOT wrapped.  They propagate
unchanged after the owning service rolls back its transaction.
"""


class LedgerKernelError(Exception):
    """
    Base exception for all ledger kernel errors.

    All subclasses must have a `code` class attribute for machine-readable
    error identification.
    """

    code: str = "LEDGER_KERNEL_ERROR"


# Configuration-related exceptions


class ConfigurationError(LedgerKernelError):
    """Base exception for ledger configuration errors."""

    code: str = "CONFIGURATION_ERROR"


class MissingAccountsError(ConfigurationError):
    """
    One or more ledger accounts required for a posting are unset or unknown.

    Carries every problem found, not just the first, so the user can fix
    the inventory settings in one pass.
    """

    code: str = "MISSING_ACCOUNTS"

    def __init__(self, messages: list[str]):
        self.messages = list(messages)
        super().__init__(" ".join(self.messages))


# Posting-related exceptions


class PostingError(LedgerKernelError):
    """Base exception for posting-related errors."""

    code: str = "POSTING_ERROR"


class UnbalancedEntryError(PostingError):
    """Posting debits do not equal credits."""

    code: str = "UNBALANCED_ENTRY"

    def __init__(self, debits: str, credits: str, currency: str):
        self.debits = debits
        self.credits = credits
        self.currency = currency
        super().__init__(
            f"Unbalanced entry in {currency}: debits={debits}, credits={credits}"
        )


class RoundingAccountNotFoundError(PostingError):
    """A rounding entry is required but no round-off account is configured."""

    code: str = "ROUNDING_ACCOUNT_NOT_FOUND"

    def __init__(self, currency: str):
        self.currency = currency
        super().__init__(f"No round-off account configured for {currency}")


class PostingNotComputableError(PostingError):
    """The document total cannot be computed, so nothing can be posted."""

    code: str = "POSTING_NOT_COMPUTABLE"

    def __init__(self, document_id: str):
        self.document_id = document_id
        super().__init__(
            f"Cannot post {document_id}: every line needs a rate and a quantity"
        )


# Document-related exceptions


class DocumentError(LedgerKernelError):
    """Base exception for document lookup errors."""

    code: str = "DOCUMENT_ERROR"


class DocumentNotFoundError(DocumentError):
    """Document with given schema and id was not found."""

    code: str = "DOCUMENT_NOT_FOUND"

    def __init__(self, schema_name: str, document_id: str):
        self.schema_name = schema_name
        self.document_id = document_id
        super().__init__(f"{schema_name} not found: {document_id}")


# Lifecycle-related exceptions


class LifecycleError(LedgerKernelError):
    """Base exception for document lifecycle errors."""

    code: str = "LIFECYCLE_ERROR"


class InvalidTransitionError(LifecycleError):
    """The requested action is not allowed from the document's status."""

    code: str = "INVALID_TRANSITION"

    def __init__(self, document_id: str, from_status: str, action: str):
        self.document_id = document_id
        self.from_status = from_status
        self.action = action
        super().__init__(
            f"Cannot {action} document {document_id} in status '{from_status}'"
        )


# Concurrency-related exceptions


class ConcurrencyError(LedgerKernelError):
    """Base exception for concurrency-related errors."""

    code: str = "CONCURRENCY_ERROR"


class OptimisticLockError(ConcurrencyError):
    """Optimistic locking conflict detected."""

    code: str = "OPTIMISTIC_LOCK_CONFLICT"

    def __init__(self, entity_type: str, entity_id: str):
        self.entity_type = entity_type
        self.entity_id = entity_id
        super().__init__(
            f"Optimistic lock conflict on {entity_type} {entity_id}: "
            "entity was modified by another transaction"
        )
