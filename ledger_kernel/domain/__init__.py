"""Pure domain layer of the ledger kernel: values, posting DTOs, clock."""
