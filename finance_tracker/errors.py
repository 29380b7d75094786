"""
Ledger error hierarchy.

Every failure of a core operation is one of these. They are raised to the
caller, never printed: the console decides how to present them.
"""


class LedgerError(Exception):
    """Base exception for ledger store operations."""
    pass


class ValidationError(LedgerError):
    """Malformed or out-of-range input (date, amount, month, blank name)."""
    pass


class NotFoundError(LedgerError):
    """An id does not resolve in its store."""
    pass


class ReferentialIntegrityError(LedgerError):
    """Operation would break a foreign-key or uniqueness invariant."""
    pass
