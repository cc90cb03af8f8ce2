"""
Exceptions for the bank ledger.

All ledger errors derive from ValueError so callers that only care about
"bad request" can keep catching ValueError.
"""


class LedgerError(ValueError):
    """Base exception for all ledger errors."""


class ValidationError(LedgerError):
    """Raised when an input value is malformed."""


class InsufficientFundsError(LedgerError):
    """Raised when a withdrawal exceeds the available balance."""


class InvalidStateError(LedgerError):
    """Raised when an operation is not allowed in the current status."""
