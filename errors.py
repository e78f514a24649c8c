"""Typed failures raised by the ledger services."""


class LedgerError(Exception):
    """Base class for every failure a ledger operation reports."""

    status_code = 400

    def __init__(self, message):
        super().__init__(message)
        self.message = message


class ValidationError(LedgerError):
    """Bad input: missing field, non-positive amount, invalid odds or status."""

    status_code = 400


class NotFoundError(LedgerError):
    """A referenced account or bet does not exist."""

    status_code = 404


class InsufficientFundsError(LedgerError):
    """A withdrawal or transfer exceeds the available balance."""

    status_code = 422


class ConflictError(LedgerError):
    """The operation would break a referential or state invariant."""

    status_code = 409
