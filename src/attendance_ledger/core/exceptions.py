class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class NotFoundError(DomainError):
    """Raised when a referenced employee does not exist."""


class NoActiveSessionError(DomainError):
    """Raised when clocking out without a record for today."""


class ActionInProgressError(DomainError):
    """Raised when another mutating call for the same employee is still running."""


class StoreFailureError(DomainError):
    """Raised when the record store cannot complete a read or write."""

    def __init__(self, message: str, *, retryable: bool = False):
        super().__init__(message)
        self.retryable = retryable


class DuplicateRecordError(StoreFailureError):
    """Raised when an insert collides with an existing (employee, date) record."""
