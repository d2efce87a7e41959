class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class NotFoundError(DomainError):
    """Raised when a tenant-scoped record does not exist."""


class DataAccessError(DomainError):
    """Raised when the record store cannot be reached or a query fails."""
