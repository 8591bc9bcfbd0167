class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class AuthenticationError(DomainError):
    """Raised when login credentials are invalid."""


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""


class UnknownStudentError(ValidationError):
    """Raised when a student identifier has no directory entry."""


class PersistenceError(DomainError):
    """Raised when the database rejects or fails a read/write.

    The operation that raised it must be treated as NOT saved.
    """


class DuplicateRecordError(PersistenceError):
    """Raised on a unique key violation."""


class ConcurrencyConflict(DomainError):
    """Raised when a conditional write lost against a concurrent writer."""
